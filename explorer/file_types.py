"""File type categories and human-readable sizes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

from .models import FileNode

FileCategory = Literal["image", "video", "audio", "document", "code", "archive", "text", "other"]


@dataclass(frozen=True)
class FileTypeInfo:
    category: FileCategory
    icon: str
    extensions: tuple[str, ...]


def _group(category: FileCategory, icon: str, *extensions: str) -> dict[str, FileTypeInfo]:
    info = FileTypeInfo(category, icon, extensions)
    return {ext: info for ext in extensions}


FILE_TYPE_MAP: dict[str, FileTypeInfo] = {
    **_group("image", "🖼️", "jpg", "jpeg"),
    **_group("image", "🖼️", "png"),
    **_group("image", "🖼️", "gif"),
    **_group("image", "🖼️", "svg"),
    **_group("image", "🖼️", "webp"),
    **_group("video", "🎬", "mp4"),
    **_group("video", "🎬", "avi"),
    **_group("video", "🎬", "mov"),
    **_group("video", "🎬", "webm"),
    **_group("video", "🎬", "mkv"),
    **_group("audio", "🎵", "mp3"),
    **_group("audio", "🎵", "wav"),
    **_group("audio", "🎵", "flac"),
    **_group("audio", "🎵", "ogg"),
    **_group("document", "📄", "pdf"),
    **_group("document", "📘", "doc", "docx"),
    **_group("document", "📊", "xls", "xlsx"),
    **_group("document", "📋", "ppt", "pptx"),
    **_group("code", "⚡", "js"),
    **_group("code", "⚡", "ts"),
    **_group("code", "⚛️", "jsx"),
    **_group("code", "⚛️", "tsx"),
    **_group("code", "🌐", "html", "htm"),
    **_group("code", "🎨", "css"),
    **_group("code", "🎨", "scss", "sass"),
    **_group("code", "⚙️", "json"),
    **_group("code", "⚙️", "xml"),
    **_group("text", "📝", "txt"),
    **_group("text", "📝", "md", "markdown"),
    **_group("archive", "🗜️", "zip"),
    **_group("archive", "🗜️", "rar"),
    **_group("archive", "🗜️", "tar", "gz"),
}

_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def get_file_extension(filename: str) -> str:
    """Lower-cased text after the last period, or "" when there is none."""
    parts = filename.split(".")
    return parts[-1].lower() if len(parts) > 1 else ""


def get_file_type_info(filename: str) -> FileTypeInfo:
    extension = get_file_extension(filename)
    return FILE_TYPE_MAP.get(extension) or FileTypeInfo("other", "📄", (extension,))


def is_file_category(filename: str, category: FileCategory) -> bool:
    return get_file_type_info(filename).category == category


def is_image_name(filename: str) -> bool:
    return is_file_category(filename, "image")


def get_files_by_category(nodes: Iterable, category: FileCategory) -> list[FileNode]:
    return [node for node in nodes if node.type == "file" and is_file_category(node.name, category)]


def format_file_size(size: int | None) -> str:
    if not size:
        return "Unknown size"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{int(value)} {_SIZE_UNITS[unit]}"
    return f"{value:.1f} {_SIZE_UNITS[unit]}"


__all__ = [
    "FILE_TYPE_MAP",
    "FileCategory",
    "FileTypeInfo",
    "format_file_size",
    "get_file_extension",
    "get_file_type_info",
    "get_files_by_category",
    "is_file_category",
    "is_image_name",
]
