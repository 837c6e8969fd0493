"""Walks and summaries over an in-memory node tree."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from .models import FileNode, FolderNode

_DIGITS = re.compile(r"(\d+)")


@dataclass
class FolderStats:
    """Recursive totals for a folder."""

    size: int = 0
    files: int = 0
    folders: int = 0


def iter_nodes(node: FileNode | FolderNode) -> Iterator[FileNode | FolderNode]:
    """Yield ``node`` and every descendant, depth-first, parents before children."""
    yield node
    if node.type == "folder":
        for child in node.children:
            yield from iter_nodes(child)


def iter_files(node: FileNode | FolderNode) -> Iterator[FileNode]:
    for item in iter_nodes(node):
        if item.type == "file":
            yield item


def folder_stats(folder: FolderNode) -> FolderStats:
    stats = FolderStats()
    for child in folder.children:
        if child.type == "file":
            stats.files += 1
            stats.size += child.size or 0
        else:
            nested = folder_stats(child)
            stats.folders += 1 + nested.folders
            stats.files += nested.files
            stats.size += nested.size
    return stats


def natural_key(name: str) -> list:
    """Case-insensitive key that orders "file2" before "file10"."""
    # odd indices are the captured digit runs
    return [int(part) if i % 2 else part.casefold() for i, part in enumerate(_DIGITS.split(name))]


def sort_nodes(nodes: list[FileNode | FolderNode]) -> list[FileNode | FolderNode]:
    """Folders first, then files, each group in natural name order."""
    return sorted(nodes, key=lambda node: (node.type != "folder", natural_key(node.name)))


__all__ = [
    "FolderStats",
    "folder_stats",
    "iter_files",
    "iter_nodes",
    "natural_key",
    "sort_nodes",
]
