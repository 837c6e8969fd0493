import pytest

from explorer.file_types import (
    format_file_size,
    get_file_extension,
    get_file_type_info,
    get_files_by_category,
    is_image_name,
)


@pytest.mark.parametrize(
    "name, expected",
    [("report.PDF", "pdf"), ("archive.tar.gz", "gz"), ("Makefile", ""), ("trailing.", "")],
)
def test_get_file_extension(name, expected):
    assert get_file_extension(name) == expected


def test_type_info_categories():
    assert get_file_type_info("photo.jpeg").category == "image"
    assert get_file_type_info("song.flac").category == "audio"
    assert get_file_type_info("deck.pptx").category == "document"
    assert get_file_type_info("main.tsx").category == "code"
    unknown = get_file_type_info("data.bin")
    assert unknown.category == "other"
    assert unknown.extensions == ("bin",)


def test_is_image_name():
    assert is_image_name("diagram.PNG")
    assert not is_image_name("notes.txt")


def test_files_by_category(store):
    images = get_files_by_category(store.get_all_files(), "image")
    assert [node.name for node in images] == ["photo.jpg", "diagram.png"]
    folders_ignored = get_files_by_category([store.find_folder("folder-2")], "image")
    assert folders_ignored == []


@pytest.mark.parametrize(
    "size, expected",
    [(None, "Unknown size"), (0, "Unknown size"), (512, "512 B"), (1536, "1.5 KB"), (1024000, "1000.0 KB"),
     (2048000, "2.0 MB"), (5 * 1024 ** 4, "5.0 TB")],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected
