import json
import os

import pytest

from explorer.errors import StorageError, TreeDataError
from explorer.models import ROOT_ID, load_tree_text, node_from_document, node_to_document
from explorer.seed import initial_tree, load_seed_file
from explorer.storage import JsonFileStorage, MemoryStorage, dump_tree, parse_tree
from explorer.store import TreeStore


def test_document_round_trip_is_identical(store):
    store.create_folder("folder-1", "Drafts")
    store.rename_node("file-3", "beach.jpg")
    document = node_to_document(store.root)
    reloaded = node_from_document(json.loads(json.dumps(document)))
    assert reloaded == store.root
    assert node_to_document(reloaded) == document


def test_document_uses_camel_case_and_omits_empty_fields():
    document = node_to_document(initial_tree())
    assert "parentId" not in document
    assert document["createdAt"] == "2024-01-01T10:00:00Z"
    report = document["children"][0]["children"][0]
    assert report == {
        "type": "file",
        "id": "file-1",
        "name": "report.pdf",
        "createdAt": "2024-01-01T11:00:00Z",
        "modifiedAt": "2024-01-01T11:00:00Z",
        "parentId": "folder-1",
        "size": 1024000,
    }


def test_node_from_document_rejects_garbage():
    with pytest.raises(TreeDataError):
        node_from_document({"id": "root", "name": "x"})
    with pytest.raises(TreeDataError):
        node_from_document(["not", "a", "mapping"])


def test_load_tree_text_reads_yaml_and_json():
    from_json = load_tree_text(dump_tree(initial_tree()))
    from_yaml = load_tree_text(
        "id: root\nname: Home\ntype: folder\ncreatedAt: '2024-01-01T00:00:00Z'\nmodifiedAt: '2024-01-01T00:00:00Z'\n"
    )
    assert from_json == initial_tree()
    assert from_yaml.name == "Home"
    assert from_yaml.children == []


def test_parse_tree_invalid_json():
    with pytest.raises(TreeDataError):
        parse_tree("{not json")


def test_memory_storage_round_trip():
    storage = MemoryStorage()
    assert storage.load() is None
    storage.save(initial_tree())
    assert storage.load() == initial_tree()


def test_json_file_storage(tmp_path):
    path = tmp_path / "nested" / "tree.json"
    storage = JsonFileStorage(path)
    assert storage.load() is None
    storage.save(initial_tree())
    assert json.loads(path.read_text())["id"] == ROOT_ID
    assert storage.load() == initial_tree()
    assert [p.name for p in path.parent.iterdir()] == ["tree.json"]


def test_json_file_storage_failed_write_leaves_no_temp_file(tmp_path, monkeypatch):
    def refuse(src, dst):
        raise OSError("read-only")

    monkeypatch.setattr(os, "replace", refuse)
    storage = JsonFileStorage(tmp_path / "tree.json")
    with pytest.raises(StorageError):
        storage.save(initial_tree())
    assert list(tmp_path.iterdir()) == []


def test_json_file_storage_unreadable(tmp_path):
    storage = JsonFileStorage(tmp_path)  # a directory, not a file
    with pytest.raises(StorageError):
        storage.load()


def test_store_saves_after_each_mutation(clock):
    storage = MemoryStorage()
    store = TreeStore(storage=storage, clock=clock)
    result = store.create_folder(ROOT_ID, "Music")
    assert storage.load().children[-1].id == result.node_id
    store.delete_node(result.node_id)
    assert all(child.id != result.node_id for child in storage.load().children)


def test_refused_mutation_does_not_save():
    storage = MemoryStorage()
    store = TreeStore(storage=storage)
    store.delete_node(ROOT_ID)
    assert storage.document is None


def test_open_prefers_stored_tree(clock):
    storage = MemoryStorage()
    first = TreeStore(storage=storage, clock=clock)
    created = first.create_file("folder-3", "kept.txt").node_id

    second = TreeStore.open(storage, clock=clock)
    assert second.find_file(created).name == "kept.txt"


def test_open_falls_back_to_seed_on_bad_document():
    store = TreeStore.open(MemoryStorage("{broken"))
    assert store.root == initial_tree()


def test_open_with_custom_seed(tmp_path):
    seed_path = tmp_path / "seed.yaml"
    seed_path.write_text(
        "id: root\nname: Team\ntype: folder\ncreatedAt: '2024-02-01T00:00:00Z'\nmodifiedAt: '2024-02-01T00:00:00Z'\n"
    )
    store = TreeStore.open(JsonFileStorage(tmp_path / "absent.json"), seed=load_seed_file(seed_path))
    assert store.root.name == "Team"


def test_save_failure_keeps_change_in_memory():
    class BrokenStorage(MemoryStorage):
        def save(self, root):
            raise StorageError("disk full")

    store = TreeStore(storage=BrokenStorage())
    result = store.create_folder(ROOT_ID, "Offline")
    assert result.success
    assert store.find_folder(result.node_id) is not None


def test_timestamps_without_offset_are_read_as_utc(tmp_path, clock):
    seed_path = tmp_path / "seed.yaml"
    seed_path.write_text(
        "id: root\nname: Team\ntype: folder\ncreatedAt: '2024-01-01T00:00:00'\nmodifiedAt: '2024-01-01T00:00:00'\n"
        "children:\n"
        "  - id: a\n    name: a.txt\n    type: file\n    parentId: root\n"
        "    createdAt: '2024-01-01T00:00:00'\n    modifiedAt: '2024-01-01T00:00:00'\n"
    )
    store = TreeStore.open(MemoryStorage(), seed=load_seed_file(seed_path), clock=clock)
    assert store.find_file("a").modified_at.tzinfo is not None

    created = store.create_file(ROOT_ID, "b.txt").node_id
    assert [node.id for node in store.get_recent_files(5)] == [created, "a"]
