"""
explorer.store
--------------
The tree store: sole owner of a mutable node tree and the only sanctioned
mutation surface.

Every lookup is a depth-first walk from the root (first match wins). Every
mutation validates before touching the tree, so a refused operation never
leaves a partial edit behind. Logical failures come back as OperationResult
values; only storage trouble is exceptional.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from datetime import datetime
from typing import Callable

from .errors import ErrorKind, ExplorerError, OperationResult
from .models import ROOT_ID, FileNode, FolderNode, utcnow
from .seed import initial_tree
from .storage import TreeStorage
from .tree import FolderStats, folder_stats, iter_files, iter_nodes, sort_nodes
from .validation import validate_name, validate_unique_name_in_folder

logger = logging.getLogger(__name__)

AnyNode = FileNode | FolderNode

# Placeholder byte count per name character for files created without a size.
# This is an estimate, not a measured content length.
ESTIMATED_BYTES_PER_CHAR = 8


def generate_id(prefix: str) -> str:
    """Build an id like ``file-18c5f0a1b2c-3f9a1c2d7``."""
    timestamp = format(int(time.time() * 1000), "x")
    return f"{prefix}-{timestamp}-{uuid.uuid4().hex[:9]}"


def estimate_size(name: str) -> int:
    return len(name) * ESTIMATED_BYTES_PER_CHAR


class TreeStore:
    """
    Owns one node tree rooted at the folder with id "root".

    Args:
        root (FolderNode | None): Tree to manage. Defaults to the demo tree.
        storage (TreeStorage | None): Optional collaborator; every successful
            mutation saves the whole tree through it.
        clock (Callable[[], datetime] | None): Source of "now" for timestamps.
    """

    def __init__(
        self,
        root: FolderNode | None = None,
        storage: TreeStorage | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.root: FolderNode = root if root is not None else initial_tree()
        self.storage = storage
        self._clock = clock or utcnow
        self._lock = threading.RLock()

    @classmethod
    def open(
        cls,
        storage: TreeStorage,
        seed: FolderNode | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> TreeStore:
        """Load the tree from ``storage``, falling back to ``seed`` (or the demo tree)."""
        store = cls(root=seed, storage=storage, clock=clock)
        store.refresh()
        return store

    def refresh(self) -> None:
        """Replace the in-memory tree with the stored one, if any."""
        if self.storage is None:
            return
        try:
            loaded = self.storage.load()
        except ExplorerError as exc:
            logger.warning(f"Failed to load tree, keeping current data: {exc}")
            return
        if loaded is None:
            logger.info("No stored tree found, using initial data")
            return
        if loaded.id != ROOT_ID:
            logger.warning(f"Stored tree has root id {loaded.id!r}, keeping current data")
            return
        with self._lock:
            self.root = loaded
        logger.info("Loaded tree from storage")

    # ------------------------------------------------------------------
    # lookups

    def find_node(self, node_id: str) -> AnyNode | None:
        with self._lock:
            return self._find(node_id, self.root)

    def find_folder(self, folder_id: str) -> FolderNode | None:
        node = self.find_node(folder_id)
        return node if node is not None and node.type == "folder" else None

    def find_file(self, file_id: str) -> FileNode | None:
        node = self.find_node(file_id)
        return node if node is not None and node.type == "file" else None

    def find_parent_folder(self, node_id: str) -> FolderNode | None:
        with self._lock:
            node = self.find_node(node_id)
            if node is None or not node.parent_id:
                return None
            return self.find_folder(node.parent_id)

    def _find(self, node_id: str, current: AnyNode) -> AnyNode | None:
        if current.id == node_id:
            return current
        if current.type == "folder":
            for child in current.children:
                found = self._find(node_id, child)
                if found is not None:
                    return found
        return None

    # ------------------------------------------------------------------
    # queries

    def get_all_files(self) -> list[FileNode]:
        with self._lock:
            return list(iter_files(self.root))

    def get_recent_files(self, limit: int = 10) -> list[FileNode]:
        """Most recently modified files first. Ties keep tree order."""
        if limit <= 0:
            return []
        files = self.get_all_files()
        # sorted() is stable, reverse=True included
        return sorted(files, key=lambda f: f.modified_at, reverse=True)[:limit]

    def search_nodes(self, query: str, limit: int | None = None) -> list[AnyNode]:
        """Case-insensitive substring match on names. A blank query matches nothing."""
        term = (query or "").strip().lower()
        if not term:
            return []
        with self._lock:
            results = [node for node in iter_nodes(self.root) if term in node.name.lower()]
        if limit is not None:
            results = results[: max(limit, 0)]
        return results

    def search_files(self, query: str) -> list[FileNode]:
        return [node for node in self.search_nodes(query) if node.type == "file"]

    def list_children(self, folder_id: str, sort: bool = False) -> list[AnyNode] | None:
        with self._lock:
            folder = self.find_folder(folder_id)
            if folder is None:
                return None
            children = list(folder.children)
        return sort_nodes(children) if sort else children

    def get_node_path(self, node_id: str) -> list[FolderNode] | None:
        """Folders from the root down to the node's parent (breadcrumb trail)."""
        with self._lock:
            node = self.find_node(node_id)
            if node is None:
                return None
            trail: list[FolderNode] = []
            parent = self.find_folder(node.parent_id) if node.parent_id else None
            while parent is not None:
                trail.append(parent)
                parent = self.find_folder(parent.parent_id) if parent.parent_id else None
        trail.reverse()
        return trail

    def get_display_path(self, node_id: str) -> str | None:
        """Human-readable path like "Documents / Nested Folder / a.txt" (root name omitted)."""
        with self._lock:
            node = self.find_node(node_id)
            trail = self.get_node_path(node_id)
        if node is None or trail is None:
            return None
        names = [folder.name for folder in trail if folder.id != ROOT_ID]
        names.append(node.name)
        return " / ".join(names)

    def is_descendant(self, node_id: str, ancestor_id: str) -> bool:
        if node_id == ancestor_id:
            return False
        trail = self.get_node_path(node_id) or []
        return any(folder.id == ancestor_id for folder in trail)

    def folder_stats(self, folder_id: str) -> FolderStats | None:
        with self._lock:
            folder = self.find_folder(folder_id)
            return folder_stats(folder) if folder is not None else None

    def count_nodes(self) -> int:
        with self._lock:
            return sum(1 for _ in iter_nodes(self.root))

    # ------------------------------------------------------------------
    # mutations

    def create_file(
        self,
        parent_id: str,
        name: str,
        size: int | None = None,
        data: str | None = None,
        url: str | None = None,
    ) -> OperationResult:
        """
        Create a file under ``parent_id``.
        When ``size`` is None it is estimated from the name length; callers
        uploading real content should pass the measured size.
        """
        with self._lock:
            parent, failure = self._check_new_child(parent_id, name)
            if failure is not None:
                return failure
            now = self._clock()
            file_id = self._new_id("file")
            node = FileNode(
                id=file_id,
                name=name,
                size=size if size is not None else estimate_size(name),
                data=data,
                url=url,
                created_at=now,
                modified_at=now,
                parent_id=parent.id,
            )
            parent.children.append(node)
            parent.modified_at = now
            logger.info(f"Created file {name!r} ({file_id}) in {parent.id}")
            self._persist()
            return OperationResult.ok(file_id)

    def create_folder(self, parent_id: str, name: str) -> OperationResult:
        with self._lock:
            parent, failure = self._check_new_child(parent_id, name)
            if failure is not None:
                return failure
            now = self._clock()
            folder_id = self._new_id("folder")
            node = FolderNode(
                id=folder_id,
                name=name,
                children=[],
                created_at=now,
                modified_at=now,
                parent_id=parent.id,
            )
            parent.children.append(node)
            parent.modified_at = now
            logger.info(f"Created folder {name!r} ({folder_id}) in {parent.id}")
            self._persist()
            return OperationResult.ok(folder_id)

    def delete_node(self, node_id: str) -> OperationResult:
        """Remove a node; a folder takes its whole subtree with it."""
        if node_id == ROOT_ID:
            return self._refuse(ErrorKind.PROTECTED, "Cannot delete root folder")
        with self._lock:
            parent = self.find_parent_folder(node_id)
            if parent is None:
                return self._refuse(ErrorKind.NOT_FOUND, "Parent folder not found")
            index = next((i for i, child in enumerate(parent.children) if child.id == node_id), None)
            if index is None:
                return self._refuse(ErrorKind.NOT_FOUND, "Node not found in parent folder")
            removed = parent.children.pop(index)
            parent.modified_at = self._clock()
            logger.info(f"Deleted {removed.type} {removed.name!r} ({node_id}) from {parent.id}")
            self._persist()
            return OperationResult.ok()

    def rename_node(self, node_id: str, new_name: str) -> OperationResult:
        """Rename a node. The parent folder's modification time follows the node's."""
        with self._lock:
            node = self.find_node(node_id)
            if node is None:
                return self._refuse(ErrorKind.NOT_FOUND, "Node not found")
            if node_id == ROOT_ID:
                return self._refuse(ErrorKind.PROTECTED, "Cannot rename root folder")
            name_check = validate_name(new_name)
            if not name_check.is_valid:
                return self._refuse(ErrorKind.VALIDATION, name_check.message())
            parent = self.find_parent_folder(node_id)
            if parent is None:
                return self._refuse(ErrorKind.NOT_FOUND, "Parent folder not found")
            unique_check = validate_unique_name_in_folder(new_name, parent, exclude_id=node_id)
            if not unique_check.is_valid:
                return self._refuse(ErrorKind.CONFLICT, unique_check.message())

            old_name = node.name
            now = self._clock()
            node.name = new_name
            node.modified_at = now
            parent.modified_at = now
            logger.info(f"Renamed {node.type} {old_name!r} -> {new_name!r} ({node_id})")
            self._persist()
            return OperationResult.ok(node_id)

    def move_node(self, node_id: str, target_folder_id: str) -> OperationResult:
        """Re-parent a node under ``target_folder_id``, keeping its id and name."""
        if node_id == ROOT_ID:
            return self._refuse(ErrorKind.PROTECTED, "Cannot move root folder")
        with self._lock:
            node = self.find_node(node_id)
            if node is None:
                return self._refuse(ErrorKind.NOT_FOUND, "Node not found")
            target = self.find_folder(target_folder_id)
            if target is None:
                return self._refuse(ErrorKind.NOT_FOUND, "Target folder not found")
            if target.id == node.parent_id:
                return OperationResult.ok(node_id)
            if target.id == node.id or self.is_descendant(target.id, node.id):
                return self._refuse(ErrorKind.VALIDATION, "Cannot move a folder into itself")
            source = self.find_parent_folder(node_id)
            if source is None:
                return self._refuse(ErrorKind.NOT_FOUND, "Parent folder not found")
            unique_check = validate_unique_name_in_folder(node.name, target)
            if not unique_check.is_valid:
                return self._refuse(ErrorKind.CONFLICT, unique_check.message())

            now = self._clock()
            source.children = [child for child in source.children if child.id != node_id]
            target.children.append(node)
            node.parent_id = target.id
            source.modified_at = now
            target.modified_at = now
            logger.info(f"Moved {node.type} {node.name!r} ({node_id}) from {source.id} to {target.id}")
            self._persist()
            return OperationResult.ok(node_id)

    # ------------------------------------------------------------------
    # helpers

    def _check_new_child(
        self, parent_id: str, name: str
    ) -> tuple[FolderNode | None, OperationResult | None]:
        parent = self.find_folder(parent_id)
        if parent is None:
            return None, self._refuse(ErrorKind.NOT_FOUND, "Parent folder not found")
        name_check = validate_name(name)
        if not name_check.is_valid:
            return None, self._refuse(ErrorKind.VALIDATION, name_check.message())
        unique_check = validate_unique_name_in_folder(name, parent)
        if not unique_check.is_valid:
            return None, self._refuse(ErrorKind.CONFLICT, unique_check.message())
        return parent, None

    def _new_id(self, prefix: str) -> str:
        while True:
            candidate = generate_id(prefix)
            if self._find(candidate, self.root) is None:
                return candidate

    def _refuse(self, kind: ErrorKind, message: str) -> OperationResult:
        logger.warning(f"Refused tree mutation ({kind.value}): {message}")
        return OperationResult.fail(kind, message)

    def _persist(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.save(self.root)
        except ExplorerError as exc:
            # the in-memory change stands; the next successful save catches up
            logger.warning(f"Failed to save tree: {exc}")


__all__ = ["ESTIMATED_BYTES_PER_CHAR", "TreeStore", "estimate_size", "generate_id"]
