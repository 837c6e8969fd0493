"""
explorer.storage
----------------
Load/save collaborators for the tree store.

The whole tree is persisted as one JSON document rooted at the folder with
id "root". There are no partial updates and no schema versioning.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from .errors import StorageError, TreeDataError
from .models import FolderNode, node_from_document, node_to_document

logger = logging.getLogger(__name__)


class TreeStorage(Protocol):
    """Interface Protocol for tree persistence backends."""

    def load(self) -> FolderNode | None:
        """Return the stored tree, or None when nothing has been saved yet."""
        ...

    def save(self, root: FolderNode) -> None: ...


def dump_tree(root: FolderNode) -> str:
    return json.dumps(node_to_document(root))


def parse_tree(text: str) -> FolderNode:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TreeDataError(f"Stored tree is not valid JSON: {exc}") from exc
    return node_from_document(document)


class MemoryStorage:
    """
    Keeps the serialized document in memory, like a browser's localStorage slot.
    Useful for tests and for running the daemon without a data file.
    """

    def __init__(self, document: str | None = None):
        self.document = document

    def load(self) -> FolderNode | None:
        if self.document is None:
            return None
        return parse_tree(self.document)

    def save(self, root: FolderNode) -> None:
        self.document = dump_tree(root)


class JsonFileStorage:
    """
    Stores the tree as a single JSON file.

    Args:
        path (str | Path): Location of the JSON document. Parent directories
            are created on first save.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def load(self) -> FolderNode | None:
        if not self.path.exists():
            logger.info(f"No tree document at {self.path}")
            return None
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc
        root = parse_tree(text)
        logger.debug(f"Loaded tree document from {self.path}")
        return root

    def save(self, root: FolderNode) -> None:
        text = dump_tree(root)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # write to a sibling temp file, then swap it in
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc
        logger.debug(f"Saved tree document to {self.path}")


__all__ = [
    "JsonFileStorage",
    "MemoryStorage",
    "TreeStorage",
    "dump_tree",
    "parse_tree",
]
