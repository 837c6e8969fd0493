"""Error kinds and result objects returned by tree store operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ExplorerError(Exception):
    """
    Base exception class for exceptional (non-logical) failures.
    """
    pass


class StorageError(ExplorerError):
    """
    Raised when the storage collaborator cannot read or write the tree document.
    """
    pass


class TreeDataError(ExplorerError):
    """
    Raised when a persisted tree document is malformed.
    """
    pass


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    PROTECTED = "protected"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a mutating store operation.

    Callers branch on ``success``; on failure ``kind`` says why and ``error``
    carries the human-readable detail. ``node_id`` is set by create operations.
    """

    success: bool
    kind: ErrorKind | None = None
    error: str | None = None
    node_id: str | None = None

    @classmethod
    def ok(cls, node_id: str | None = None) -> OperationResult:
        return cls(success=True, node_id=node_id)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str) -> OperationResult:
        return cls(success=False, kind=kind, error=error)


__all__ = [
    "ErrorKind",
    "ExplorerError",
    "OperationResult",
    "StorageError",
    "TreeDataError",
]
