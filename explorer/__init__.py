"""Core file explorer package exposing the tree store, models and validation."""

from .errors import ErrorKind, ExplorerError, OperationResult, StorageError, TreeDataError
from .models import ROOT_ID, FileNode, FolderNode, Node, node_from_document, node_to_document
from .storage import JsonFileStorage, MemoryStorage, TreeStorage
from .store import TreeStore
from .validation import (
    ValidationResult,
    validate_file_size,
    validate_name,
    validate_node_structure,
    validate_tree,
    validate_unique_name_in_folder,
)

__all__ = [
    "ErrorKind",
    "ExplorerError",
    "FileNode",
    "FolderNode",
    "JsonFileStorage",
    "MemoryStorage",
    "Node",
    "OperationResult",
    "ROOT_ID",
    "StorageError",
    "TreeDataError",
    "TreeStorage",
    "TreeStore",
    "ValidationResult",
    "node_from_document",
    "node_to_document",
    "validate_file_size",
    "validate_name",
    "validate_node_structure",
    "validate_tree",
    "validate_unique_name_in_folder",
]
