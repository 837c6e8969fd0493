"""
explorer.validation
-------------------
Stateless checks that gate every name-affecting mutation of the tree.

Functions:
    validate_name                  - Name legality (length, characters, reserved words).
    validate_file_size             - Byte count within bounds.
    validate_unique_name_in_folder - Case-insensitive sibling collision check.
    validate_node_structure        - Field-level sanity check of a single node.
    validate_tree                  - Whole-tree invariant check for tests and tooling.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel

from .models import ROOT_ID, FolderNode

MAX_NAME_LENGTH = 255
MIN_NAME_LENGTH = 1
MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB
FORBIDDEN_CHARACTERS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)

_REQUIRED_FIELDS = {
    "id": "Node ID is required",
    "name": "Node name is required",
    "type": "Node type is required",
    "createdAt": "Creation date is required",
    "modifiedAt": "Modified date is required",
}


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def extend(self, other: ValidationResult) -> None:
        self.errors.extend(other.errors)

    def message(self) -> str:
        return ", ".join(self.errors)


def validate_name(name: str | None) -> ValidationResult:
    """Validate a file or folder name. Violations accumulate."""
    result = ValidationResult()
    if not name or not name.strip():
        result.errors.append("Name is required")
        return result

    trimmed = name.strip()
    if len(trimmed) < MIN_NAME_LENGTH:
        result.errors.append("Name is too short")
    if len(trimmed) > MAX_NAME_LENGTH:
        result.errors.append(f"Name is too long (max {MAX_NAME_LENGTH} characters)")

    if FORBIDDEN_CHARACTERS.search(name):
        result.errors.append('Name contains forbidden characters: < > : " / \\ | ? *')

    # reserved device names apply regardless of extension
    if trimmed.upper().split(".")[0] in RESERVED_NAMES:
        result.errors.append(f'"{trimmed}" is a reserved name')

    if trimmed.startswith(".") or trimmed.endswith("."):
        result.errors.append("Name cannot start or end with a period")
    if name.startswith(" ") or name.endswith(" "):
        result.errors.append("Name cannot start or end with a space")

    return result


def validate_file_size(size: int) -> ValidationResult:
    result = ValidationResult()
    if size > MAX_FILE_SIZE:
        result.errors.append(f"File is too large (max {MAX_FILE_SIZE // (1024 * 1024)}MB)")
    if size < 0:
        result.errors.append("Invalid file size")
    return result


def validate_unique_name_in_folder(
    name: str, parent_folder: FolderNode, exclude_id: str | None = None
) -> ValidationResult:
    """Fail when a sibling other than ``exclude_id`` already uses ``name``."""
    result = ValidationResult()
    wanted = name.lower()
    for child in parent_folder.children:
        if child.id != exclude_id and child.name.lower() == wanted:
            result.errors.append(f"A {child.type} with this name already exists")
            break
    return result


def validate_node_structure(node: BaseModel | Mapping[str, Any]) -> ValidationResult:
    """
    Check that a single node carries every required field with sane values.
    Accepts either a node model or its raw document form. Children are not
    visited; use validate_tree for a whole-tree check.
    """
    payload: Mapping[str, Any]
    if isinstance(node, BaseModel):
        payload = node.model_dump(mode="json", by_alias=True)
    else:
        payload = node

    result = ValidationResult()
    for key, message in _REQUIRED_FIELDS.items():
        if not payload.get(key):
            result.errors.append(message)

    node_type = payload.get("type")
    if node_type and node_type not in ("file", "folder"):
        result.errors.append(f"Unknown node type: {node_type!r}")

    if payload.get("name"):
        result.extend(validate_name(payload["name"]))

    for key, label in (("createdAt", "creation"), ("modifiedAt", "modification")):
        value = payload.get(key)
        if value and not _is_iso_datetime(value):
            result.errors.append(f"Invalid {label} date format")

    if node_type == "file" and payload.get("size") is not None:
        size = payload["size"]
        if isinstance(size, int) and not isinstance(size, bool):
            result.extend(validate_file_size(size))
        else:
            result.errors.append("Invalid file size")
    if node_type == "file" and "children" in payload:
        result.errors.append("A file cannot have children")
    if node_type == "folder" and not isinstance(payload.get("children", []), list):
        result.errors.append("Folder children must be a list")

    return result


def validate_tree(root: FolderNode) -> ValidationResult:
    """Walk the whole tree and report every broken structural invariant."""
    result = ValidationResult()
    if root.id != ROOT_ID:
        result.errors.append(f"Root id must be {ROOT_ID!r}, got {root.id!r}")
    if root.parent_id is not None:
        result.errors.append("Root folder cannot have a parent")

    seen: set[str] = set()
    stack: list[FolderNode] = [root]
    seen.add(root.id)
    while stack:
        folder = stack.pop()
        names: set[str] = set()
        for child in folder.children:
            if child.id in seen:
                result.errors.append(f"Duplicate node id {child.id!r}")
            seen.add(child.id)
            if child.parent_id != folder.id:
                result.errors.append(
                    f"Node {child.id!r} has parentId {child.parent_id!r} but is listed in {folder.id!r}"
                )
            lowered = child.name.lower()
            if lowered in names:
                result.errors.append(f"Duplicate name {child.name!r} in folder {folder.id!r}")
            names.add(lowered)
            if child.type == "folder":
                stack.append(child)
    return result


def _is_iso_datetime(value: Any) -> bool:
    if isinstance(value, datetime):
        return True
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


__all__ = [
    "FORBIDDEN_CHARACTERS",
    "MAX_FILE_SIZE",
    "MAX_NAME_LENGTH",
    "MIN_NAME_LENGTH",
    "RESERVED_NAMES",
    "ValidationResult",
    "validate_file_size",
    "validate_name",
    "validate_node_structure",
    "validate_tree",
    "validate_unique_name_in_folder",
]
