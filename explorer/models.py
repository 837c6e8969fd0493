"""Pydantic models for the file explorer node tree."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Mapping, Union

import json
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import TreeDataError

ROOT_ID = "root"


def _as_utc(value: datetime) -> datetime:
    """Timestamps without an offset are read as UTC."""
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class FileNode(BaseModel):
    """A leaf node. Files never own children."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["file"] = "file"
    id: str
    name: str
    created_at: datetime = Field(alias="createdAt")
    modified_at: datetime = Field(alias="modifiedAt")
    parent_id: str | None = Field(default=None, alias="parentId")
    size: int | None = Field(default=None, description="Byte count")
    data: str | None = Field(default=None, description="Inline payload, e.g. a base64 data URL")
    url: str | None = Field(default=None, description="External reference to the content")

    @field_validator("created_at", "modified_at")
    @classmethod
    def timestamps_in_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class FolderNode(BaseModel):
    """A folder exclusively owns its ordered children."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["folder"] = "folder"
    id: str
    name: str
    created_at: datetime = Field(alias="createdAt")
    modified_at: datetime = Field(alias="modifiedAt")
    parent_id: str | None = Field(default=None, alias="parentId")
    children: list[Node] = Field(default_factory=list)

    @field_validator("created_at", "modified_at")
    @classmethod
    def timestamps_in_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


Node = Annotated[Union[FileNode, FolderNode], Field(discriminator="type")]

FolderNode.model_rebuild()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# document conversion


def node_to_document(node: FileNode | FolderNode) -> dict[str, Any]:
    """Serialize a node (and its subtree) into a JSON-compatible dict."""
    return node.model_dump(mode="json", by_alias=True, exclude_none=True)


def node_from_document(document: Mapping[str, Any]) -> FolderNode:
    """Rebuild a whole tree from its persisted document form.

    The document must be rooted at a folder. Raises TreeDataError when the
    payload does not describe a valid tree.
    """
    if not isinstance(document, Mapping):
        raise TreeDataError("Tree document must be a mapping")
    try:
        root = FolderNode.model_validate(document)
    except ValidationError as exc:
        raise TreeDataError(f"Invalid tree document: {exc.error_count()} error(s)") from exc
    return root


def load_tree_text(raw: str | bytes) -> FolderNode:
    """Parse a YAML or JSON text payload into a tree."""
    return node_from_document(_load_text_payload(raw))


def _load_text_payload(raw: str | bytes) -> dict[str, Any]:
    """Interpret raw text as YAML first, falling back to JSON."""
    text = raw.decode() if isinstance(raw, bytes) else raw
    try:
        return yaml.safe_load(text) or {}
    except yaml.YAMLError:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise TreeDataError("Tree payload is neither YAML nor JSON") from exc


__all__ = [
    "FileNode",
    "FolderNode",
    "Node",
    "ROOT_ID",
    "load_tree_text",
    "node_from_document",
    "node_to_document",
    "utcnow",
]
