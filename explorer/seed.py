"""Demo tree used when no stored tree is available."""

from __future__ import annotations

from pathlib import Path

from .models import FolderNode, load_tree_text

# Timestamps are quoted so they reach pydantic as ISO strings.
INITIAL_TREE_YAML = """
id: root
name: My Files
type: folder
createdAt: "2024-01-01T10:00:00Z"
modifiedAt: "2024-01-01T10:00:00Z"
children:
  - id: folder-1
    name: Documents
    type: folder
    parentId: root
    createdAt: "2024-01-01T10:30:00Z"
    modifiedAt: "2024-01-01T15:00:00Z"
    children:
      - {id: file-1, name: report.pdf, type: file, size: 1024000, parentId: folder-1,
         createdAt: "2024-01-01T11:00:00Z", modifiedAt: "2024-01-01T11:00:00Z"}
      - {id: file-2, name: presentation.pptx, type: file, size: 2048000, parentId: folder-1,
         createdAt: "2024-01-01T12:00:00Z", modifiedAt: "2024-01-01T12:00:00Z"}
      - id: folder-nested
        name: Nested Folder
        type: folder
        parentId: folder-1
        createdAt: "2024-01-01T13:30:00Z"
        modifiedAt: "2024-01-01T15:00:00Z"
        children:
          - {id: file-nested, name: nested-file.txt, type: file, size: 512, parentId: folder-nested,
             createdAt: "2024-01-01T14:00:00Z", modifiedAt: "2024-01-01T14:00:00Z"}
          - id: folder-deep
            name: Deep Folder
            type: folder
            parentId: folder-nested
            createdAt: "2024-01-01T14:30:00Z"
            modifiedAt: "2024-01-01T15:00:00Z"
            children:
              - {id: file-deep, name: deep-file.js, type: file, size: 1024, parentId: folder-deep,
                 createdAt: "2024-01-01T15:00:00Z", modifiedAt: "2024-01-01T15:00:00Z"}
  - id: folder-2
    name: Images
    type: folder
    parentId: root
    createdAt: "2024-01-01T11:00:00Z"
    modifiedAt: "2024-01-01T14:00:00Z"
    children:
      - {id: file-3, name: photo.jpg, type: file, size: 512000, parentId: folder-2,
         createdAt: "2024-01-01T13:00:00Z", modifiedAt: "2024-01-01T13:00:00Z"}
      - {id: file-4, name: diagram.png, type: file, size: 256000, parentId: folder-2,
         createdAt: "2024-01-01T14:00:00Z", modifiedAt: "2024-01-01T14:00:00Z"}
  - {id: file-5, name: readme.txt, type: file, size: 1024, parentId: root,
     createdAt: "2024-01-01T15:00:00Z", modifiedAt: "2024-01-01T15:00:00Z"}
  - id: folder-3
    name: Test Folder
    type: folder
    parentId: root
    createdAt: "2024-01-01T16:00:00Z"
    modifiedAt: "2024-01-01T16:00:00Z"
    children:
      - {id: file-6, name: test.txt, type: file, size: 512, parentId: folder-3,
         createdAt: "2024-01-01T16:00:00Z", modifiedAt: "2024-01-01T16:00:00Z"}
"""


def initial_tree() -> FolderNode:
    """Return a fresh copy of the demo tree."""
    return load_tree_text(INITIAL_TREE_YAML)


def load_seed_file(path: str | Path) -> FolderNode:
    """Read a seed tree from a YAML or JSON file."""
    return load_tree_text(Path(path).expanduser().read_text(encoding="utf-8"))


__all__ = ["INITIAL_TREE_YAML", "initial_tree", "load_seed_file"]
