"""Documents the archiver reads and writes: files on disk and editor buffers."""

from .base import ActiveFile, NotADocumentError
from .disk import DiskFile, Vault
from .editor import (
    BufferEditor,
    Editor,
    EditorFile,
    Position,
    detect_heading_under_cursor,
    detect_list_item_under_cursor,
    removal_range,
)

__all__ = [
    "ActiveFile",
    "NotADocumentError",
    "DiskFile",
    "Vault",
    "BufferEditor",
    "Editor",
    "EditorFile",
    "Position",
    "detect_heading_under_cursor",
    "detect_list_item_under_cursor",
    "removal_range",
]
