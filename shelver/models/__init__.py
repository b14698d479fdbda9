"""Data models for Shelver."""

from .block import Block, RootBlock, TextBlock
from .section import Section
from .settings import (
    ArchiverSettings,
    IndentationSettings,
    MetadataSettings,
    Rule,
    TextReplacementSettings,
    TreeLevelConfig,
)

__all__ = [
    "Block",
    "RootBlock",
    "TextBlock",
    "Section",
    "ArchiverSettings",
    "IndentationSettings",
    "MetadataSettings",
    "Rule",
    "TextReplacementSettings",
    "TreeLevelConfig",
]
