"""Archiving services for Shelver."""

from .archiver import Archiver, TaskWithRule
from .date_tree import DateTreeResolver
from .extraction import ExtractionMode, TreeFilter, extract_blocks
from .metadata import MetadataService
from .placeholders import PlaceholderResolver, Template
from .task_tester import TaskTester
from .text_replacement import TextReplacementService

__all__ = [
    "Archiver",
    "TaskWithRule",
    "DateTreeResolver",
    "ExtractionMode",
    "TreeFilter",
    "extract_blocks",
    "MetadataService",
    "PlaceholderResolver",
    "Template",
    "TaskTester",
    "TextReplacementService",
]
