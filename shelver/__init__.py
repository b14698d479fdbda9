"""
Shelver: archives finished checklist items in markdown documents.

Moves completed tasks and whole headings into archive sections or separate
archive files, optionally grouped under date headings.
"""

__version__ = "0.1.0"
__author__ = "Shelver Project"

# Import main components
from .models import ArchiverSettings, Block, RootBlock, Rule, Section, TextBlock
from .parser import SectionParser
from .documents import ActiveFile, BufferEditor, DiskFile, EditorFile, NotADocumentError, Vault
from .services import Archiver, ExtractionMode

__all__ = [
    "ArchiverSettings",
    "Block",
    "RootBlock",
    "Rule",
    "Section",
    "TextBlock",
    "SectionParser",
    "ActiveFile",
    "BufferEditor",
    "DiskFile",
    "EditorFile",
    "NotADocumentError",
    "Vault",
    "Archiver",
    "ExtractionMode",
]
