"""
Base document interface for Shelver.

This module defines the abstract interface of a document the archiver can
read and rewrite: the file open in an editor, or a file on disk.
"""

from abc import ABC, abstractmethod
from contextlib import nullcontext
from typing import List


class NotADocumentError(Exception):
    """A destination path names something that is not a document, such as a folder."""


class ActiveFile(ABC):
    """
    Abstract base class for documents the archiver edits.

    A document is a sequence of lines. Each archiving step reads all lines,
    rebuilds them, and writes them back in one go.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        The document name without folders or extension.

        Used by the {{sourceFileName}} placeholder.
        """
        pass

    @property
    @abstractmethod
    def path(self) -> str:
        """
        The document path, used by the {{sourceFilePath}} placeholder.
        """
        pass

    @abstractmethod
    def read_lines(self) -> List[str]:
        """
        Read the document.

        Returns:
            The document's lines without terminators
        """
        pass

    @abstractmethod
    def write_lines(self, lines: List[str]) -> None:
        """
        Replace the document's content.

        Args:
            lines: The new lines, joined with newlines on write
        """
        pass

    def lock(self):
        """
        Context manager held for a read-mutate-write cycle.

        Documents that cannot be shared return a no-op context.
        """
        return nullcontext()
