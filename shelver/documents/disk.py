"""
Disk-backed documents for Shelver.

A Vault is a folder of markdown documents addressed by vault-relative paths.
It creates missing archive files and folders on demand and serializes
read-mutate-write cycles on the same file within a process.
"""

import logging
import threading
import weakref
from pathlib import Path
from typing import List, Union

from .base import ActiveFile, NotADocumentError


class Vault:
    """
    A folder of documents.
    """

    # Locks live as long as some caller still holds them.
    _locks = weakref.WeakValueDictionary()
    _locks_guard = threading.Lock()

    def __init__(self, root: Union[str, Path] = ".", file_extension: str = ".md"):
        """
        Initialize the vault.

        Args:
            root: Folder the document paths are relative to
            file_extension: Extension appended to archive file templates
        """
        self.root = Path(root)
        self.file_extension = file_extension

    def resolve(self, path: Union[str, Path]) -> Path:
        return self.root / path

    def lock(self, path: Union[str, Path]):
        """Return the process-wide re-entrant lock guarding a document."""
        key = self.resolve(path).resolve()
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    def get_file(self, path: Union[str, Path]) -> 'DiskFile':
        """
        Open an existing document.

        Raises:
            FileNotFoundError: If nothing exists at the path
            NotADocumentError: If the path is a folder
        """
        full_path = self.resolve(path)
        if not full_path.exists():
            raise FileNotFoundError(f"Document not found: {full_path}")
        if not full_path.is_file():
            raise NotADocumentError(f"{path} is not a valid markdown file")
        return DiskFile(Path(path), self)

    def get_or_create_file(self, path: str) -> 'DiskFile':
        """
        Open an archive document, creating it and its folders if missing.

        Args:
            path: Vault-relative path without the file extension

        Returns:
            The document

        Raises:
            NotADocumentError: If the path names an existing folder
        """
        relative_path = Path(f"{path}{self.file_extension}")
        full_path = self.resolve(relative_path)

        if not full_path.exists():
            if not full_path.parent.exists():
                logging.info(f"Creating folder {full_path.parent}")
                full_path.parent.mkdir(parents=True, exist_ok=True)
            logging.info(f"Creating archive file {relative_path}")
            full_path.touch()

        if not full_path.is_file():
            logging.error(f"Archive destination {relative_path} is not a file")
            raise NotADocumentError(f"{relative_path} is not a valid markdown file")

        return DiskFile(relative_path, self)


class DiskFile(ActiveFile):
    """
    A document stored in a vault.
    """

    def __init__(self, relative_path: Path, vault: Vault):
        self.relative_path = relative_path
        self.vault = vault

    @property
    def name(self) -> str:
        return self.relative_path.stem

    @property
    def path(self) -> str:
        return self.relative_path.as_posix()

    @property
    def full_path(self) -> Path:
        return self.vault.resolve(self.relative_path)

    def read_lines(self) -> List[str]:
        with open(self.full_path, 'r', encoding='utf-8', newline='') as f:
            text = f.read()
        return text.split("\n") if text else []

    def write_lines(self, lines: List[str]) -> None:
        with open(self.full_path, 'w', encoding='utf-8', newline='') as f:
            f.write("\n".join(lines))
        logging.debug(f"Wrote {len(lines)} lines to {self.path}")

    def lock(self):
        return self.vault.lock(self.relative_path)

    def __eq__(self, other):
        return isinstance(other, DiskFile) and self.full_path.resolve() == other.full_path.resolve()

    def __hash__(self):
        return hash(self.full_path.resolve())

    def __repr__(self):
        return f"DiskFile({self.path!r})"
