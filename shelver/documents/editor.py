"""
Editor collaborators for Shelver.

The cursor operations of the archiver work against an editor: something that
holds the text of the active document, a cursor, and range replacement.
BufferEditor is the in-memory implementation used by the command line and
the tests.
"""

from abc import ABC, abstractmethod
from typing import List, NamedTuple, Optional, Tuple

from ..models.block import is_blank
from ..parser import fenced_lines, is_heading, is_list_item
from .base import ActiveFile


class Position(NamedTuple):
    """A zero-based line and character offset."""
    line: int
    ch: int


Range = Tuple[Position, Position]


class Editor(ABC):
    """
    Abstract editor holding the active document.
    """

    @abstractmethod
    def get_value(self) -> str:
        pass

    @abstractmethod
    def set_value(self, text: str) -> None:
        pass

    @abstractmethod
    def get_range(self, start: Position, end: Position) -> str:
        pass

    @abstractmethod
    def replace_range(self, text: str, start: Position, end: Position) -> None:
        pass

    @abstractmethod
    def get_cursor(self) -> Position:
        pass

    @abstractmethod
    def set_cursor(self, position: Position) -> None:
        pass

    def get_lines(self) -> List[str]:
        return self.get_value().split("\n")

    def line_count(self) -> int:
        return len(self.get_lines())

    def get_line(self, line: int) -> str:
        return self.get_lines()[line]


class BufferEditor(Editor):
    """
    Editor over an in-memory text buffer.
    """

    def __init__(self, text: str = "", cursor: Position = Position(0, 0)):
        self._text = text
        self._cursor = cursor

    def get_value(self) -> str:
        return self._text

    def set_value(self, text: str) -> None:
        self._text = text

    def _offset(self, position: Position) -> int:
        lines = self.get_lines()
        line = min(max(position.line, 0), len(lines) - 1)
        ch = min(max(position.ch, 0), len(lines[line]))
        return sum(len(text) + 1 for text in lines[:line]) + ch

    def get_range(self, start: Position, end: Position) -> str:
        return self._text[self._offset(start):self._offset(end)]

    def replace_range(self, text: str, start: Position, end: Position) -> None:
        start_offset, end_offset = self._offset(start), self._offset(end)
        self._text = self._text[:start_offset] + text + self._text[end_offset:]

    def get_cursor(self) -> Position:
        return self._cursor

    def set_cursor(self, position: Position) -> None:
        self._cursor = position


class EditorFile(ActiveFile):
    """
    The document open in an editor.
    """

    def __init__(self, editor: Editor, name: str = "", path: str = ""):
        """
        Initialize the editor document.

        Args:
            editor: The editor holding the text
            name: Document name for the {{sourceFileName}} placeholder
            path: Document path for the {{sourceFilePath}} placeholder
        """
        self.editor = editor
        self._name = name
        self._path = path

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> str:
        return self._path

    def read_lines(self) -> List[str]:
        text = self.editor.get_value()
        return text.split("\n") if text else []

    def write_lines(self, lines: List[str]) -> None:
        self.editor.set_value("\n".join(lines))


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip())


def _heading_level(line: str) -> int:
    return len(line) - len(line.lstrip("#"))


def detect_list_item_under_cursor(editor: Editor) -> Optional[Range]:
    """
    Find the list item enclosing the cursor, including its nested content.

    Lines of fenced code are never list items or headings.

    Returns:
        The first and last position of the item's text, or None when the
        cursor is not inside a list item
    """
    lines = editor.get_lines()
    cursor_line = editor.get_cursor().line
    if not 0 <= cursor_line < len(lines):
        return None
    fenced = fenced_lines(lines)

    start = None
    for index in range(cursor_line, -1, -1):
        line = lines[index]
        if not fenced[index] and is_list_item(line):
            start = index
            break
        if (not fenced[index] and is_heading(line)) or (index == cursor_line and is_blank(line)):
            return None
        if not is_blank(line) and not line[:1].isspace():
            return None
    if start is None:
        return None

    item_indent = _indent_width(lines[start])
    end = start
    for index in range(start + 1, len(lines)):
        line = lines[index]
        if is_blank(line):
            continue
        if (not fenced[index] and is_heading(line)) or _indent_width(line) <= item_indent:
            break
        end = index

    if cursor_line > end:
        return None
    return Position(start, 0), Position(end, len(lines[end]))


def detect_heading_under_cursor(editor: Editor) -> Optional[Range]:
    """
    Find the heading enclosing the cursor together with everything nested under it.

    Returns:
        The first and last position of the heading's sub-tree, or None when no
        heading precedes the cursor
    """
    lines = editor.get_lines()
    cursor_line = editor.get_cursor().line
    if not 0 <= cursor_line < len(lines):
        return None
    fenced = fenced_lines(lines)

    def heading_at(index: int) -> bool:
        return not fenced[index] and is_heading(lines[index])

    start = next(
        (index for index in range(cursor_line, -1, -1) if heading_at(index)),
        None,
    )
    if start is None:
        return None

    level = _heading_level(lines[start])
    end = len(lines) - 1
    for index in range(start + 1, len(lines)):
        if heading_at(index) and _heading_level(lines[index]) <= level:
            end = index - 1
            break
    return Position(start, 0), Position(end, len(lines[end]))


def removal_range(editor: Editor, text_range: Range) -> Range:
    """
    Widen a range of whole lines so that removing it also drops its line break.
    """
    start, end = text_range
    if end.line + 1 < editor.line_count():
        return start, Position(end.line + 1, 0)
    if start.line > 0:
        return Position(start.line - 1, len(editor.get_line(start.line - 1))), end
    return start, end
