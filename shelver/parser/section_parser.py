"""
Section parser for Shelver.

This module turns the lines of a document into a Section tree in a single
left-to-right pass. Serializing the result with the same indentation
reproduces the input lines exactly.
"""

import logging
import re
from typing import List, Optional, Sequence

from ..models import Block, RootBlock, Section, TextBlock
from ..models.block import is_blank


HEADING_PATTERN = re.compile(r"^(#{1,6})(\s.*)?$")
LIST_ITEM_PATTERN = re.compile(r"^\s*(?:[-*+]|\d+[.)])(?:\s|$)")
FENCE_PATTERN = re.compile(r"^\s*(`{3,}|~{3,})")


def is_heading(line: str) -> bool:
    return HEADING_PATTERN.match(line) is not None


def is_list_item(line: str) -> bool:
    return LIST_ITEM_PATTERN.match(line) is not None


def fenced_lines(lines: Sequence[str]) -> List[bool]:
    """Flag the lines that belong to fenced code, fence markers included."""
    flags = []
    fence: Optional[str] = None
    for line in lines:
        if fence is not None:
            flags.append(True)
            if line.strip().startswith(fence):
                fence = None
            continue
        fence_match = FENCE_PATTERN.match(line)
        if fence_match:
            fence = fence_match.group(1)
        flags.append(fence_match is not None)
    return flags


def indentation_depth(line: str, indentation: str) -> int:
    """Count how many whole indentation units the line starts with."""
    depth = 0
    while line.startswith(indentation, depth * len(indentation)):
        depth += 1
    return depth


class _OpenBlock:
    """A list item that can still receive children or continuation lines."""

    def __init__(self, block: Block, indent: int, depth: int):
        self.block = block
        self.indent = indent
        self.depth = depth


class _BlockCursor:
    """
    Insertion point inside the block tree of the section being parsed.

    The stack holds the chain of open list items, outermost first, on top of
    the section's RootBlock.
    """

    def __init__(self, root: RootBlock, indentation: str):
        self.root = root
        self.indentation = indentation
        self.stack = [_OpenBlock(root, -1, -1)]

    @property
    def in_list(self) -> bool:
        return len(self.stack) > 1

    @property
    def current(self) -> _OpenBlock:
        return self.stack[-1]

    def _prefix(self, depth: int) -> str:
        return self.indentation * depth

    def add_list_item(self, line: str) -> None:
        indent = indentation_depth(line, self.indentation)
        while self.current.indent >= indent:
            self.stack.pop()

        parent = self.current
        depth = parent.depth + 1
        block = Block(line[len(self._prefix(depth)):])
        parent.block.append_child(block)
        self.stack.append(_OpenBlock(block, indent, depth))

    def add_continuation(self, line: str) -> None:
        """
        Attach a line to the most recent list item, or keep it as text.

        A line can only continue the current item when it carries that
        item's indentation; anything else closes the list.
        """
        if self.in_list:
            prefix = self._prefix(self.current.depth)
            if is_blank(line):
                self.current.block.add_line(line)
                return
            if line[:1].isspace() and line.startswith(prefix):
                self.current.block.add_line(line[len(prefix):])
                return
        self.add_text(line)

    def add_text(self, line: str) -> None:
        self.root.append_child(TextBlock(line))
        del self.stack[1:]


class SectionParser:
    """
    Parses document lines into a tree of Sections and Blocks.

    Lines are classified as headings, list items, or text. Text lines that
    carry the indentation of the preceding list item continue that item;
    other text lines are kept as TextBlocks under the current heading.
    Lines inside fenced code are never treated as headings or list items.
    """

    def __init__(self, indentation: str = "\t"):
        """
        Initialize the parser.

        Args:
            indentation: One level of list indentation in the parsed documents
        """
        if not indentation:
            raise ValueError("Indentation must not be empty")
        self.indentation = indentation

    def parse(self, lines: Sequence[str]) -> Section:
        """
        Build a Section tree from lines.

        Args:
            lines: Document lines without line terminators

        Returns:
            The virtual root Section of the document
        """
        root = Section.root()
        sections: List[Section] = [root]
        cursor = _BlockCursor(root.block_content, self.indentation)
        fence: Optional[str] = None

        for index, line in enumerate(lines):
            if fence is not None:
                cursor.add_continuation(line)
                if line.strip().startswith(fence):
                    fence = None
                continue

            fence_match = FENCE_PATTERN.match(line)
            heading_match = HEADING_PATTERN.match(line)

            if fence_match:
                fence = fence_match.group(1)
                cursor.add_continuation(line)
            elif heading_match:
                level = len(heading_match.group(1))
                while sections[-1].token_level >= level:
                    sections.pop()
                section = Section(heading_match.group(2) or "", level)
                sections[-1].append_child(section)
                sections.append(section)
                cursor = _BlockCursor(section.block_content, self.indentation)
            elif is_list_item(line):
                cursor.add_list_item(line)
            elif is_blank(line):
                if cursor.in_list and self._continues_list(lines, index + 1):
                    cursor.add_continuation(line)
                else:
                    cursor.add_text(line)
            else:
                cursor.add_continuation(line)

        logging.debug(f"Parsed {len(lines)} lines into {sum(1 for _ in root.walk()) - 1} sections")
        return root

    @staticmethod
    def _continues_list(lines: Sequence[str], start: int) -> bool:
        """Whether the next non-blank line is indented content."""
        for line in lines[start:]:
            if is_blank(line):
                continue
            return line[:1].isspace()
        return False
