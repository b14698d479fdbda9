"""
Block models for Shelver.

This module defines the list-item tree that lives under every heading of a
document. A Block owns its children exclusively: attaching a block to a new
parent always detaches it from the old one first.
"""

from typing import Callable, List, Optional


def is_blank(line: str) -> bool:
    """Return True for empty or whitespace-only lines."""
    return not line.strip()


class Block:
    """
    A list item (or a verbatim text line) together with its nested children.

    The text of a block is stored relative to the block's own nesting depth:
    the indentation contributed by its ancestors is stripped on parse and
    re-added on stringify. Continuation lines are kept in the same text,
    separated by newlines.
    """

    def __init__(self, text: Optional[str], children: Optional[List['Block']] = None):
        self.text = text
        self.parent: Optional['Block'] = None
        self.children: List['Block'] = []
        for child in children or []:
            self.append_child(child)

    @property
    def lines(self) -> List[str]:
        """The block's own lines, without its children."""
        if self.text is None:
            return []
        return self.text.split("\n")

    @property
    def first_line(self) -> str:
        return self.lines[0] if self.text is not None else ""

    def append_child(self, block: 'Block') -> None:
        """
        Attach a block as the last child of this block.

        Args:
            block: The block to attach; it is detached from its previous owner
        """
        block.remove_self()
        block.parent = self
        self.children.append(block)

    def insert_child(self, index: int, block: 'Block') -> None:
        """Attach a block at ``index`` among this block's children."""
        block.remove_self()
        block.parent = self
        self.children.insert(index, block)

    def remove_self(self) -> None:
        """Detach this block from its owner, if it has one."""
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def remove_children(self, predicate: Callable[['Block'], bool]) -> List['Block']:
        """
        Detach every direct child matching the predicate.

        Returns:
            The detached children in document order
        """
        removed = [child for child in self.children if predicate(child)]
        for child in removed:
            child.remove_self()
        return removed

    def add_line(self, line: str) -> None:
        """Append a continuation line to the block's text."""
        self.text = line if self.text is None else f"{self.text}\n{line}"

    def walk(self):
        """Yield this block and all of its descendants in document order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def stringify(self, indentation: str) -> List[str]:
        """
        Render the block and its descendants back into lines.

        Args:
            indentation: One level of indentation (a tab or a run of spaces)

        Returns:
            The rendered lines; blank lines are emitted verbatim
        """
        lines = list(self.lines)
        for child in self.children:
            for line in child.stringify(indentation):
                lines.append(line if is_blank(line) else indentation + line)
        return lines

    def __repr__(self):
        return f"{type(self).__name__}(text={self.text!r}, children={len(self.children)})"


class TextBlock(Block):
    """A non-list line kept verbatim, such as a paragraph or a blank line."""

    def __init__(self, text: str):
        super().__init__(text)


class RootBlock(Block):
    """
    The container for the list items placed directly under a heading.

    A RootBlock has no text of its own and does not indent its children.
    """

    def __init__(self, children: Optional[List[Block]] = None):
        super().__init__(None, children)

    def stringify(self, indentation: str) -> List[str]:
        lines: List[str] = []
        for child in self.children:
            lines.extend(child.stringify(indentation))
        return lines
