"""
Section model for Shelver.

A Section is a heading, the blocks written directly under it, and its
sub-headings. The virtual root of a document is a Section with no heading
text and a token level of 0.
"""

import logging
from typing import Callable, Iterator, List, Optional

from .block import RootBlock


MAX_HEADING_LEVEL = 6


class Section:
    """
    A heading with its block content and nested sub-sections.

    ``text`` is everything after the heading marker, including the space that
    separates it from the hashes, so that headings round-trip exactly.
    """

    def __init__(
        self,
        text: Optional[str],
        token_level: int,
        block_content: Optional[RootBlock] = None,
        children: Optional[List['Section']] = None,
    ):
        self.text = text
        self.token_level = token_level
        self.block_content = block_content if block_content is not None else RootBlock()
        self.parent: Optional['Section'] = None
        self.children: List['Section'] = []
        for child in children or []:
            self.append_child(child)

    @classmethod
    def root(cls) -> 'Section':
        """Build the virtual top-level section of a document."""
        return cls(None, 0)

    @classmethod
    def heading(cls, title: str, token_level: int) -> 'Section':
        """Build a section for a new heading with the given title."""
        return cls(f" {title}", token_level)

    @property
    def title(self) -> str:
        """Heading text without surrounding whitespace."""
        return (self.text or "").strip()

    @property
    def is_root(self) -> bool:
        return self.token_level == 0

    def append_child(self, section: 'Section') -> None:
        """
        Attach a section as the last sub-section of this one.

        Args:
            section: The section to attach; it is detached from its previous parent
        """
        if section.parent is not None:
            section.parent.children.remove(section)
        section.parent = self
        self.children.append(section)

    def walk(self) -> Iterator['Section']:
        """Yield this section and every nested section, pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, predicate: Callable[['Section'], bool]) -> Optional['Section']:
        """
        Find the first descendant section (pre-order) matching the predicate.

        The section itself is not tested.
        """
        for child in self.children:
            if predicate(child):
                return child
            found = child.find(predicate)
            if found is not None:
                return found
        return None

    def recalculate_token_levels(self, new_level: Optional[int] = None) -> None:
        """
        Move this sub-tree so that its top heading sits at ``new_level``.

        Every nested section is shifted by the same delta, so the relative
        nesting inside the sub-tree is preserved. Levels past six are capped
        at six, the deepest markdown heading.
        """
        if new_level is None:
            return
        self.shift_token_levels(new_level - self.token_level)

    def shift_token_levels(self, delta: int) -> None:
        for section in self.walk():
            level = section.token_level + delta
            if level > MAX_HEADING_LEVEL:
                logging.warning(f"Heading '{section.title}' capped at level {MAX_HEADING_LEVEL}")
                level = MAX_HEADING_LEVEL
            section.token_level = level

    def stringify(self, indentation: str) -> List[str]:
        """
        Render the section back into lines.

        Args:
            indentation: One level of list indentation

        Returns:
            The heading line (if any), the block content, then every sub-section
        """
        lines: List[str] = []
        if not self.is_root:
            lines.append("#" * self.token_level + (self.text or ""))
        lines.extend(self.block_content.stringify(indentation))
        for child in self.children:
            lines.extend(child.stringify(indentation))
        return lines

    def __repr__(self):
        return (
            f"Section(text={self.text!r}, token_level={self.token_level}, "
            f"blocks={len(self.block_content.children)}, children={len(self.children)})"
        )
