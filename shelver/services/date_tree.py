"""
Date tree resolution for Shelver.

Archived blocks can be grouped under a chain of headings and list items
labelled with the archiving date, e.g. ``## 2024`` / ``### 2024-05`` /
``- 2024-05-22``. Existing date nodes are found and reused; missing ones are
created. Pre-existing content is never removed or reordered.
"""

import logging
from typing import Sequence

from ..models import Block, Section, TextBlock, TreeLevelConfig
from ..models.block import is_blank
from .placeholders import PlaceholderResolver


def append_before_trailing_blanks(parent: Block, block: Block) -> None:
    """Append a block, keeping the blank lines that end ``parent`` last."""
    index = len(parent.children)
    while index > 0:
        previous = parent.children[index - 1]
        if not (isinstance(previous, TextBlock) and is_blank(previous.text)):
            break
        index -= 1
    parent.insert_child(index, block)


class DateTreeResolver:
    """
    Merges extracted blocks into a date-organized destination.
    """

    def __init__(
        self,
        placeholder_resolver: PlaceholderResolver,
        headings: Sequence[TreeLevelConfig] = (),
        list_items: Sequence[TreeLevelConfig] = (),
    ):
        """
        Initialize the resolver.

        Args:
            placeholder_resolver: Renders level labels against the current time
            headings: Heading levels, outermost first
            list_items: List-item levels placed under the leaf heading
        """
        self.placeholder_resolver = placeholder_resolver
        self.headings = list(headings)
        self.list_items = list(list_items)

    def merge(self, destination: Section, blocks: Sequence[Block], file=None) -> Section:
        """
        Append blocks to ``destination`` under the date tree for today.

        Args:
            destination: The archive section (or document root) to merge into
            blocks: Blocks to append, in order
            file: Source document used by file placeholders in labels

        Returns:
            The leaf section that received the blocks
        """
        leaf_section = destination
        for level in self.headings:
            label = self._label(level, file)
            leaf_section = self._find_or_create_section(leaf_section, label)

        leaf_block: Block = leaf_section.block_content
        for level in self.list_items:
            label = self._label(level, file)
            leaf_block = self._find_or_create_block(leaf_block, label)

        for block in blocks:
            append_before_trailing_blanks(leaf_block, block)
        return leaf_section

    def _label(self, level: TreeLevelConfig, file) -> str:
        return self.placeholder_resolver.resolve(level.text, level.date_format, file).strip()

    @staticmethod
    def _find_or_create_section(parent: Section, label: str) -> Section:
        for child in parent.children:
            if child.title == label:
                return child
        section = Section.heading(label, parent.token_level + 1)
        parent.append_child(section)
        logging.debug(f"Created date heading '{label}' at level {section.token_level}")
        return section

    @staticmethod
    def _find_or_create_block(parent: Block, label: str) -> Block:
        text = f"- {label}"
        for child in parent.children:
            if child.first_line.strip() == text:
                return child
        block = Block(text)
        append_before_trailing_blanks(parent, block)
        logging.debug(f"Created date list item '{label}'")
        return block
