"""
Tree extraction for Shelver.

Recursive helpers that remove matching blocks from a Section tree. The
removed blocks are detached from their owners and handed back to the
caller, which becomes their only owner.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List

from ..models import Block, Section, TextBlock
from ..models.block import is_blank


BlockFilter = Callable[[Block], bool]
SectionFilter = Callable[[Section], bool]


class ExtractionMode(str, Enum):
    """How deep extraction looks into the block tree."""

    SHALLOW = "shallow"
    DEEP = "deep"


@dataclass
class TreeFilter:
    """
    Predicates selecting what to extract.
    """
    block_filter: BlockFilter
    section_filter: SectionFilter


def shallow_extract_blocks(root: Block, block_filter: BlockFilter) -> List[Block]:
    """
    Remove the direct children of ``root`` that match the filter.

    A matching block is extracted together with all of its children.
    """
    return root.remove_children(block_filter)


def deep_extract_blocks(root: Block, block_filter: BlockFilter) -> List[Block]:
    """
    Remove matching blocks at any depth below ``root``.

    A non-matching block keeps its place while its matching descendants are
    extracted on their own; a matching block is extracted as one unit.
    """
    extracted: List[Block] = []
    for child in list(root.children):
        if block_filter(child):
            child.remove_self()
            extracted.append(child)
        else:
            extracted.extend(deep_extract_blocks(child, block_filter))
    return extracted


EXTRACTORS = {
    ExtractionMode.SHALLOW: shallow_extract_blocks,
    ExtractionMode.DEEP: deep_extract_blocks,
}


def extract_blocks(
    root: Section,
    tree_filter: TreeFilter,
    mode: ExtractionMode = ExtractionMode.SHALLOW,
) -> List[Block]:
    """
    Extract matching blocks from a section tree, pre-order.

    A section's own blocks are visited before those of its sub-sections.
    Sub-sections rejected by the section filter are skipped with everything
    nested in them. The root section itself is always visited.

    Args:
        root: The section to extract from; it is mutated in place
        tree_filter: Block and section predicates
        mode: Shallow or deep extraction

    Returns:
        The extracted blocks in document order
    """
    extractor = EXTRACTORS[ExtractionMode(mode)]
    extracted = extractor(root.block_content, tree_filter.block_filter)
    for section in list(root.children):
        if tree_filter.section_filter(section):
            extracted.extend(extract_blocks(section, tree_filter, mode))
    return extracted


def find_section_recursively(root: Section, predicate: SectionFilter):
    """Return the first section below ``root`` matching the predicate, or None."""
    return root.find(predicate)


def add_newlines_to_section(section: Section) -> None:
    """
    Make sure the content rendered last in ``section`` ends with a blank line.

    Used before appending a new heading so it is separated from the text
    above it.
    """
    last_section = section
    while last_section.children:
        last_section = last_section.children[-1]

    blocks = last_section.block_content.children
    if not blocks:
        return
    last_line = blocks[-1].stringify("")[-1]
    if not is_blank(last_line):
        last_section.block_content.append_child(TextBlock(""))
