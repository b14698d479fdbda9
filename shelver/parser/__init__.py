"""Parsing of document lines into Section trees."""

from .section_parser import SectionParser, fenced_lines, indentation_depth, is_heading, is_list_item

__all__ = ["SectionParser", "fenced_lines", "indentation_depth", "is_heading", "is_list_item"]
