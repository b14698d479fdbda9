"""
Placeholder resolution for Shelver.

Templates such as ``"Archive {{date}}"`` or ``"archive/{{sourceFileName}}"``
are parsed into literal and placeholder segments. A parsed template can be
rendered against the current time, or turned into a regular expression that
recognizes anything it could have rendered, whatever the date was.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Pattern, Union

from ..models.settings import DEFAULT_DATE_FORMAT


PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")

DATE = "date"
SOURCE_FILE_NAME = "sourceFileName"
SOURCE_FILE_PATH = "sourceFilePath"
KNOWN_PLACEHOLDERS = (DATE, SOURCE_FILE_NAME, SOURCE_FILE_PATH)

# strftime directive -> pattern for the text it produces
DIRECTIVE_PATTERNS = {
    "Y": r"\d{4}",
    "G": r"\d{4}",
    "y": r"\d{2}",
    "m": r"\d{2}",
    "d": r"\d{2}",
    "H": r"\d{2}",
    "I": r"\d{2}",
    "M": r"\d{2}",
    "S": r"\d{2}",
    "U": r"\d{2}",
    "W": r"\d{2}",
    "V": r"\d{2}",
    "j": r"\d{3}",
    "f": r"\d{6}",
    "u": r"\d",
    "w": r"\d",
    "e": r"[ \d]\d",
    "A": r"[^\W\d_]+",
    "a": r"[^\W\d_]+\.?",
    "B": r"[^\W\d_]+",
    "b": r"[^\W\d_]+\.?",
    "p": r"[^\W\d_]+\.?",
    "z": r"(?:[+-]\d{4})?",
    "Z": r"[^\W\d_]*",
}


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Placeholder:
    name: str

    @property
    def token(self) -> str:
        return "{{" + self.name + "}}"


Segment = Union[Literal, Placeholder]


def date_format_pattern(date_format: str) -> str:
    """
    Build a pattern matching any output of ``strftime(date_format)``.

    Unknown directives match any non-empty text.
    """
    parts: List[str] = []
    index = 0
    while index < len(date_format):
        char = date_format[index]
        if char != "%" or index + 1 >= len(date_format):
            parts.append(re.escape(char))
            index += 1
            continue

        directive = date_format[index + 1]
        index += 2
        if directive == "%":
            parts.append("%")
            continue

        unpadded = directive == "-" and index < len(date_format)
        if unpadded:
            directive = date_format[index]
            index += 1

        pattern = DIRECTIVE_PATTERNS.get(directive, r".+?")
        if unpadded:
            pattern = re.sub(r"\\d\{(\d)\}", r"\\d{1,\1}", pattern)
        parts.append(pattern)
    return "".join(parts)


class Template:
    """
    A parsed template: a sequence of literal and placeholder segments.
    """

    def __init__(self, segments: List[Segment]):
        self.segments = segments

    @classmethod
    def parse(cls, template: str) -> 'Template':
        """Split a template string into segments; unknown tokens stay literal."""
        segments: List[Segment] = []
        position = 0
        for match in PLACEHOLDER_PATTERN.finditer(template):
            if match.group(1) not in KNOWN_PLACEHOLDERS:
                continue
            if match.start() > position:
                segments.append(Literal(template[position:match.start()]))
            segments.append(Placeholder(match.group(1)))
            position = match.end()
        if position < len(template):
            segments.append(Literal(template[position:]))
        return cls(segments)

    def render(self, values: Dict[str, str]) -> str:
        """Substitute placeholder values; placeholders without a value stay as written."""
        return "".join(
            segment.text if isinstance(segment, Literal) else values.get(segment.name, segment.token)
            for segment in self.segments
        )

    def recognizer(self, date_format: str = DEFAULT_DATE_FORMAT) -> Pattern[str]:
        """
        Build a pattern that fully matches every rendering of this template.

        Dates are matched by the shape of ``date_format``; source file
        placeholders match any text, and so does their literal token.
        """
        parts: List[str] = []
        for segment in self.segments:
            if isinstance(segment, Literal):
                parts.append(re.escape(segment.text))
            elif segment.name == DATE:
                parts.append(f"(?:{date_format_pattern(date_format)}|{re.escape(segment.token)})")
            else:
                parts.append(".+?")
        return re.compile("".join(parts))


class PlaceholderResolver:
    """
    Resolves placeholders in path and heading templates.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        """
        Initialize the resolver.

        Args:
            clock: Source of the current time
        """
        self.clock = clock

    def resolve(self, template: str, date_format: str = DEFAULT_DATE_FORMAT, file=None) -> str:
        """
        Render a template against the current time.

        Args:
            template: Text containing {{date}}, {{sourceFileName}} or {{sourceFilePath}}
            date_format: strftime format for {{date}}
            file: The source document, if known; provides ``name`` and ``path``

        Returns:
            The rendered string
        """
        values = {DATE: self.clock().strftime(date_format or DEFAULT_DATE_FORMAT)}
        if file is not None:
            values[SOURCE_FILE_NAME] = file.name
            values[SOURCE_FILE_PATH] = file.path
        return Template.parse(template).render(values)

    def build_pattern(self, template: str, date_format: str = DEFAULT_DATE_FORMAT) -> Pattern[str]:
        """Build the recognition pattern for a template."""
        return Template.parse(template).recognizer(date_format or DEFAULT_DATE_FORMAT)

    def matches(self, template: str, text: Optional[str], date_format: str = DEFAULT_DATE_FORMAT) -> bool:
        """Whether ``text`` (surrounding whitespace ignored) could have been rendered from ``template``."""
        if text is None:
            return False
        return self.build_pattern(template, date_format).fullmatch(text.strip()) is not None
