"""
Settings models for Shelver.

This module defines the validated configuration value handed to the archiver
at construction. Each service receives only the slice it needs.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


DEFAULT_DATE_FORMAT = "%Y-%m-%d"


class IndentationSettings(BaseModel):
    """
    How one level of list nesting is written.
    """

    use_tab: bool = Field(
        True,
        description="Indent nested list items with a tab character"
    )

    tab_size: int = Field(
        4,
        ge=1,
        description="Number of spaces per level when tabs are not used"
    )

    @property
    def indentation(self) -> str:
        """The string for a single indentation level."""
        return "\t" if self.use_tab else " " * self.tab_size


class MetadataSettings(BaseModel):
    """
    Metadata appended to tasks as they are archived.
    """

    add_metadata: bool = Field(
        False,
        description="Append the metadata template to each archived task"
    )

    metadata: str = Field(
        "(completed: {{date}}; source: {{sourceFileName}})",
        description="Template appended to the first line of the task"
    )

    date_format: str = Field(
        DEFAULT_DATE_FORMAT,
        description="strftime format used for {{date}}"
    )


class TextReplacementSettings(BaseModel):
    """
    A regex substitution applied to archived text.
    """

    apply_replacement: bool = Field(
        False,
        description="Apply the substitution before archiving"
    )

    regex: str = Field(
        "#([A-Za-z-]+)",
        description="Pattern to search for"
    )

    replacement: str = Field(
        "@\\1",
        description="Replacement in re.sub syntax"
    )


class TreeLevelConfig(BaseModel):
    """
    One level of the date tree, either a heading or a list item.
    """

    text: str = Field(
        "{{date}}",
        description="Label template for this level"
    )

    date_format: str = Field(
        DEFAULT_DATE_FORMAT,
        description="strftime format used for {{date}} at this level"
    )


class Rule(BaseModel):
    """
    Routes tasks with certain status markers to a destination.
    """

    statuses: str = Field(
        "",
        description="Status characters this rule applies to, e.g. 'x-'"
    )

    archive_to_separate_file: bool = Field(
        False,
        description="Archive into a separate file instead of the source document"
    )

    default_archive_file_name: str = Field(
        "{{sourceFileName}} (archive)",
        description="Destination path template, relative to the vault, without extension"
    )

    date_format: Optional[str] = Field(
        None,
        description="strftime format used for {{date}} in the path and metadata; None uses the global formats"
    )


class ArchiverSettings(BaseModel):
    """
    Complete configuration of the archiving engine.
    """

    archive_heading: str = Field(
        "Archived",
        description="Heading template of the archive section"
    )

    archive_heading_depth: int = Field(
        1,
        ge=1,
        le=6,
        description="Level of a newly created archive heading"
    )

    archive_under_heading: bool = Field(
        False,
        description="Wrap content in the archive heading even in a separate archive file"
    )

    archive_to_separate_file: bool = Field(
        False,
        description="Default destination is a separate file"
    )

    default_archive_file_name: str = Field(
        "{{sourceFileName}} (archive)",
        description="Default destination path template"
    )

    date_format: str = Field(
        DEFAULT_DATE_FORMAT,
        description="strftime format used for {{date}} in the default destination path"
    )

    add_newlines_around_headings: bool = Field(
        True,
        description="Separate a new archive heading from preceding content with a blank line"
    )

    indentation: IndentationSettings = Field(default_factory=IndentationSettings)

    archive_all_checked_task_types: bool = Field(
        False,
        description="Treat every non-blank status marker as done"
    )

    task_pattern: str = Field(
        "",
        description="Optional regex a task must contain to be archived"
    )

    archive_only_if_subtasks_are_done: bool = Field(
        False,
        description="Skip tasks that still have unfinished sub-tasks"
    )

    additional_metadata_before_archiving: MetadataSettings = Field(default_factory=MetadataSettings)

    text_replacement: TextReplacementSettings = Field(default_factory=TextReplacementSettings)

    headings: List[TreeLevelConfig] = Field(
        default_factory=list,
        description="Date tree heading levels, outermost first"
    )

    list_items: List[TreeLevelConfig] = Field(
        default_factory=list,
        description="Date tree list-item levels under the leaf heading"
    )

    rules: List[Rule] = Field(default_factory=list)

    def default_rule(self) -> Rule:
        """The rule used when no configured rule matches a task."""
        return Rule(
            statuses="",
            archive_to_separate_file=self.archive_to_separate_file,
            default_archive_file_name=self.default_archive_file_name,
            date_format=None,
        )
