"""
Archiver for Shelver.

This module coordinates the whole archiving pipeline: it parses documents,
extracts finished tasks, routes them by rule, merges them into their archive
destinations and writes every touched document back.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, TypeVar

from ..documents import (
    ActiveFile,
    EditorFile,
    Position,
    Vault,
    detect_heading_under_cursor,
    detect_list_item_under_cursor,
    removal_range,
)
from ..models import ArchiverSettings, Block, Rule, Section
from ..parser import SectionParser
from .date_tree import DateTreeResolver
from .extraction import (
    ExtractionMode,
    TreeFilter,
    add_newlines_to_section,
    extract_blocks,
    find_section_recursively,
)
from .metadata import MetadataService
from .placeholders import PlaceholderResolver
from .task_tester import TaskTester, complete_task, get_task_status
from .text_replacement import TextReplacementService


CURRENT_FILE = "current-file"

T = TypeVar("T")


@dataclass
class TaskWithRule:
    """
    An extracted task and the rule that decides where it goes.
    """
    task: Block
    rule: Rule


def dedent_lines(lines: List[str]) -> List[str]:
    """Remove the first line's leading whitespace from every line that carries it."""
    if not lines:
        return lines
    first = lines[0]
    prefix = first[:len(first) - len(first.lstrip())]
    return [line[len(prefix):] if line.startswith(prefix) else line for line in lines]


class Archiver:
    """
    Moves finished tasks and headings into archive sections and files.
    """

    def __init__(
        self,
        settings: ArchiverSettings,
        vault: Optional[Vault] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the archiver.

        Args:
            settings: Validated archiver settings
            vault: Folder that separate archive files are created in
            clock: Source of the current time for dates in labels and paths
        """
        self.settings = settings
        self.vault = vault or Vault()
        self.parser = SectionParser(settings.indentation.indentation)
        self.placeholder_resolver = PlaceholderResolver(clock)
        self.date_tree_resolver = DateTreeResolver(
            self.placeholder_resolver, settings.headings, settings.list_items
        )
        self.task_tester = TaskTester(
            extra_statuses=[rule.statuses for rule in settings.rules],
            archive_all_checked_task_types=settings.archive_all_checked_task_types,
            task_pattern=settings.task_pattern,
            archive_only_if_subtasks_are_done=settings.archive_only_if_subtasks_are_done,
        )
        self.text_replacement_service = TextReplacementService(settings.text_replacement)
        self.metadata_service = MetadataService(
            self.placeholder_resolver, settings.additional_metadata_before_archiving
        )
        self.archive_heading_pattern = self.placeholder_resolver.build_pattern(
            settings.archive_heading.strip(), settings.date_format
        )
        self.task_filter = TreeFilter(
            block_filter=self.task_tester.does_block_need_archiving,
            section_filter=lambda section: not self.is_archive(section),
        )

    # Public operations

    def archive_tasks_in_file(self, file: ActiveFile, mode: ExtractionMode = ExtractionMode.SHALLOW) -> str:
        """
        Archive every finished task in a document.

        Args:
            file: The source document
            mode: Shallow extraction takes whole top-level tasks; deep
                extraction also pulls finished sub-tasks out of open parents

        Returns:
            A short report for the user
        """
        tasks = [
            TaskWithRule(task, self.get_rule(task))
            for task in self._extract_tasks_from_file(file, mode)
        ]
        if not tasks:
            logging.info(f"No tasks to archive in {file.path or file.name}")
            return "No tasks to archive"

        self._archive_tasks(tasks, file)
        logging.info(f"Archived {len(tasks)} tasks from {file.path or file.name}")
        return f"Archived {len(tasks)} tasks"

    def delete_tasks_in_file(self, file: ActiveFile, mode: ExtractionMode = ExtractionMode.SHALLOW) -> str:
        """Remove every finished task from a document without archiving it."""
        tasks = self._extract_tasks_from_file(file, mode)
        if not tasks:
            logging.info(f"No tasks to delete in {file.path or file.name}")
            return "No tasks to delete"

        logging.info(f"Deleted {len(tasks)} tasks from {file.path or file.name}")
        return f"Deleted {len(tasks)} tasks"

    def archive_task_under_cursor(self, file: EditorFile) -> str:
        """
        Complete and archive the list item under the editor's cursor.

        The item is cut out of the editor with its nested content, marked as
        done and archived with the default rule. The cursor ends up where the
        item used to start.
        """
        editor = file.editor
        task_range = detect_list_item_under_cursor(editor)
        if task_range is None:
            logging.info("No list item under cursor")
            return "No task under cursor"

        task_lines = dedent_lines(editor.get_range(*task_range).split("\n"))
        editor.replace_range("", *removal_range(editor, task_range))

        parsed_task_root = self.parser.parse(task_lines)
        task = parsed_task_root.block_content.children[0]
        task.text = complete_task(task.text)

        self._archive_tasks([TaskWithRule(task, self.settings.default_rule())], file)
        self._restore_cursor(file, task_range[0])
        return "Archived 1 task"

    def archive_heading_under_cursor(self, file: EditorFile) -> str:
        """
        Archive the heading under the editor's cursor with everything nested in it.

        The moved headings are re-levelled to sit below the archive heading.
        """
        editor = file.editor
        heading_range = detect_heading_under_cursor(editor)
        if heading_range is None:
            logging.info("No heading under cursor")
            return "No heading under cursor"

        heading_lines = editor.get_range(*heading_range).split("\n")
        editor.replace_range("", *removal_range(editor, heading_range))

        parsed_heading_root = self.parser.parse(heading_lines)
        self._archive_section(file, parsed_heading_root.children[0])
        self._restore_cursor(file, heading_range[0])
        return "Archived 1 heading"

    # Rules and destinations

    def get_rule(self, task: Block) -> Rule:
        """Pick the first rule listing the task's status, or the default rule."""
        status = get_task_status(task.text)
        if status is not None:
            for rule in self.settings.rules:
                if status in rule.statuses:
                    return rule
        return self.settings.default_rule()

    def get_archive_path(self, rule: Rule, source: ActiveFile) -> str:
        if not rule.archive_to_separate_file:
            return CURRENT_FILE
        return self.placeholder_resolver.resolve(
            rule.default_archive_file_name,
            rule.date_format or self.settings.date_format,
            source,
        )

    def is_archive(self, section: Section) -> bool:
        return self.archive_heading_pattern.fullmatch(section.title) is not None

    def _get_archive_file(self, active_file: ActiveFile, path: str) -> ActiveFile:
        if path == CURRENT_FILE:
            return active_file
        return self.vault.get_or_create_file(path)

    def _get_archive_section_from_root(self, root: Section, separate_file: bool, source: ActiveFile) -> Section:
        if separate_file and not self.settings.archive_under_heading:
            return root

        existing_archive_section = find_section_recursively(root, self.is_archive)
        if existing_archive_section is not None:
            return existing_archive_section

        if self.settings.add_newlines_around_headings:
            add_newlines_to_section(root)

        heading = self.placeholder_resolver.resolve(
            self.settings.archive_heading.strip(), self.settings.date_format, source
        )
        archive_section = Section.heading(heading, self.settings.archive_heading_depth)
        root.append_child(archive_section)
        logging.info(f"Created archive heading '{heading}'")
        return archive_section

    # Tree editing

    def _edit_file_tree(self, file: ActiveFile, callback: Callable[[Section], T]) -> T:
        """Run one read-mutate-write cycle on a document."""
        with file.lock():
            tree = self.parser.parse(file.read_lines())
            result = callback(tree)
            file.write_lines(self._stringify_tree(tree))
        return result

    def _stringify_tree(self, tree: Section) -> List[str]:
        return tree.stringify(self.settings.indentation.indentation)

    def _extract_tasks_from_file(self, file: ActiveFile, mode: ExtractionMode) -> List[Block]:
        return self._edit_file_tree(
            file, lambda root: extract_blocks(root, self.task_filter, mode)
        )

    def _archive_tasks(self, tasks: List[TaskWithRule], active_file: ActiveFile) -> None:
        """
        Merge tasks into their destinations, one read-mutate-write per destination.

        Destinations are processed in order of first appearance; an error in
        one of them stops the remaining ones.
        """
        groups: Dict[str, List[Block]] = {}
        for task_with_rule in tasks:
            task = self.text_replacement_service.replace_text(task_with_rule.task)
            task = self.metadata_service.append_metadata(task, task_with_rule.rule, active_file)
            archive_path = self.get_archive_path(task_with_rule.rule, active_file)
            groups.setdefault(archive_path, []).append(task)

        for archive_path, blocks in groups.items():
            archive_file = self._get_archive_file(active_file, archive_path)
            separate_file = archive_path != CURRENT_FILE
            logging.debug(f"Archiving {len(blocks)} tasks to {archive_path}")
            self._edit_file_tree(
                archive_file,
                lambda root, blocks=blocks, separate_file=separate_file: self._archive_blocks_to_root(
                    blocks, root, separate_file, active_file
                ),
            )

    def _archive_blocks_to_root(self, blocks: List[Block], root: Section, separate_file: bool, source: ActiveFile) -> None:
        archive_section = self._get_archive_section_from_root(root, separate_file, source)
        self.date_tree_resolver.merge(archive_section, blocks, source)

    def _archive_section(self, active_file: ActiveFile, section: Section) -> None:
        rule = self.settings.default_rule()
        archive_path = self.get_archive_path(rule, active_file)
        archive_file = self._get_archive_file(active_file, archive_path)
        separate_file = archive_path != CURRENT_FILE

        def move_section(root: Section) -> None:
            archive_section = self._get_archive_section_from_root(root, separate_file, active_file)
            section.recalculate_token_levels(archive_section.token_level + 1)
            archive_section.append_child(section)

        self._edit_file_tree(archive_file, move_section)

    @staticmethod
    def _restore_cursor(file: EditorFile, position: Position) -> None:
        last_line = file.editor.line_count() - 1
        file.editor.set_cursor(Position(min(position.line, last_line), 0))
