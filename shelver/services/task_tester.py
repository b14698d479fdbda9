"""
Task status detection for Shelver.
"""

import re
from typing import Iterable, Optional

from ..models import Block


TASK_PATTERN = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+\[(.)\]")
COMPLETED_STATUSES = "xX"


def get_task_status(text: Optional[str]) -> Optional[str]:
    """
    Return the status character of a checklist item, or None.

    Only the first line of ``text`` is inspected.
    """
    if not text:
        return None
    match = TASK_PATTERN.match(text.split("\n", 1)[0])
    return match.group(1) if match else None


def complete_task(text: str) -> str:
    """Mark an open checklist item as done."""
    return text.replace("[ ]", "[x]", 1)


class TaskTester:
    """
    Decides which blocks need archiving.
    """

    def __init__(
        self,
        extra_statuses: Iterable[str] = (),
        archive_all_checked_task_types: bool = False,
        task_pattern: str = "",
        archive_only_if_subtasks_are_done: bool = False,
    ):
        """
        Initialize the tester.

        Args:
            extra_statuses: Status characters that count as done besides 'x'
            archive_all_checked_task_types: Any non-blank status counts as done
            task_pattern: Regex a task's text must contain, empty for any
            archive_only_if_subtasks_are_done: Require every checklist descendant to be done
        """
        self.done_statuses = set(COMPLETED_STATUSES).union(*extra_statuses)
        self.archive_all_checked_task_types = archive_all_checked_task_types
        self.task_pattern = re.compile(task_pattern) if task_pattern else None
        self.archive_only_if_subtasks_are_done = archive_only_if_subtasks_are_done

    def is_done(self, text: Optional[str]) -> bool:
        status = get_task_status(text)
        if status is None:
            return False
        if self.archive_all_checked_task_types:
            return not status.isspace()
        return status in self.done_statuses

    def does_task_need_archiving(self, text: Optional[str]) -> bool:
        """Check a task's own text against the status and pattern settings."""
        if not self.is_done(text):
            return False
        return self.task_pattern is None or self.task_pattern.search(text) is not None

    def does_block_need_archiving(self, block: Block) -> bool:
        """Check a block, including its sub-tasks when configured to."""
        if not self.does_task_need_archiving(block.text):
            return False
        if not self.archive_only_if_subtasks_are_done:
            return True
        return all(
            self.is_done(child.text)
            for child in block.walk()
            if child is not block and get_task_status(child.text) is not None
        )
