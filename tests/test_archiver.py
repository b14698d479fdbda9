"""
Tests for the archiver.

Exercises the archiving operations end to end against in-memory editor
documents and temporary vault folders.
"""

import shutil
import tempfile
import threading
import unittest
from datetime import datetime
from pathlib import Path

from shelver.documents import BufferEditor, EditorFile, NotADocumentError, Position, Vault
from shelver.models import (
    ArchiverSettings,
    MetadataSettings,
    Rule,
    TextReplacementSettings,
    TreeLevelConfig,
)
from shelver.services import Archiver, ExtractionMode


FIXED_NOW = datetime(2024, 5, 22, 9, 0)


def fixed_clock():
    return FIXED_NOW


class ArchiverTestCase(unittest.TestCase):
    """Shared fixtures: a temporary vault and editor-backed documents."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.vault = Vault(self.temp_dir)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def make_archiver(self, **settings):
        return Archiver(ArchiverSettings(**settings), self.vault, clock=fixed_clock)

    def make_file(self, text, cursor=Position(0, 0)):
        return EditorFile(BufferEditor(text, cursor), name="todo", path="todo.md")

    def read_vault_file(self, relative_path):
        return (Path(self.temp_dir) / relative_path).read_text(encoding="utf-8")


class TestArchiveTasks(ArchiverTestCase):
    """Test archiving every finished task in a document."""

    def test_archive_to_heading_in_same_file(self):
        archiver = self.make_archiver(archive_heading="Archive", archive_heading_depth=4)
        file = self.make_file("# Log\n- [ ] task A\n- [x] task B\n")

        report = archiver.archive_tasks_in_file(file)

        self.assertEqual(report, "Archived 1 tasks")
        self.assertEqual(
            file.editor.get_value(),
            "# Log\n- [ ] task A\n\n#### Archive\n- [x] task B",
        )
        tree = archiver.parser.parse(file.read_lines())
        log = tree.children[0]
        self.assertEqual([b.text for b in log.block_content.children], ["- [ ] task A", ""])
        self.assertEqual([s.title for s in log.children], ["Archive"])

    def test_archiving_again_finds_nothing(self):
        archiver = self.make_archiver(archive_heading="Archive", archive_heading_depth=4)
        file = self.make_file("# Log\n- [ ] task A\n- [x] task B\n")
        archiver.archive_tasks_in_file(file)
        archived = file.editor.get_value()

        report = archiver.archive_tasks_in_file(file)

        self.assertEqual(report, "No tasks to archive")
        self.assertEqual(file.editor.get_value(), archived)

    def test_reuses_existing_archive_section(self):
        archiver = self.make_archiver()
        file = self.make_file("# Todo\n- [x] new\n# Archived\n- [x] old")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(file.editor.get_value(), "# Todo\n# Archived\n- [x] old\n- [x] new")

    def test_dated_archive_heading_is_recognized(self):
        archiver = self.make_archiver(archive_heading="Archived {{date}}")
        file = self.make_file("- [x] new\n# Archived 2020-01-01\n- [x] old")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(file.editor.get_value(), "# Archived 2020-01-01\n- [x] old\n- [x] new")

    def test_new_dated_archive_heading(self):
        archiver = self.make_archiver(archive_heading="Archived {{date}}", date_format="%Y")
        file = self.make_file("- [x] new")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(file.editor.get_value(), "# Archived 2024\n- [x] new")

    def test_date_tree(self):
        archiver = self.make_archiver(
            headings=[TreeLevelConfig(text="{{date}}", date_format="%Y-%m-%d")]
        )
        file = self.make_file("- [x] a\n- [ ] b")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(file.editor.get_value(), "- [ ] b\n\n# Archived\n## 2024-05-22\n- [x] a")

    def test_deep_extraction(self):
        archiver = self.make_archiver()
        file = self.make_file("- [ ] parent\n\t- [x] child\n\t- [ ] other")

        report = archiver.archive_tasks_in_file(file, ExtractionMode.DEEP)

        self.assertEqual(report, "Archived 1 tasks")
        self.assertEqual(
            file.editor.get_value(),
            "- [ ] parent\n\t- [ ] other\n\n# Archived\n- [x] child",
        )

    def test_without_blank_line_separation(self):
        archiver = self.make_archiver(add_newlines_around_headings=False)
        file = self.make_file("- [x] a\n- [ ] b")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(file.editor.get_value(), "- [ ] b\n# Archived\n- [x] a")

    def test_metadata_and_replacement(self):
        archiver = self.make_archiver(
            additional_metadata_before_archiving=MetadataSettings(add_metadata=True),
            text_replacement=TextReplacementSettings(apply_replacement=True),
        )
        file = self.make_file("- [x] call #bob")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(
            file.editor.get_value(),
            "# Archived\n- [x] call @bob (completed: 2024-05-22; source: todo)",
        )

    def test_spaces_indentation(self):
        archiver = self.make_archiver(indentation={"use_tab": False, "tab_size": 2})
        file = self.make_file("- [x] a\n  - sub\n- [ ] b")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(file.editor.get_value(), "- [ ] b\n\n# Archived\n- [x] a\n  - sub")


class TestDeleteTasks(ArchiverTestCase):
    """Test deleting finished tasks."""

    def test_delete(self):
        archiver = self.make_archiver()
        file = self.make_file("# Log\n- [ ] task A\n- [x] task B\n")

        report = archiver.delete_tasks_in_file(file)

        self.assertEqual(report, "Deleted 1 tasks")
        self.assertEqual(file.editor.get_value(), "# Log\n- [ ] task A\n")

    def test_nothing_to_delete(self):
        archiver = self.make_archiver()
        file = self.make_file("- [ ] open")

        self.assertEqual(archiver.delete_tasks_in_file(file), "No tasks to delete")
        self.assertEqual(file.editor.get_value(), "- [ ] open")

    def test_deep_delete(self):
        archiver = self.make_archiver()
        file = self.make_file("- [ ] parent\n\t- [x] child")

        self.assertEqual(archiver.delete_tasks_in_file(file, ExtractionMode.DEEP), "Deleted 1 tasks")
        self.assertEqual(file.editor.get_value(), "- [ ] parent")


class TestRules(ArchiverTestCase):
    """Test routing tasks to destinations by rule."""

    def test_rules_route_to_separate_files(self):
        archiver = self.make_archiver(rules=[
            Rule(statuses="x", archive_to_separate_file=True, default_archive_file_name="archive/done"),
            Rule(statuses="-", archive_to_separate_file=True, default_archive_file_name="archive/cancelled"),
        ])
        file = self.make_file("- [x] done task\n- [-] cancelled task\n- [ ] open task")

        report = archiver.archive_tasks_in_file(file)

        self.assertEqual(report, "Archived 2 tasks")
        self.assertEqual(file.editor.get_value(), "- [ ] open task")
        self.assertEqual(self.read_vault_file("archive/done.md"), "- [x] done task")
        self.assertEqual(self.read_vault_file("archive/cancelled.md"), "- [-] cancelled task")

    def test_first_matching_rule_wins(self):
        archiver = self.make_archiver(rules=[
            Rule(statuses="x-", archive_to_separate_file=True, default_archive_file_name="first"),
            Rule(statuses="x", archive_to_separate_file=True, default_archive_file_name="second"),
        ])

        rule = archiver.get_rule(archiver.parser.parse(["- [x] a"]).block_content.children[0])

        self.assertEqual(rule.default_archive_file_name, "first")

    def test_unmatched_status_uses_default_rule(self):
        archiver = self.make_archiver(
            archive_to_separate_file=True,
            rules=[Rule(statuses="-", archive_to_separate_file=True, default_archive_file_name="cancelled")],
        )
        file = self.make_file("- [x] done\n- [-] dropped")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(self.read_vault_file("todo (archive).md"), "- [x] done")
        self.assertEqual(self.read_vault_file("cancelled.md"), "- [-] dropped")

    def test_rule_date_format_in_path(self):
        archiver = self.make_archiver(rules=[
            Rule(
                statuses="x",
                archive_to_separate_file=True,
                default_archive_file_name="archive/{{date}}",
                date_format="%Y-%m",
            ),
        ])
        file = self.make_file("- [x] done")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(self.read_vault_file("archive/2024-05.md"), "- [x] done")

    def test_rule_keeping_tasks_in_same_file(self):
        archiver = self.make_archiver(
            archive_to_separate_file=True,
            rules=[Rule(statuses="x", archive_to_separate_file=False)],
        )
        file = self.make_file("- [x] done")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(file.editor.get_value(), "# Archived\n- [x] done")

    def test_separate_file_under_heading(self):
        archiver = self.make_archiver(archive_to_separate_file=True, archive_under_heading=True)
        file = self.make_file("- [x] done")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(self.read_vault_file("todo (archive).md"), "# Archived\n- [x] done")

    def test_appends_to_existing_archive_file(self):
        Path(self.temp_dir, "todo (archive).md").write_text("- [x] earlier", encoding="utf-8")
        archiver = self.make_archiver(archive_to_separate_file=True)
        file = self.make_file("- [x] done")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(self.read_vault_file("todo (archive).md"), "- [x] earlier\n- [x] done")

    def test_destination_folder_is_an_error(self):
        Path(self.temp_dir, "archive", "done.md").mkdir(parents=True)
        archiver = self.make_archiver(rules=[
            Rule(statuses="x", archive_to_separate_file=True, default_archive_file_name="archive/done"),
        ])
        file = self.make_file("- [x] done")

        with self.assertRaises(NotADocumentError):
            archiver.archive_tasks_in_file(file)


class TestCursorOperations(ArchiverTestCase):
    """Test archiving the task or heading under the cursor."""

    TASKS = "# Tasks\n- [ ] first\n- [ ] second\n\t- [ ] sub\n- [ ] third"

    def test_archive_task_under_cursor(self):
        archiver = self.make_archiver()
        file = self.make_file(self.TASKS, Position(2, 3))

        report = archiver.archive_task_under_cursor(file)

        self.assertEqual(report, "Archived 1 task")
        self.assertEqual(
            file.editor.get_value(),
            "# Tasks\n- [ ] first\n- [ ] third\n\n# Archived\n- [x] second\n\t- [ ] sub",
        )
        self.assertEqual(file.editor.get_cursor(), Position(2, 0))

    def test_archive_nested_task_under_cursor(self):
        archiver = self.make_archiver()
        file = self.make_file(self.TASKS, Position(3, 0))

        archiver.archive_task_under_cursor(file)

        self.assertEqual(
            file.editor.get_value(),
            "# Tasks\n- [ ] first\n- [ ] second\n- [ ] third\n\n# Archived\n- [x] sub",
        )

    def test_archive_task_to_default_separate_file(self):
        archiver = self.make_archiver(archive_to_separate_file=True)
        file = self.make_file(self.TASKS, Position(1, 0))

        archiver.archive_task_under_cursor(file)

        self.assertEqual(file.editor.get_value(), "# Tasks\n- [ ] second\n\t- [ ] sub\n- [ ] third")
        self.assertEqual(self.read_vault_file("todo (archive).md"), "- [x] first")

    def test_no_task_under_cursor(self):
        archiver = self.make_archiver()
        file = self.make_file(self.TASKS, Position(0, 0))

        self.assertEqual(archiver.archive_task_under_cursor(file), "No task under cursor")
        self.assertEqual(file.editor.get_value(), self.TASKS)

    HEADINGS = "# Project\n## Done part\n- [x] a\n### Detail\n- b\n## Open part\n- [ ] c"

    def test_archive_heading_under_cursor(self):
        archiver = self.make_archiver()
        file = self.make_file(self.HEADINGS, Position(2, 0))

        report = archiver.archive_heading_under_cursor(file)

        self.assertEqual(report, "Archived 1 heading")
        self.assertEqual(
            file.editor.get_value(),
            "# Project\n## Open part\n- [ ] c\n\n# Archived\n## Done part\n- [x] a\n### Detail\n- b",
        )

    def test_archived_heading_is_relevelled(self):
        archiver = self.make_archiver(archive_heading_depth=2)
        file = self.make_file(self.HEADINGS, Position(1, 0))

        archiver.archive_heading_under_cursor(file)

        self.assertEqual(
            file.editor.get_value(),
            "# Project\n## Open part\n- [ ] c\n\n## Archived\n### Done part\n- [x] a\n#### Detail\n- b",
        )

    def test_archive_heading_into_existing_archive(self):
        archiver = self.make_archiver()
        file = self.make_file("# Archived\n- [x] old\n# Finished\n- [x] item", Position(2, 0))

        archiver.archive_heading_under_cursor(file)

        self.assertEqual(file.editor.get_value(), "# Archived\n- [x] old\n## Finished\n- [x] item")

    def test_archive_heading_to_separate_file_root(self):
        archiver = self.make_archiver(archive_to_separate_file=True)
        file = self.make_file("# Keep\n### Old\n- [x] a", Position(1, 0))

        archiver.archive_heading_under_cursor(file)

        self.assertEqual(file.editor.get_value(), "# Keep")
        self.assertEqual(self.read_vault_file("todo (archive).md"), "# Old\n- [x] a")

    def test_no_heading_under_cursor(self):
        archiver = self.make_archiver()
        file = self.make_file("- [ ] task\n# Later", Position(0, 0))

        self.assertEqual(archiver.archive_heading_under_cursor(file), "No heading under cursor")
        self.assertEqual(file.editor.get_value(), "- [ ] task\n# Later")


class TestTrailingBlankLines(ArchiverTestCase):
    """Test that blank lines ending a destination stay at its end."""

    def test_separate_file_keeps_final_newline(self):
        Path(self.temp_dir, "todo (archive).md").write_text("- [x] earlier\n", encoding="utf-8")
        archiver = self.make_archiver(archive_to_separate_file=True)
        file = self.make_file("- [x] done\n")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(self.read_vault_file("todo (archive).md"), "- [x] earlier\n- [x] done\n")

    def test_second_run_into_same_file(self):
        archiver = self.make_archiver(archive_heading="Archive")
        file = self.make_file("# Log\n- [x] B\n\n# Archive\n- [x] A\n")

        archiver.archive_tasks_in_file(file)

        self.assertEqual(file.editor.get_value(), "# Log\n\n# Archive\n- [x] A\n- [x] B\n")


class TestFencedCode(ArchiverTestCase):
    """Test cursor operations next to fenced code."""

    def test_heading_with_fenced_comment(self):
        archiver = self.make_archiver()
        file = self.make_file("# A\n```sh\n# comment in code\n```\n- [ ] x\n# B\n- [ ] y", Position(0, 0))

        archiver.archive_heading_under_cursor(file)

        self.assertEqual(
            file.editor.get_value(),
            "# B\n- [ ] y\n\n# Archived\n## A\n```sh\n# comment in code\n```\n- [ ] x",
        )


class TestHeadingLevelCap(ArchiverTestCase):
    """Test headings moved below a level six archive heading."""

    def test_levels_are_capped_at_six(self):
        archiver = self.make_archiver(archive_heading_depth=6)
        file = self.make_file(TestCursorOperations.HEADINGS, Position(1, 0))

        with self.assertLogs(level="WARNING"):
            archiver.archive_heading_under_cursor(file)

        self.assertEqual(
            file.editor.get_value(),
            "# Project\n## Open part\n- [ ] c\n\n###### Archived\n###### Done part\n- [x] a\n###### Detail\n- b",
        )


class TestConcurrentArchiving(ArchiverTestCase):
    """Test archiving from several threads into one destination."""

    def test_vault_lock_is_shared_and_reentrant(self):
        lock = self.vault.lock("todo.md")

        self.assertIs(self.vault.lock("./todo.md"), lock)
        self.assertIs(Vault(self.temp_dir).lock(Path("todo.md")), lock)
        self.assertIsNot(self.vault.lock("other.md"), lock)
        with lock:
            with self.vault.lock("todo.md"):
                pass

    def test_archives_into_same_destination(self):
        for name in ("a.md", "b.md"):
            Path(self.temp_dir, name).write_text(f"- [x] from {name}\n- [ ] open", encoding="utf-8")
        archiver = self.make_archiver(archive_to_separate_file=True, default_archive_file_name="archive/done")
        destination = self.vault.get_or_create_file("archive/done")

        threads = [
            threading.Thread(target=archiver.archive_tasks_in_file, args=(self.vault.get_file(name),))
            for name in ("a.md", "b.md")
        ]
        with destination.lock():
            for thread in threads:
                thread.start()
            self.assertEqual(self.read_vault_file("archive/done.md"), "")
        for thread in threads:
            thread.join(timeout=10)

        archived = self.read_vault_file("archive/done.md").split("\n")
        self.assertEqual(sorted(archived), ["- [x] from a.md", "- [x] from b.md"])
        self.assertEqual(self.read_vault_file("a.md"), "- [ ] open")
        self.assertEqual(self.read_vault_file("b.md"), "- [ ] open")


if __name__ == "__main__":
    unittest.main()
