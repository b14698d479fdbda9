"""
Shelver - archive finished checklist items in markdown documents.

Command line entry point. Each command runs one archiver operation on a
document inside the vault and prints the archiver's report.
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import DEFAULT_CONFIG_PATH, ConfigManager
from .documents import BufferEditor, EditorFile, Position, Vault
from .services import Archiver, ExtractionMode


def setup_logging(config: ConfigManager):
    """Configure logging for the application."""
    level = getattr(logging, str(config.log_level).upper(), logging.INFO)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_filename:
        handlers.append(logging.FileHandler(config.log_filename))

    logging.basicConfig(
        level=level,
        format=config.log_format,
        handlers=handlers,
        force=True
    )


def build_archiver(config: ConfigManager, vault_root: Optional[str] = None) -> Archiver:
    """Create an archiver from configuration."""
    vault = Vault(vault_root or config.vault_root, config.file_extension)
    return Archiver(config.archiver_settings, vault)


def run_file_command(archiver: Archiver, command: str, path: str, deep: bool) -> str:
    """Archive or delete the finished tasks of a whole document."""
    file = archiver.vault.get_file(path)
    mode = ExtractionMode.DEEP if deep else ExtractionMode.SHALLOW
    if command == "archive":
        return archiver.archive_tasks_in_file(file, mode)
    return archiver.delete_tasks_in_file(file, mode)


def run_cursor_command(archiver: Archiver, command: str, path: str, line: int) -> str:
    """
    Archive the task or heading at a line of a document.

    The document is loaded into an editor buffer, edited there, and saved
    back when the operation is done.
    """
    disk_file = archiver.vault.get_file(path)
    editor = BufferEditor("\n".join(disk_file.read_lines()), Position(line - 1, 0))
    file = EditorFile(editor, name=disk_file.name, path=disk_file.path)

    if command == "archive-task":
        report = archiver.archive_task_under_cursor(file)
    else:
        report = archiver.archive_heading_under_cursor(file)

    disk_file.write_lines(editor.get_lines())
    return report


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="shelver",
        description="Shelver - archive finished checklist items in markdown documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  shelver archive notes/todo.md                  # Archive finished top-level tasks
  shelver archive notes/todo.md --deep           # Also archive finished sub-tasks
  shelver delete notes/todo.md                   # Delete finished tasks
  shelver archive-task notes/todo.md --line 12   # Complete and archive the task on line 12
  shelver archive-heading notes/todo.md --line 3 # Archive the heading on line 3
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the configuration file (default: {DEFAULT_CONFIG_PATH})"
    )

    parser.add_argument(
        "--vault",
        type=str,
        help="Folder document and archive paths are relative to (default: from config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Shelver {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (
        ("archive", "Archive finished tasks in a document"),
        ("delete", "Delete finished tasks from a document"),
    ):
        subparser = subparsers.add_parser(command, help=help_text)
        subparser.add_argument("file", help="Document path inside the vault")
        subparser.add_argument(
            "--deep",
            action="store_true",
            help="Also extract finished sub-tasks of unfinished tasks"
        )

    for command, help_text in (
        ("archive-task", "Complete and archive the task on a line"),
        ("archive-heading", "Archive the heading on a line with its content"),
    ):
        subparser = subparsers.add_parser(command, help=help_text)
        subparser.add_argument("file", help="Document path inside the vault")
        subparser.add_argument(
            "--line",
            type=int,
            required=True,
            help="One-based line number of the cursor"
        )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    config = ConfigManager(args.config)
    setup_logging(config)

    try:
        archiver = build_archiver(config, args.vault)
        if args.command in ("archive", "delete"):
            report = run_file_command(archiver, args.command, args.file, args.deep)
        else:
            report = run_cursor_command(archiver, args.command, args.file, args.line)

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print("\nInterrupted.")
        return 130

    except Exception as e:
        logging.error(f"{args.command} failed: {e}")
        print(f"Error: {e}")
        return 1

    print(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
