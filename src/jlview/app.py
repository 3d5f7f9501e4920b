"""Terminal application and command-line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding

from jlview import _logging
from jlview.files import (
    FileInfo,
    default_projects_dir,
    find_jsonl_files,
    resolve_jsonl_dir,
)
from jlview.widget import TranscriptView

logger = logging.getLogger(__name__)


class TranscriptApp(App):
    """TUI app that wraps the TranscriptView widget."""

    CSS = """
    Screen {
        layout: vertical;
    }
    #viewer {
        height: 1fr;
    }
    """

    TITLE = "JSONL Viewer"
    BINDINGS = [Binding("ctrl+c", "quit", show=False, priority=True)]
    ENABLE_COMMAND_PALETTE = False

    def __init__(self, files: list[FileInfo], project_path: str = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self.files = files
        self.project_path = project_path

    def compose(self) -> ComposeResult:
        yield TranscriptView(self.files, self.project_path, id="viewer")

    def on_mount(self) -> None:
        self.query_one("#viewer").focus()

    def on_transcript_view_quit(self, event: TranscriptView.Quit) -> None:
        self.exit()


def collect_files(target: Path, projects_dir: Path) -> tuple[list[FileInfo], str]:
    """Files to list for *target* (a directory or one ``.jsonl`` file)."""
    if target.is_file():
        return [FileInfo.from_path(target)], ""
    directory, project_path = resolve_jsonl_dir(target, projects_dir)
    return find_jsonl_files(directory), project_path


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="jlview",
        description="Browse JSONL transcripts with vim-style keybindings",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory or .jsonl file (default: current directory)",
    )
    parser.add_argument(
        "--projects-dir",
        default=None,
        help="History root (default: $JLVIEW_PROJECTS_DIR or ~/.claude/projects)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for the log file (default: $JLVIEW_LOG_LEVEL or WARNING)",
    )
    args = parser.parse_args()

    target = Path(args.path).expanduser()
    if not target.exists():
        print(f"jlview: {args.path}: No such file or directory", file=sys.stderr)
        sys.exit(1)

    _logging.configure(args.log_level)
    projects_dir = (
        Path(args.projects_dir).expanduser() if args.projects_dir else default_projects_dir()
    )
    try:
        files, project_path = collect_files(target, projects_dir)
    except OSError as e:
        print(f"jlview: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("starting with %d files", len(files))
    app = TranscriptApp(files, project_path)
    app.run()


if __name__ == "__main__":
    main()
