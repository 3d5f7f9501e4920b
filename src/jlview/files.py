"""Discovery of JSONL transcripts on disk."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

PROJECTS_DIR_ENV = "JLVIEW_PROJECTS_DIR"


@dataclass(frozen=True)
class FileInfo:
    path: Path
    name: str
    mod_time: datetime

    @classmethod
    def from_path(cls, path: Path) -> FileInfo:
        stat = path.stat()
        return cls(path, path.name, datetime.fromtimestamp(stat.st_mtime))


def default_projects_dir() -> Path:
    """``$JLVIEW_PROJECTS_DIR`` or ``~/.claude/projects``."""
    env = os.environ.get(PROJECTS_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".claude" / "projects"


def path_to_history_dir_name(path: str | Path) -> str:
    """``/home/me/my-project`` -> ``-home-me-my-project``."""
    return "".join(ch if ch.isalnum() else "-" for ch in str(path))


def resolve_jsonl_dir(cwd: str | Path, projects_dir: str | Path) -> tuple[Path, str]:
    """Return ``(directory to list, project label)``.

    The label is empty unless *cwd* was mapped to its history directory.
    """
    cwd = Path(cwd).absolute()
    projects_dir = Path(projects_dir).absolute()
    if cwd == projects_dir or projects_dir in cwd.parents:
        return cwd, ""

    history_dir = projects_dir / path_to_history_dir_name(cwd)
    if not history_dir.is_dir():
        logger.info("no history directory %s, listing %s", history_dir, cwd)
        return cwd, ""
    return history_dir, str(cwd)


def find_jsonl_files(directory: str | Path) -> list[FileInfo]:
    """``*.jsonl`` files in *directory*, newest first."""
    files: list[FileInfo] = []
    for path in Path(directory).glob("*.jsonl"):
        try:
            files.append(FileInfo.from_path(path))
        except OSError:
            continue
    files.sort(key=lambda f: f.mod_time, reverse=True)
    logger.info("found %d jsonl files in %s", len(files), directory)
    return files
