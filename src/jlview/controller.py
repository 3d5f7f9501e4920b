"""Screen state machine: file list, JSON viewer and message viewer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from jlview._search import SearchMixin
from jlview.ansi import fit, strip_escapes
from jlview.files import FileInfo
from jlview.highlight import highlight_json_line, highlight_search_line
from jlview.message import Message, load_transcript
from jlview.preview import format_preview_pane, render_preview
from jlview.render import render_message
from jlview.theme import DEFAULT_THEME, Theme
from jlview.viewport import ViewportNavigator

logger = logging.getLogger(__name__)

APP_TITLE = "Claude JSONL Viewer"
CHROME_ROWS = 3  # title, rule, footer

FILE_LIST_HELP = "j/k: navigate • enter: open • q: quit"
JSON_HELP = "j/k: move • /: search • n/N: next/prev • tab: messages • p: preview • q: back"
MESSAGE_HELP = "j/k: scroll • h/l: prev/next • /: search • n/N • tab: json • q: back"


# -- Screens -----------------------------------------------------------------


@dataclass(frozen=True)
class FileListScreen:
    pass


@dataclass(frozen=True)
class JsonScreen:
    pass


@dataclass(frozen=True)
class MessageScreen:
    pass


@dataclass(frozen=True)
class SearchInput:
    """Typing a query over the viewer it was opened from."""

    prior: Union[JsonScreen, MessageScreen]
    buffer: str = ""


Screen = Union[FileListScreen, JsonScreen, MessageScreen, SearchInput]

FILE_LIST = FileListScreen()
JSON_VIEW = JsonScreen()
MESSAGE_VIEW = MessageScreen()


def toggled(screen: Union[JsonScreen, MessageScreen]) -> Union[JsonScreen, MessageScreen]:
    return MESSAGE_VIEW if isinstance(screen, JsonScreen) else JSON_VIEW


# -- Controller --------------------------------------------------------------


class ViewerController(SearchMixin):
    """Routes keystrokes to the active screen and composes the ANSI frame.

    Each viewer keeps its own navigator, so toggling between the JSON and
    the message view with Tab returns to where that view was left.
    """

    def __init__(
        self,
        files: list[FileInfo],
        project_path: str = "",
        *,
        theme: Theme = DEFAULT_THEME,
        width: int = 80,
        height: int = 24,
    ) -> None:
        self.files: list[FileInfo] = list(files)
        self.project_path: str = project_path
        self.theme: Theme = theme
        self.width: int = max(1, width)
        self.height: int = max(1, height)
        self.screen: Screen = FILE_LIST
        body = self.body_height
        self.file_nav = ViewportNavigator(len(self.files), body)
        self.json_nav = ViewportNavigator(0, body)
        self.msg_nav = ViewportNavigator(0, body, scroll_only=True)
        self.file_name: str = ""
        self.lines: list[str] = []
        self.messages: list[Message] = []
        self.msg_index: int = 0
        self.search_query: str = ""
        self.status_msg: str = ""
        self.error: str = ""
        self.show_preview: bool = False
        self.quit_requested: bool = False
        # (message index, row, cursor line) of the last message-view match
        self._last_match: tuple[int, int, int] | None = None
        # Render caches
        self._highlight_cache: dict[int, str] = {}
        self._message_cache: dict[tuple[int, int], list[str]] = {}

    # -- Geometry ----------------------------------------------------------

    @property
    def body_height(self) -> int:
        return max(1, self.height - CHROME_ROWS)

    @property
    def json_width(self) -> int:
        if self.show_preview:
            return max(1, self.width // 2)
        return self.width

    def resize(self, width: int, height: int) -> None:
        width, height = max(1, width), max(1, height)
        if (width, height) == (self.width, self.height):
            return
        self.width, self.height = width, height
        self._message_cache.clear()
        self._last_match = None
        for nav in (self.file_nav, self.json_nav, self.msg_nav):
            nav.set_view_height(self.body_height)
        self._sync_message_lines()

    def _viewer_screen(self) -> Union[JsonScreen, MessageScreen, FileListScreen]:
        screen = self.screen
        if isinstance(screen, SearchInput):
            return screen.prior
        return screen

    def active_nav(self) -> ViewportNavigator:
        screen = self._viewer_screen()
        if isinstance(screen, JsonScreen):
            return self.json_nav
        if isinstance(screen, MessageScreen):
            return self.msg_nav
        return self.file_nav

    # -- Loading -----------------------------------------------------------

    def open_file(self, info: FileInfo) -> bool:
        """Load *info* into both viewers. On failure stay put and show why."""
        try:
            transcript = load_transcript(info.path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("cannot open %s", info.path, exc_info=True)
            self.error = f"Cannot open {info.name}: {e}"
            return False
        logger.info(
            "opened %s: %d lines, %d messages",
            info.path,
            len(transcript.lines),
            len(transcript.messages),
        )
        self.error = ""
        self.file_name = info.name
        self.lines = transcript.lines
        self.messages = transcript.messages
        self._highlight_cache.clear()
        self._message_cache.clear()
        self.json_nav.reset(len(self.lines))
        self.msg_index = 0
        self.msg_nav.reset()
        self._sync_message_lines()
        self.search_query = ""
        self._last_match = None
        self.show_preview = False
        self.screen = JSON_VIEW
        return True

    # -- Messages ----------------------------------------------------------

    def _message_lines(self, index: int) -> list[str]:
        key = (index, self.width)
        lines = self._message_cache.get(key)
        if lines is None:
            lines = render_message(self.messages[index], self.width, self.theme).split("\n")
            self._message_cache[key] = lines
        return lines

    def _message_plain_lines(self, index: int) -> list[str]:
        return [strip_escapes(line) for line in self._message_lines(index)]

    def _sync_message_lines(self) -> None:
        if self.messages:
            self.msg_nav.set_line_count(len(self._message_lines(self.msg_index)))
        else:
            self.msg_nav.set_line_count(0)

    def _select_message(self, index: int) -> None:
        if not self.messages:
            return
        index = max(0, min(index, len(self.messages) - 1))
        if index != self.msg_index:
            self.msg_index = index
            self.msg_nav.reset()
        self._sync_message_lines()

    # =====================================================================
    # Key handling
    # =====================================================================

    def handle_key(self, key: str, char: str | None = "") -> None:
        char = char or ""
        self.status_msg = ""

        if key == "ctrl+c":
            self.quit_requested = True
            return

        screen = self.screen
        if isinstance(screen, SearchInput):
            self._handle_search(key, char)
        elif isinstance(screen, FileListScreen):
            self._handle_file_list(key, char)
        elif isinstance(screen, JsonScreen):
            self._handle_json(key, char)
        elif isinstance(screen, MessageScreen):
            self._handle_messages(key, char)

    def _handle_file_list(self, key: str, char: str) -> None:
        if self.file_nav.feed_key(key, char):
            return
        if char == "q" or key == "escape":
            self.quit_requested = True
        elif key == "enter" and self.files:
            self.open_file(self.files[self.file_nav.cursor_line])

    def _handle_json(self, key: str, char: str) -> None:
        if self.json_nav.feed_key(key, char):
            return
        if char == "p":
            self.show_preview = not self.show_preview
            return
        self._handle_viewer_common(key, char)

    def _handle_messages(self, key: str, char: str) -> None:
        nav = self.msg_nav
        if not nav.pending:
            if char == "l" or key == "right":
                self._select_message(self.msg_index + nav.take_count())
                return
            if char == "h" or key == "left":
                self._select_message(self.msg_index - nav.take_count())
                return
        if nav.feed_key(key, char):
            return
        self._handle_viewer_common(key, char)

    def _handle_viewer_common(self, key: str, char: str) -> None:
        if char == "/":
            self._start_search()
        elif char == "n":
            self._search_next(1)
        elif char == "N":
            self._search_next(-1)
        elif key == "tab":
            self.screen = toggled(self.screen)
        elif char == "q":
            self.search_query = ""
            self.screen = FILE_LIST
        elif key == "escape":
            if self.search_query:
                self.search_query = ""
            else:
                self.screen = FILE_LIST

    # =====================================================================
    # Rendering
    # =====================================================================

    def view(self) -> str:
        """Compose the whole frame: ``height`` lines of exactly ``width`` cells."""
        screen = self._viewer_screen()
        if isinstance(screen, FileListScreen):
            header, body, footer = self._view_file_list()
        elif isinstance(screen, JsonScreen):
            header, body, footer = self._view_json()
        else:
            header, body, footer = self._view_messages()

        rows = [header, "─" * self.width]
        body_height = self.body_height
        rows.extend(body[:body_height])
        rows.extend([""] * (body_height - min(len(body), body_height)))
        rows.append(footer)
        rows = rows[: self.height]
        return "\n".join(fit(row, self.width) for row in rows)

    def _header(self, title: str) -> str:
        theme = self.theme
        header = theme.paint(theme.title, title)
        if self.search_query:
            header += "  " + theme.paint(theme.prompt, f"[/{self.search_query}]")
        return header

    def _footer(self, position: str, help_text: str) -> str:
        theme = self.theme
        screen = self.screen
        if isinstance(screen, SearchInput):
            return theme.paint(theme.prompt, f"/{screen.buffer}") + theme.paint(
                theme.gutter_cursor, " "
            )
        nav = self.active_nav()
        pending = nav.count_buffer + nav.pending
        parts = [position]
        if pending:
            parts.append(theme.paint(theme.prompt, pending))
        if self.status_msg:
            parts.append(self.status_msg)
        else:
            parts.append(theme.paint(theme.help, help_text))
        return "  ".join(p for p in parts if p)

    def _view_file_list(self) -> tuple[str, list[str], str]:
        theme = self.theme
        header = theme.paint(theme.title, APP_TITLE)
        if self.project_path:
            header += "  " + theme.paint(theme.help, f"Project: {self.project_path}")

        body: list[str] = []
        if not self.files:
            if self.project_path:
                body.append("No Claude history found for this project.")
            else:
                body.append("No .jsonl files found in this directory.")
        for i in self.file_nav.visible_range():
            f = self.files[i]
            row = f"  {f.name}  ({f.mod_time:%Y-%m-%d %H:%M:%S})"
            if i == self.file_nav.cursor_line:
                body.append(theme.paint(theme.selected, fit("> " + row, self.width)))
            else:
                body.append(theme.paint(theme.normal, "  " + row))

        if self.error:
            footer = theme.paint(theme.error, self.error)
        else:
            footer = theme.paint(theme.help, FILE_LIST_HELP)
        return header, body, footer

    def _highlighted(self, idx: int) -> str:
        line = self._highlight_cache.get(idx)
        if line is None:
            line = highlight_json_line(self.lines[idx], self.theme)
            self._highlight_cache[idx] = line
        return line

    def _view_json(self) -> tuple[str, list[str], str]:
        theme = self.theme
        nav = self.json_nav
        ln_width = max(3, len(str(len(self.lines))))
        body: list[str] = []
        for idx in nav.visible_range():
            gutter_style = theme.gutter_cursor if idx == nav.cursor_line else theme.gutter
            gutter = theme.paint(gutter_style, f"{idx + 1:>{ln_width}}")
            text = highlight_search_line(self._highlighted(idx), self.search_query, theme)
            body.append(f"{gutter} {text}")

        if self.show_preview:
            body = self._with_preview(body)

        total = len(self.lines)
        pct = (nav.cursor_line + 1) * 100 // total if total else 0
        position = f"Ln {nav.cursor_line + 1}/{total} {pct}%"
        return self._header(f"{self.file_name} [JSON]"), body, self._footer(position, JSON_HELP)

    def _with_preview(self, left: list[str]) -> list[str]:
        left_width = self.json_width
        right_width = max(1, self.width - left_width - 1)
        line = self.lines[self.json_nav.cursor_line] if self.lines else ""
        pane = format_preview_pane(
            render_preview(line, right_width), self.body_height, self.theme
        )
        rows = max(len(left), len(pane))
        left = left + [""] * (rows - len(left))
        pane = pane + [""] * (rows - len(pane))
        sep = self.theme.paint(self.theme.help, "│")
        return [f"{fit(lt, left_width)}{sep}{rt}" for lt, rt in zip(left, pane)]

    def _view_messages(self) -> tuple[str, list[str], str]:
        total = len(self.messages)
        if not total:
            header = self._header(f"{self.file_name} [Messages 0/0]")
            return header, ["No messages in this file."], self._footer("", MESSAGE_HELP)

        lines = self._message_lines(self.msg_index)
        body = [
            highlight_search_line(lines[i], self.search_query, self.theme)
            for i in self.msg_nav.visible_range()
        ]
        header = self._header(f"{self.file_name} [Messages {self.msg_index + 1}/{total}]")
        msg = self.messages[self.msg_index]
        position = f"Msg {self.msg_index + 1}/{total}"
        if msg.timestamp is not None:
            position += f"  {msg.timestamp:%Y-%m-%d %H:%M:%S}"
        return header, body, self._footer(position, MESSAGE_HELP)
