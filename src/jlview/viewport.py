"""Cursor and scroll state for a scrollable list of lines."""

from __future__ import annotations

_MOTION_KEYS = frozenset(
    ("j", "k", "down", "up", "ctrl+d", "ctrl+u", "G", "pagedown", "pageup")
)
_CHORD_KEY = "g"


class ViewportNavigator:
    """Vim-style cursor over ``line_count`` lines shown ``view_height`` at a time.

    Invariants kept after every operation:

    * ``0 <= cursor_line < line_count`` (``cursor_line == 0`` when empty)
    * ``scroll_offset <= cursor_line <= scroll_offset + view_height - 1``

    In *scroll_only* mode the cursor is the top visible line, so motions
    scroll the window and the last reachable position shows the final page.

    Key input goes through :meth:`feed_key`: digits build a repeat count,
    ``g`` arms the ``gg`` chord, and motion keys consume both.
    """

    def __init__(
        self, line_count: int = 0, view_height: int = 1, *, scroll_only: bool = False
    ) -> None:
        self.line_count: int = max(0, line_count)
        self.view_height: int = max(1, view_height)
        self.scroll_only: bool = scroll_only
        self.cursor_line: int = 0
        self.scroll_offset: int = 0
        self.count_buffer: str = ""
        self.pending: str = ""

    # -- Geometry ----------------------------------------------------------

    @property
    def max_cursor(self) -> int:
        if self.line_count == 0:
            return 0
        if self.scroll_only:
            return max(0, self.line_count - self.view_height)
        return self.line_count - 1

    def set_line_count(self, line_count: int) -> None:
        self.line_count = max(0, line_count)
        self.move_by(0)

    def set_view_height(self, view_height: int) -> None:
        self.view_height = max(1, view_height)
        self.move_by(0)

    def reset(self, line_count: int | None = None) -> None:
        """Back to the top, optionally with a new line count."""
        if line_count is not None:
            self.line_count = max(0, line_count)
        self.cursor_line = 0
        self.scroll_offset = 0
        self.count_buffer = ""
        self.pending = ""

    def ensure_visible(self) -> None:
        if self.cursor_line < self.scroll_offset:
            self.scroll_offset = self.cursor_line
        elif self.cursor_line > self.scroll_offset + self.view_height - 1:
            self.scroll_offset = self.cursor_line - self.view_height + 1

    def cursor_to_top(self) -> None:
        """Scroll so the cursor is the first visible line where possible."""
        bottom = max(0, self.line_count - self.view_height)
        self.scroll_offset = max(0, min(self.cursor_line, bottom))

    def visible_range(self) -> range:
        end = min(self.line_count, self.scroll_offset + self.view_height)
        return range(self.scroll_offset, end)

    # -- Motions -----------------------------------------------------------

    def move_by(self, delta: int) -> None:
        self.cursor_line = max(0, min(self.cursor_line + delta, self.max_cursor))
        self.ensure_visible()

    def goto_line(self, line: int) -> None:
        """Put the cursor on *line* (clamped)."""
        self.move_by(line - self.cursor_line)

    def goto_top(self) -> None:
        self.cursor_line = 0
        self.scroll_offset = 0

    def goto_bottom(self) -> None:
        self.goto_line(self.max_cursor)

    def half_page(self) -> int:
        return max(1, self.view_height // 2)

    def half_page_down(self) -> None:
        self.move_by(self.half_page())

    def half_page_up(self) -> None:
        self.move_by(-self.half_page())

    # -- Key handling ------------------------------------------------------

    def take_count(self) -> int:
        """Consume the pending repeat count (default 1)."""
        count = int(self.count_buffer) if self.count_buffer else 1
        self.count_buffer = ""
        return max(1, count)

    def feed_key(self, key: str, char: str = "") -> bool:
        """Handle one keystroke. Returns False when the key is not a motion.

        An unhandled key has already cleared the count buffer and any pending
        chord; the caller is free to interpret it.
        """
        if self.pending:
            combo = self.pending + (char or key)
            self.pending = ""
            self.count_buffer = ""
            if combo == _CHORD_KEY * 2:
                self.goto_top()
                return True
            # A broken chord swallows motions but hands other keys back.
            name = char if char in _MOTION_KEYS else key
            return name in _MOTION_KEYS or (char.isdigit() and char.isascii())

        if char and char.isdigit() and char.isascii():
            if char == "0" and not self.count_buffer:
                self.goto_top()
            else:
                self.count_buffer += char
            return True

        if char == _CHORD_KEY:
            self.pending = char
            return True

        name = char if char in _MOTION_KEYS else key
        if name not in _MOTION_KEYS:
            self.count_buffer = ""
            return False

        count = self.take_count()
        if name in ("j", "down"):
            self.move_by(count)
        elif name in ("k", "up"):
            self.move_by(-count)
        elif name == "ctrl+d":
            self.move_by(self.half_page() * count)
        elif name == "ctrl+u":
            self.move_by(-self.half_page() * count)
        elif name == "pagedown":
            self.move_by(self.view_height * count)
        elif name == "pageup":
            self.move_by(-self.view_height * count)
        elif name == "G":
            self.goto_bottom()
        return True
