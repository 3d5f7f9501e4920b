"""Search mixin for ViewerController."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class SearchMixin:
    """Search-input sub-mode and match cycling for ViewerController."""

    def _handle_search(self, key: str, char: str) -> None:
        from jlview.controller import SearchInput

        screen = self.screen

        if key == "escape":
            self.screen = screen.prior
            self.search_query = ""
            self.status_msg = ""
            return

        if key == "enter":
            self.screen = screen.prior
            self.search_query = screen.buffer
            self._last_match = None
            if self.search_query:
                self._search_next(1)
            return

        if key == "backspace":
            if screen.buffer:
                self.screen = SearchInput(screen.prior, screen.buffer[:-1])
            else:
                self.screen = screen.prior
            return

        if char and char.isprintable():
            self.screen = SearchInput(screen.prior, screen.buffer + char)

    def _start_search(self) -> None:
        from jlview.controller import SearchInput

        self.screen = SearchInput(self.screen)
        self.status_msg = ""

    def _search_next(self, direction: int) -> None:
        """Jump to the next (1) or previous (-1) line matching the query."""
        from jlview.controller import JsonScreen

        query = self.search_query
        if not query:
            self.status_msg = "No previous search"
            return
        if isinstance(self._viewer_screen(), JsonScreen):
            found = self._search_json(query.lower(), direction)
        else:
            found = self._search_messages(query.lower(), direction)
        if not found:
            logger.debug("pattern not found: %r", query)
            self.status_msg = f"Pattern not found: {query}"

    def _search_json(self, needle: str, direction: int) -> bool:
        lines = self.lines
        total = len(lines)
        current = self.json_nav.cursor_line
        for i in range(1, total + 1):
            idx = (current + direction * i) % total
            if needle in lines[idx].lower():
                self.json_nav.goto_line(idx)
                self.json_nav.cursor_to_top()
                self.status_msg = f"/{self.search_query}  [line {idx + 1}]"
                return True
        return False

    def _match_origin(self) -> int:
        """Row the next message search starts from.

        The scroll-only navigator cannot always put the cursor on a match
        near the end of a message, so the last match row is remembered for
        as long as the view has not moved since.
        """
        last = self._last_match
        if (
            last is not None
            and last[0] == self.msg_index
            and last[2] == self.msg_nav.cursor_line
        ):
            return last[1]
        return self.msg_nav.cursor_line

    def _message_search_order(
        self, origin: int, direction: int
    ) -> list[tuple[int, range]]:
        """(message, rows) pairs in visiting order, wrapping back to *origin*."""
        total = len(self.messages)
        current = self.msg_index
        count = len(self._message_plain_lines(current))
        if direction > 0:
            order = [(current, range(origin + 1, count))]
        else:
            order = [(current, range(min(origin, count) - 1, -1, -1))]
        for i in range(1, total):
            idx = (current + direction * i) % total
            n = len(self._message_plain_lines(idx))
            order.append((idx, range(n) if direction > 0 else range(n - 1, -1, -1)))
        if direction > 0:
            order.append((current, range(0, min(origin + 1, count))))
        else:
            order.append((current, range(count - 1, origin - 1, -1)))
        return order

    def _search_messages(self, needle: str, direction: int) -> bool:
        total = len(self.messages)
        if not total:
            return False
        origin = self._match_origin()
        for idx, rows in self._message_search_order(origin, direction):
            lines = self._message_plain_lines(idx)
            for row in rows:
                if needle in lines[row].lower():
                    self._select_message(idx)
                    self.msg_nav.goto_line(row)
                    self._last_match = (idx, row, self.msg_nav.cursor_line)
                    self.status_msg = (
                        f"/{self.search_query}  [message {idx + 1}/{total}]"
                    )
                    return True
        return False
