"""Side pane showing the string value under the JSON cursor."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

from jlview.render import render_markdown
from jlview.theme import DEFAULT_THEME, Theme

_KEY_VALUE_RE = re.compile(r'^"([^"]+)":\s*"((?:[^"\\]|\\.)*)"\s*,?\s*$')
_VALUE_RE = re.compile(r'^"((?:[^"\\]|\\.)*)"\s*,?\s*$')

NO_STRING = "No string value on current line"


@dataclass(frozen=True)
class Preview:
    key: str = ""
    value: str = ""
    rendered: str = ""
    is_string: bool = False


def _unescape(raw: str) -> str:
    try:
        return json.loads(f'"{raw}"')
    except json.JSONDecodeError:
        return raw


def extract_string(line: str) -> tuple[str, str] | None:
    """Return ``(key, value)`` for a line holding one string value.

    *key* is empty for array elements.
    """
    trimmed = line.strip()
    m = _KEY_VALUE_RE.match(trimmed)
    if m:
        return m.group(1), _unescape(m.group(2))
    m = _VALUE_RE.match(trimmed)
    if m:
        return "", _unescape(m.group(1))
    return None


def render_preview(line: str, width: int) -> Preview:
    found = extract_string(line)
    if found is None:
        return Preview()
    key, value = found
    return Preview(key, value, render_markdown(value, width), True)


def format_preview_pane(
    preview: Preview, height: int, theme: Theme = DEFAULT_THEME
) -> list[str]:
    """At most *height* unpadded lines for the pane."""
    if not preview.is_string:
        msg = theme.paint(theme.help, NO_STRING)
        return [""] * max(0, (height - 1) // 2) + [msg]
    title = f"Preview: {preview.key}" if preview.key else "Preview"
    lines = [theme.paint(theme.preview_header, title), ""]
    lines.extend(preview.rendered.split("\n"))
    return lines[:height]
