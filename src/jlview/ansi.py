"""Helpers for strings that mix visible text with SGR escape sequences."""

from __future__ import annotations

import unicodedata
from typing import NamedTuple

ESC = "\x1b"
RESET = "\x1b[0m"
MIN_WIDTH = 1

_char_width_cache: dict[str, int] = {}


class Segment(NamedTuple):
    """A run of visible text, or one escape sequence when *escape* is set."""

    text: str
    escape: bool


def escape_at(s: str, i: int) -> str | None:
    """Return the escape sequence starting at ``s[i]``, or None.

    Grammar: ``ESC '[' (digit | ';' | '?')* letter``.
    """
    n = len(s)
    if i + 1 >= n or s[i] != ESC or s[i + 1] != "[":
        return None
    j = i + 2
    while j < n:
        ch = s[j]
        if ch.isascii() and ch.isalpha():
            return s[i : j + 1]
        if not (ch.isascii() and ch.isdigit()) and ch not in ";?":
            return None
        j += 1
    return None


def segments(s: str) -> list[Segment]:
    """Split *s* into alternating text and escape segments."""
    if ESC not in s:
        return [Segment(s, False)] if s else []
    result: list[Segment] = []
    start = 0
    i = 0
    n = len(s)
    while i < n:
        if s[i] == ESC:
            seq = escape_at(s, i)
            if seq is not None:
                if i > start:
                    result.append(Segment(s[start:i], False))
                result.append(Segment(seq, True))
                i += len(seq)
                start = i
                continue
        i += 1
    if start < n:
        result.append(Segment(s[start:], False))
    return result


def strip_escapes(s: str) -> str:
    """Return the visible text of *s*."""
    if ESC not in s:
        return s
    return "".join(seg.text for seg in segments(s) if not seg.escape)


def char_width(ch: str) -> int:
    """Return display width of a character (2 for fullwidth/wide)."""
    if ch < "\u0100":
        return 1
    w = _char_width_cache.get(ch)
    if w is None:
        w = 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
        _char_width_cache[ch] = w
    return w


def text_width(text: str) -> int:
    """Width in cells of *text*, which must not contain escape sequences."""
    if text.isascii():
        return len(text)
    return sum(char_width(ch) for ch in text)


def visible_width(s: str) -> int:
    """Width in cells of *s*, ignoring escape sequences."""
    if ESC not in s:
        return text_width(s)
    return sum(text_width(seg.text) for seg in segments(s) if not seg.escape)


def truncate(s: str, width: int) -> str:
    """Cut *s* to at most *width* visible cells.

    Escape sequences before the cut are kept verbatim; everything after it is
    dropped and a reset is appended so colours do not bleed into the padding.
    """
    width = max(MIN_WIDTH, width)
    segs = segments(s)
    if sum(text_width(seg.text) for seg in segs if not seg.escape) <= width:
        return s

    out: list[str] = []
    used = 0
    for seg in segs:
        if seg.escape:
            if used >= width:
                break
            out.append(seg.text)
            continue
        if used + text_width(seg.text) <= width:
            out.append(seg.text)
            used += text_width(seg.text)
            continue
        for ch in seg.text:
            cw = char_width(ch)
            if used + cw > width:
                break
            out.append(ch)
            used += cw
        break
    if any(seg.escape for seg in segs):
        out.append(RESET)
    return "".join(out)


def pad(s: str, width: int) -> str:
    """Right-pad *s* with spaces to exactly *width* visible cells."""
    width = max(MIN_WIDTH, width)
    w = visible_width(s)
    if w > width:
        s = truncate(s, width)
        w = visible_width(s)
    if w < width:
        return s + " " * (width - w)
    return s


def fit(s: str, width: int) -> str:
    """Truncate-then-pad: the line occupies exactly *width* cells."""
    return pad(truncate(s, width), width)
