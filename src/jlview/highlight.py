"""JSON syntax colouring and search-match overlay for ANSI-styled lines."""

from __future__ import annotations

from jlview.ansi import segments, strip_escapes
from jlview.theme import DEFAULT_THEME, Theme

_BRACKET = frozenset("{}[]")
_PUNCT = frozenset(":,")
_SPACE = frozenset(" \t")
_DIGIT = frozenset("0123456789.-+eE")
_KEYWORDS = ("true", "false", "null")


def highlight_json_line(line: str, theme: Theme = DEFAULT_THEME) -> str:
    """Colour one line of 4-space pretty-printed JSON.

    Stripping the escapes from the result always gives back *line*. A line
    with an unterminated string is returned untouched.
    """
    if not line.strip():
        return line

    paint = theme.paint
    out: list[str] = []
    n = len(line)
    i = 0
    while i < n:
        ch = line[i]
        if ch in _SPACE or ch in _PUNCT:
            out.append(ch)
            i += 1
        elif ch in _BRACKET:
            out.append(paint(theme.brace, ch))
            i += 1
        elif ch == '"':
            j = i + 1
            while j < n and line[j] != '"':
                j += 2 if line[j] == "\\" else 1
            if j >= n:
                return line
            j += 1
            rest = line[j:].lstrip()
            style = theme.key if rest.startswith(":") else theme.string
            out.append(paint(style, line[i:j]))
            i = j
        elif ch in "-0123456789":
            j = i + 1
            while j < n and line[j] in _DIGIT:
                j += 1
            out.append(paint(theme.number, line[i:j]))
            i = j
        else:
            for kw in _KEYWORDS:
                if line.startswith(kw, i):
                    out.append(paint(theme.boolean, kw))
                    i += len(kw)
                    break
            else:
                out.append(ch)
                i += 1
    return "".join(out)


def _lower_per_char(text: str) -> str:
    # str.lower() may change the length (e.g. "\u0130"); keep indices aligned
    out = []
    for ch in text:
        low = ch.lower()
        out.append(low if len(low) == 1 else ch)
    return "".join(out)


def find_matches(visible: str, query: str) -> list[int]:
    """Start indices of non-overlapping case-insensitive hits of *query*."""
    if not query:
        return []
    haystack = _lower_per_char(visible)
    needle = _lower_per_char(query)
    starts: list[int] = []
    end = 0
    pos = haystack.find(needle)
    while pos != -1:
        if pos >= end:
            starts.append(pos)
            end = pos + len(needle)
        pos = haystack.find(needle, pos + 1)
    return starts


def highlight_search_line(line: str, query: str, theme: Theme = DEFAULT_THEME) -> str:
    """Mark every case-insensitive hit of *query* in an already styled line.

    Existing escape sequences are copied verbatim. The reset emitted after a
    hit cancels whatever style was active before it; the rest of the line
    resumes at the next escape sequence of the input.
    """
    if not query:
        return line
    starts = find_matches(strip_escapes(line), query)
    if not starts:
        return line

    hl_start, hl_end = theme.codes(theme.search)
    qlen = len(query)
    out: list[str] = []
    visible_idx = 0
    mi = 0
    match_end = -1
    for seg in segments(line):
        if seg.escape:
            out.append(seg.text)
            continue
        for ch in seg.text:
            if mi < len(starts) and visible_idx == starts[mi]:
                out.append(hl_start)
                match_end = visible_idx + qlen
                mi += 1
            out.append(ch)
            visible_idx += 1
            if visible_idx == match_end:
                out.append(hl_end)
    return "".join(out)
