"""Render typed messages (and markdown-ish text) to ANSI strings."""

from __future__ import annotations

import io

from rich.console import Console
from rich.markdown import Markdown

from jlview.ansi import text_width
from jlview.message import BlockKind, ContentBlock, Message, MessageKind
from jlview.theme import DEFAULT_THEME, Theme

MIN_CONTENT_WIDTH = 20
WARNING_GLYPH = "⚠"
THINKING_LABEL = "\U0001f4ad Thinking:"
TOOL_USE_ICON = "\U0001f527"
RESULT_LABEL = "\U0001f4e4 Result"

# Any of these makes a text block go through the markdown formatter.
MARKDOWN_SIGNALS = (
    "```",
    "**",
    "__",
    "*",
    "_",
    "# ",
    "## ",
    "### ",
    "- ",
    "* ",
    "1. ",
    "[",
    "`",
    "> ",
    "---",
    "***",
)


def looks_like_markdown(text: str) -> bool:
    return any(sig in text for sig in MARKDOWN_SIGNALS)


def _wrap_line(line: str, width: int) -> list[str]:
    stripped = line.lstrip(" ")
    indent = line[: len(line) - len(stripped)]
    rows: list[str] = []
    current = indent
    used = text_width(indent)
    for word in stripped.split():
        w = text_width(word)
        if current.strip() and used + 1 + w > width:
            rows.append(current)
            current, used = word, w
        elif current.strip():
            current += " " + word
            used += 1 + w
        else:
            current += word
            used += w
    rows.append(current)
    return rows


def word_wrap(text: str, width: int) -> str:
    """Greedy word wrap in display cells; keeps line breaks and long words."""
    width = max(1, width)
    out: list[str] = []
    for line in text.split("\n"):
        if text_width(line) <= width:
            out.append(line)
        else:
            out.extend(_wrap_line(line, width))
    return "\n".join(out)


def render_markdown(text: str, width: int) -> str:
    """Format *text* as terminal markdown at *width*; plain text is just wrapped."""
    width = max(MIN_CONTENT_WIDTH, width)
    if not looks_like_markdown(text):
        return word_wrap(text, width)
    buf = io.StringIO()
    console = Console(
        file=buf,
        width=width,
        force_terminal=True,
        color_system="256",
        legacy_windows=False,
    )
    console.print(Markdown(text, hyperlinks=False))
    return buf.getvalue().rstrip("\n\r\t ")


def render_badge(message: Message, theme: Theme = DEFAULT_THEME) -> str:
    label = message.type_name or MessageKind.UNKNOWN.value
    if message.subtype:
        label = f"{label} ({message.subtype})"

    kind = message.kind
    if kind is MessageKind.USER:
        if message.has_tool_result():
            return (
                theme.paint(theme.badge_user, " user ")
                + " "
                + theme.paint(theme.tool_result_header, "tool_result")
            )
        style = theme.badge_user
    elif kind is MessageKind.ASSISTANT:
        style = theme.badge_assistant
    elif kind is MessageKind.SYSTEM:
        style = theme.badge_system
    elif kind is MessageKind.SUMMARY:
        style = theme.badge_summary
    else:
        style = theme.badge_unknown
    return theme.paint(style, f" {label} ")


def render_block(block: ContentBlock, width: int, theme: Theme = DEFAULT_THEME) -> str:
    kind = block.kind
    if kind is BlockKind.TEXT or kind is BlockKind.PLAIN:
        return render_markdown(block.body, width)
    if kind is BlockKind.THINKING:
        body = render_markdown(block.body, width)
        return theme.wrap(theme.thinking, f"{THINKING_LABEL}\n{body}")
    if kind is BlockKind.TOOL_USE:
        header = theme.paint(theme.tool_use_header, f"{TOOL_USE_ICON} {block.label}")
        return f"{header}\n{block.body}"
    if kind is BlockKind.TOOL_RESULT:
        header = theme.paint(theme.tool_result_header, RESULT_LABEL)
        return f"{header}\n{block.body}"
    raise ValueError(f"unhandled block kind: {kind!r}")


def render_message(message: Message, width: int, theme: Theme = DEFAULT_THEME) -> str:
    """Badge line followed by the message's blocks, separated by blank lines."""
    head = render_badge(message, theme)
    if not message.is_implemented:
        head += " " + theme.paint(theme.warning, WARNING_GLYPH)

    content_width = max(MIN_CONTENT_WIDTH, width - 4)
    parts = [render_block(b, content_width, theme) for b in message.blocks]
    body = "\n\n".join(p for p in parts if p)
    if message.is_meta:
        body = theme.wrap(theme.meta, body)
    return f"{head}\n{body}"
