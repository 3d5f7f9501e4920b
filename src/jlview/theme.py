"""Colour theme shared by the highlighter, the renderers and the frame."""

from __future__ import annotations

from dataclasses import dataclass

from rich.color import ColorSystem
from rich.style import Style

from jlview.ansi import RESET

_MARK = "\x00"


def _style(definition: str) -> Style:
    return Style.parse(definition)


@dataclass(frozen=True)
class Theme:
    """Immutable set of styles, built once and passed to every renderer."""

    # JSON syntax
    key: Style = _style("color(81)")
    string: Style = _style("color(114)")
    number: Style = _style("color(141)")
    boolean: Style = _style("color(208)")
    brace: Style = _style("color(245)")
    search: Style = _style("bold color(0) on color(226)")

    # Message badges
    badge_user: Style = _style("bold color(15) on color(27)")
    badge_assistant: Style = _style("bold color(15) on color(34)")
    badge_system: Style = _style("bold color(0) on color(220)")
    badge_summary: Style = _style("bold color(15) on color(99)")
    badge_unknown: Style = _style("bold color(15) on color(240)")
    warning: Style = _style("bold color(196)")
    thinking: Style = _style("italic color(243)")
    tool_use_header: Style = _style("bold color(44)")
    tool_result_header: Style = _style("bold color(214)")
    meta: Style = _style("color(243)")

    # Frame chrome
    title: Style = _style("bold color(205)")
    selected: Style = _style("color(229) on color(57)")
    normal: Style = _style("color(252)")
    help: Style = _style("color(241)")
    prompt: Style = _style("color(214)")
    gutter: Style = _style("dim cyan")
    gutter_cursor: Style = _style("bold reverse cyan")
    error: Style = _style("bold color(196)")
    preview_header: Style = _style("bold color(205)")

    color_system: ColorSystem = ColorSystem.EIGHT_BIT

    def paint(self, style: Style, text: str) -> str:
        """Render *text* wrapped in the SGR codes of *style*."""
        return style.render(text, color_system=self.color_system)

    def codes(self, style: Style) -> tuple[str, str]:
        """Return the ``(start, reset)`` escape pair of *style*."""
        rendered = self.paint(style, _MARK)
        start, _, end = rendered.partition(_MARK)
        return start, end or RESET

    def wrap(self, style: Style, text: str) -> str:
        """Apply *style* to each line of *text*, surviving inner resets."""
        start, end = self.codes(style)
        if not start:
            return text
        out = []
        for line in text.split("\n"):
            if not line:
                out.append(line)
                continue
            body = line.replace(RESET, RESET + start)
            out.append(f"{start}{body}{end}")
        return "\n".join(out)


DEFAULT_THEME = Theme()
