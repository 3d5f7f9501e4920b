"""Textual widget hosting the transcript viewer."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from jlview.controller import ViewerController
from jlview.files import FileInfo


class TranscriptView(Widget, can_focus=True):
    """Full-screen viewer: keys go to a ViewerController, which draws the frame."""

    DEFAULT_CSS = """
    TranscriptView {
        height: 1fr;
        background: $surface;
    }
    """

    @dataclass
    class Quit(Message):
        pass

    def __init__(
        self,
        files: list[FileInfo],
        project_path: str = "",
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self.controller = ViewerController(files, project_path)

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.controller.handle_key(event.key, event.character)
        if self.controller.quit_requested:
            self.post_message(self.Quit())
            return
        self.refresh()

    def on_resize(self, event: events.Resize) -> None:
        self.refresh()

    def render(self) -> Text:
        region = self.content_region
        self.controller.resize(region.width, region.height)
        return Text.from_ansi(self.controller.view(), no_wrap=True, end="")
