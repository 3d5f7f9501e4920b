"""Typed transcript messages decoded from JSONL records."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from jlview.jsonl import pretty_records

logger = logging.getLogger(__name__)

SKIPPED_TYPES = frozenset(("file-history-snapshot",))


class MessageKind(Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    SUMMARY = "summary"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str) -> MessageKind:
        try:
            kind = cls(name)
        except ValueError:
            return cls.UNKNOWN
        return kind


class BlockKind(Enum):
    TEXT = "text"
    THINKING = "thinking"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"
    PLAIN = "plain"


@dataclass(frozen=True)
class ContentBlock:
    kind: BlockKind
    body: str
    label: str = ""  # tool name for TOOL_USE


@dataclass(frozen=True)
class Message:
    """One record of a transcript.

    *type_name* keeps the record's own ``type`` so an UNKNOWN kind can still
    be labelled with what the file called it.
    """

    kind: MessageKind
    type_name: str
    subtype: str = ""
    timestamp: datetime | None = None
    id: str = ""
    blocks: tuple[ContentBlock, ...] = ()
    is_meta: bool = False

    @property
    def is_implemented(self) -> bool:
        return self.kind is not MessageKind.UNKNOWN

    def has_tool_result(self) -> bool:
        return any(b.kind is BlockKind.TOOL_RESULT for b in self.blocks)


@dataclass
class Transcript:
    """Both views of one JSONL file."""

    lines: list[str] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=4, ensure_ascii=False)


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _tool_result_body(content: Any) -> str:
    if isinstance(content, list):
        parts = [
            _str(item.get("text"))
            for item in content
            if isinstance(item, dict) and item.get("type") == "text"
        ]
        content = "\n".join(parts)
    text = _str(content)
    try:
        return _pretty(json.loads(text))
    except ValueError:
        return text


def _content_blocks(raw: dict) -> list[ContentBlock]:
    msg = raw.get("message")
    if not isinstance(msg, dict):
        return []
    content = msg.get("content")
    if isinstance(content, str):
        return [ContentBlock(BlockKind.TEXT, content)]
    if not isinstance(content, list):
        return []

    blocks: list[ContentBlock] = []
    for item in content:
        if not isinstance(item, dict):
            continue
        kind = item.get("type")
        if kind == "text":
            blocks.append(ContentBlock(BlockKind.TEXT, _str(item.get("text"))))
        elif kind == "thinking":
            blocks.append(ContentBlock(BlockKind.THINKING, _str(item.get("thinking"))))
        elif kind == "tool_use":
            blocks.append(
                ContentBlock(
                    BlockKind.TOOL_USE,
                    _pretty(item.get("input")),
                    label=_str(item.get("name")),
                )
            )
        elif kind == "tool_result":
            blocks.append(
                ContentBlock(BlockKind.TOOL_RESULT, _tool_result_body(item.get("content")))
            )
    return blocks


def _fallback_blocks(raw: dict) -> list[ContentBlock]:
    for key in ("content", "message", "text", "summary"):
        value = raw.get(key)
        if isinstance(value, str):
            return [ContentBlock(BlockKind.PLAIN, value)]
        if isinstance(value, dict):
            return [ContentBlock(BlockKind.PLAIN, _pretty(value))]
    return [ContentBlock(BlockKind.PLAIN, _pretty(raw))]


def parse_message(raw: dict) -> Message | None:
    """Build a Message from one decoded record, or None if it is not shown."""
    type_name = _str(raw.get("type"))
    if type_name in SKIPPED_TYPES:
        return None

    kind = MessageKind.from_name(type_name)
    if kind in (MessageKind.USER, MessageKind.ASSISTANT):
        blocks = _content_blocks(raw)
    elif kind is MessageKind.SYSTEM:
        blocks = [ContentBlock(BlockKind.PLAIN, _str(raw.get("content")))]
    elif kind is MessageKind.SUMMARY:
        blocks = [ContentBlock(BlockKind.PLAIN, _str(raw.get("summary")))]
    else:
        blocks = _fallback_blocks(raw)

    return Message(
        kind=kind,
        type_name=type_name,
        subtype=_str(raw.get("subtype")),
        timestamp=_parse_timestamp(raw.get("timestamp")),
        id=_str(raw.get("uuid")),
        blocks=tuple(blocks),
        is_meta=raw.get("isMeta") is True,
    )


def parse_messages(text: str) -> list[Message]:
    messages: list[Message] = []
    for lineno, line in enumerate(text.split("\n"), 1):
        if not line.strip():
            continue
        try:
            raw = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("skipping undecodable line %d", lineno)
            continue
        if not isinstance(raw, dict):
            continue
        msg = parse_message(raw)
        if msg is not None:
            messages.append(msg)
    return messages


def load_transcript(path: str | Path) -> Transcript:
    """Read *path* once and decode both the JSON and the message view.

    ``OSError`` and ``UnicodeDecodeError`` propagate.
    """
    text = Path(path).read_text(encoding="utf-8")
    pretty = pretty_records(text)
    return Transcript(
        lines=pretty.split("\n") if pretty else [],
        messages=parse_messages(text),
    )
