"""JSONL decoding into pretty-printed, blank-line separated records."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def expand_nested(value: Any) -> Any:
    """Replace string values holding a JSON object/array by the parsed value."""
    if isinstance(value, str):
        stripped = value.strip()
        if stripped[:1] in ("{", "["):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                return value
            return expand_nested(parsed)
        return value
    if isinstance(value, dict):
        return {k: expand_nested(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_nested(v) for v in value]
    return value


def format_record(line: str) -> str:
    """Pretty print one JSONL line with indent=4; undecodable lines pass through."""
    try:
        parsed = json.loads(line)
    except json.JSONDecodeError:
        return line
    return json.dumps(expand_nested(parsed), indent=4, ensure_ascii=False)


def pretty_records(content: str) -> str:
    """Convert JSONL (one-json-per-line) to pretty-printed blocks."""
    blocks: list[str] = []
    for lineno, line in enumerate(content.split("\n"), 1):
        stripped = line.strip()
        if not stripped:
            continue
        block = format_record(stripped)
        if block is stripped:
            logger.debug("line %d is not valid JSON, shown raw", lineno)
        blocks.append(block)
    return "\n\n".join(blocks)
