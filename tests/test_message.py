"""Tests for message decoding and rendering."""

import json

from jlview.ansi import strip_escapes, visible_width
from jlview.message import (
    BlockKind,
    ContentBlock,
    Message,
    MessageKind,
    load_transcript,
    parse_message,
    parse_messages,
)
from jlview.render import (
    WARNING_GLYPH,
    looks_like_markdown,
    render_badge,
    render_block,
    render_markdown,
    render_message,
    word_wrap,
)
from jlview.theme import DEFAULT_THEME


def _msg(kind, *blocks, type_name=None, **kwargs):
    return Message(
        kind=kind,
        type_name=type_name if type_name is not None else kind.value,
        blocks=tuple(blocks),
        **kwargs,
    )


class TestParseMessage:
    """Decoding raw records into Message values."""

    def test_user_string_content(self):
        msg = parse_message(
            {
                "type": "user",
                "uuid": "u-1",
                "timestamp": "2024-01-02T03:04:05.678Z",
                "message": {"role": "user", "content": "Hello"},
            }
        )
        assert msg.kind is MessageKind.USER
        assert msg.id == "u-1"
        assert msg.timestamp.year == 2024
        assert msg.timestamp.second == 5
        assert msg.blocks == (ContentBlock(BlockKind.TEXT, "Hello"),)

    def test_assistant_blocks(self):
        msg = parse_message(
            {
                "type": "assistant",
                "message": {
                    "content": [
                        {"type": "thinking", "thinking": "hmm"},
                        {"type": "text", "text": "Answer"},
                        {"type": "tool_use", "name": "Read", "input": {"path": "a.py"}},
                        "not a block",
                    ]
                },
            }
        )
        kinds = [b.kind for b in msg.blocks]
        assert kinds == [BlockKind.THINKING, BlockKind.TEXT, BlockKind.TOOL_USE]
        tool = msg.blocks[2]
        assert tool.label == "Read"
        assert tool.body == '{\n    "path": "a.py"\n}'

    def test_tool_result_json_is_prettified(self):
        msg = parse_message(
            {
                "type": "user",
                "message": {
                    "content": [
                        {"type": "tool_result", "content": '{"strategyName":"TestStrategy"}'}
                    ]
                },
            }
        )
        block = msg.blocks[0]
        assert block.kind is BlockKind.TOOL_RESULT
        assert block.body == '{\n    "strategyName": "TestStrategy"\n}'

    def test_tool_result_plain_text_kept(self):
        msg = parse_message(
            {
                "type": "user",
                "message": {"content": [{"type": "tool_result", "content": "ok done"}]},
            }
        )
        assert msg.blocks[0].body == "ok done"

    def test_tool_result_list_content(self):
        msg = parse_message(
            {
                "type": "user",
                "message": {
                    "content": [
                        {
                            "type": "tool_result",
                            "content": [
                                {"type": "text", "text": "line one"},
                                {"type": "image"},
                                {"type": "text", "text": "line two"},
                            ],
                        }
                    ]
                },
            }
        )
        assert msg.blocks[0].body == "line one\nline two"

    def test_system_message(self):
        msg = parse_message(
            {"type": "system", "subtype": "init", "content": "booted", "isMeta": True}
        )
        assert msg.kind is MessageKind.SYSTEM
        assert msg.subtype == "init"
        assert msg.is_meta is True
        assert msg.blocks == (ContentBlock(BlockKind.PLAIN, "booted"),)

    def test_summary_message(self):
        msg = parse_message({"type": "summary", "summary": "short story"})
        assert msg.kind is MessageKind.SUMMARY
        assert msg.blocks[0].body == "short story"

    def test_skipped_type(self):
        assert parse_message({"type": "file-history-snapshot"}) is None

    def test_unknown_type_keeps_name(self):
        msg = parse_message({"type": "customtool", "text": "payload"})
        assert msg.kind is MessageKind.UNKNOWN
        assert msg.type_name == "customtool"
        assert not msg.is_implemented
        assert msg.blocks[0].body == "payload"

    def test_unknown_type_object_content(self):
        msg = parse_message({"type": "weird", "content": {"a": 1}})
        assert msg.blocks[0].body == '{\n    "a": 1\n}'

    def test_unknown_type_falls_back_to_raw(self):
        raw = {"type": "weird", "other": 1}
        msg = parse_message(raw)
        assert json.loads(msg.blocks[0].body) == raw

    def test_bad_timestamp(self):
        msg = parse_message({"type": "summary", "summary": "", "timestamp": "yesterday"})
        assert msg.timestamp is None


class TestParseMessages:
    """Decoding whole files."""

    def test_skips_bad_lines(self):
        text = "\n".join(
            [
                json.dumps({"type": "user", "message": {"content": "hi"}}),
                "not json",
                "",
                "[1, 2]",
                json.dumps({"type": "file-history-snapshot"}),
                json.dumps({"type": "assistant", "message": {"content": "yo"}}),
            ]
        )
        messages = parse_messages(text)
        assert [m.kind for m in messages] == [MessageKind.USER, MessageKind.ASSISTANT]

    def test_load_transcript(self, tmp_path):
        path = tmp_path / "t.jsonl"
        path.write_text(
            json.dumps({"type": "user", "message": {"content": "hi"}}) + "\n",
            encoding="utf-8",
        )
        transcript = load_transcript(path)
        assert transcript.lines[0] == "{"
        assert '    "type": "user",' in transcript.lines
        assert len(transcript.messages) == 1

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "empty.jsonl"
        path.write_text("", encoding="utf-8")
        transcript = load_transcript(path)
        assert transcript.lines == []
        assert transcript.messages == []


class TestWrapping:
    """Plain text wrapping and markdown detection."""

    def test_word_wrap(self):
        assert word_wrap("aaa bbb ccc", 7) == "aaa bbb\nccc"

    def test_word_wrap_keeps_newlines(self):
        assert word_wrap("one\n\ntwo", 20) == "one\n\ntwo"

    def test_word_wrap_long_word(self):
        assert word_wrap("abcdefghij", 4) == "abcdefghij"

    def test_word_wrap_wide_chars_fit_width(self):
        wrapped = word_wrap("日本語のテキスト " * 10, 30)
        rows = wrapped.split("\n")
        assert len(rows) == 10
        for row in rows:
            assert visible_width(row) <= 30

    def test_word_wrap_counts_cells(self):
        assert word_wrap("漢字 漢字 漢字", 9) == "漢字 漢字\n漢字"

    def test_word_wrap_keeps_indent(self):
        assert word_wrap("    aaa bbb ccc", 11) == "    aaa bbb\nccc"

    def test_looks_like_markdown(self):
        assert looks_like_markdown("some **bold** text")
        assert looks_like_markdown("# Title")
        assert looks_like_markdown("see [link](x)")
        assert not looks_like_markdown("just plain words here")

    def test_render_markdown_plain(self):
        text = "word " * 10
        result = render_markdown(text.strip(), 20)
        assert all(len(line) <= 20 for line in result.split("\n"))

    def test_render_markdown_formatted(self):
        result = render_markdown("# Title\n\nThis is **bold** text.", 40)
        plain = strip_escapes(result)
        assert "Title" in plain
        assert "bold" in plain
        assert "**" not in plain


class TestRenderMessage:
    """Badges and block rendering."""

    def test_assistant_badge(self):
        msg = _msg(MessageKind.ASSISTANT, ContentBlock(BlockKind.TEXT, "Hello world"))
        rendered = render_message(msg, 80)
        first = strip_escapes(rendered.split("\n")[0])
        assert "assistant" in first
        assert WARNING_GLYPH not in rendered
        assert "Hello world" in strip_escapes(rendered)

    def test_unknown_kind_warning(self):
        msg = _msg(
            MessageKind.UNKNOWN,
            ContentBlock(BlockKind.PLAIN, "Some content"),
            type_name="customtool",
        )
        rendered = render_message(msg, 80)
        first = strip_escapes(rendered.split("\n")[0])
        assert "customtool" in first
        assert WARNING_GLYPH in first

    def test_user_tool_result_badge(self):
        msg = _msg(MessageKind.USER, ContentBlock(BlockKind.TOOL_RESULT, "ok"))
        first = strip_escapes(render_badge(msg))
        assert "user" in first
        assert "tool_result" in first

    def test_subtype_in_badge(self):
        msg = _msg(MessageKind.SYSTEM, ContentBlock(BlockKind.PLAIN, "x"), subtype="init")
        assert "system (init)" in strip_escapes(render_badge(msg))

    def test_tool_result_pretty(self):
        raw = parse_message(
            {
                "type": "user",
                "message": {"content": [{"type": "tool_result", "content": '{"a":1}'}]},
            }
        )
        plain = strip_escapes(render_message(raw, 80))
        assert '"a": 1' in plain
        assert '{"a":1}' not in plain
        assert "Result" in plain

    def test_tool_use_header(self):
        block = ContentBlock(BlockKind.TOOL_USE, '{\n    "x": 1\n}', label="Bash")
        plain = strip_escapes(render_block(block, 80))
        assert plain.split("\n")[0].endswith("Bash")
        assert '    "x": 1' in plain

    def test_thinking_block(self):
        block = ContentBlock(BlockKind.THINKING, "pondering")
        rendered = render_block(block, 80)
        start, _ = DEFAULT_THEME.codes(DEFAULT_THEME.thinking)
        assert rendered.startswith(start)
        plain = strip_escapes(rendered)
        assert "Thinking:" in plain
        assert "pondering" in plain

    def test_blocks_separated_by_blank_line(self):
        msg = _msg(
            MessageKind.ASSISTANT,
            ContentBlock(BlockKind.TEXT, "first"),
            ContentBlock(BlockKind.TEXT, "second"),
        )
        plain = strip_escapes(render_message(msg, 80))
        assert plain.split("\n")[1:] == ["first", "", "second"]

    def test_meta_body_dimmed(self):
        msg = _msg(
            MessageKind.USER, ContentBlock(BlockKind.TEXT, "skill loaded"), is_meta=True
        )
        rendered = render_message(msg, 80)
        start, _ = DEFAULT_THEME.codes(DEFAULT_THEME.meta)
        head, body = rendered.split("\n", 1)
        assert start not in head
        assert body.startswith(start)
        assert strip_escapes(body) == "skill loaded"

    def test_wide_text_keeps_every_word(self):
        msg = _msg(MessageKind.USER, ContentBlock(BlockKind.TEXT, "漢字 " * 40))
        rows = render_message(msg, 40).split("\n")[1:]
        assert all(visible_width(row) <= 36 for row in rows)
        assert sum(row.count("漢字") for row in rows) == 40

    def test_narrow_width_clamped(self):
        msg = _msg(MessageKind.USER, ContentBlock(BlockKind.TEXT, "aaa bbb ccc ddd eee fff"))
        plain = strip_escapes(render_message(msg, 0))
        assert plain.split("\n")[1] == "aaa bbb ccc ddd eee"
