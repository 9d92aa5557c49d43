"""Unit tests for core/parse.py and core/emit.py"""

import pytest

from nixeval.core.emit import emit
from nixeval.core.models import Event, EventKind
from nixeval.core.parse import parse_events, split_lines


def _kinds(events):
    return [e.kind for e in events]


def test_fence_becomes_start_text_end():
    """A fenced block yields start, text, and end events with exact raw lines."""
    events = list(parse_events("```nix\n1 + 1\n```\n"))
    assert _kinds(events) == [EventKind.code_start, EventKind.text, EventKind.code_end]
    start, text, end = events
    assert start.info == "nix"
    assert start.raw == "```nix\n"
    assert text.content == "1 + 1\n"
    assert text.raw == "1 + 1\n"
    assert end.raw == "```\n"


def test_source_between_fences():
    """Lines outside fences become opaque source events in order."""
    events = list(parse_events("# Title\n\n```nix\n1\n```\n\nAfter.\n"))
    assert _kinds(events) == [
        EventKind.source, EventKind.code_start, EventKind.text, EventKind.code_end, EventKind.source,
    ]
    assert events[0].raw == "# Title\n\n"
    assert events[-1].raw == "\nAfter.\n"


def test_info_is_trimmed():
    """Leading/trailing whitespace around the annotation is not part of it."""
    start = next(parse_events("```  foo.nix  \nx\n```\n"))
    assert start.info == "foo.nix"


def test_unclosed_fence_has_empty_end():
    """A fence running to the end of the document has an end event with no raw text."""
    events = list(parse_events("```nix\n1\n2\n"))
    assert events[-1].kind == EventKind.code_end
    assert events[-1].raw == ""
    assert events[1].raw == "1\n2\n"


def test_blockquote_fence_prefix():
    """Fences inside a block quote carry the quote prefix and unquoted content."""
    events = list(parse_events("> ```nix\n> 1\n> ```\n"))
    start, text, end = events
    assert start.prefix == "> "
    assert text.content == "1\n"
    assert end.raw == "> ```\n"


def test_list_item_fence_prefix():
    """Fences opening a list item carry the list marker as prefix."""
    start = next(e for e in parse_events("- ```nix\n  1\n  ```\n") if e.kind == EventKind.code_start)
    assert start.prefix == "- "


def test_indented_code_block_is_source():
    """Indented code blocks are not fences and stay opaque."""
    assert _kinds(parse_events("    nix\n")) == [EventKind.source]


@pytest.mark.parametrize("md", [
    "",
    "no newline at end",
    "# H\r\n\r\n```nix\r\n1\r\n```\r\n",
    "```nix\n```\n",
    "````\n```nix\n````\n",
    "> quote\n>\n> ```nix\n> 1\n> ```\n\n1. a\n\n   ~~~ foo.nix\n   x\n   ~~~\n",
    "```nix",
])
def test_emit_parse_is_identity(md):
    """Re-serializing the parsed events reproduces the source byte-for-byte."""
    assert emit(parse_events(md)) == md


def test_emit_uses_replacement_content():
    """Replacement events contribute their content rather than raw text."""
    events = [Event(EventKind.source, raw="a\n"), Event(EventKind.replacement, content="B\n")]
    assert emit(events) == "a\nB\n"


def test_split_lines_keeps_endings():
    """split_lines counts \\r\\n, \\r and \\n as one line ending each."""
    assert split_lines("a\r\nb\rc\nd") == ["a\r\n", "b\r", "c\n", "d"]
    assert split_lines("") == []
