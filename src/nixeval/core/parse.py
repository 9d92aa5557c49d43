"""markdown-it tokenization into a lazy document event stream"""

import re
from collections.abc import Iterator

from markdown_it import MarkdownIt
from markdown_it.token import Token

from nixeval.core.models import Event, EventKind


# markdown-it numbers lines after normalizing \r\n and \r to \n
_LINE_RE = re.compile(r'[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+\Z')
_CLOSING_FENCE_RE = re.compile(r'^[ \t>]*(`{3,}|~{3,})[ \t]*(?:\r\n|\r|\n)?\Z')


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def split_lines(text: str) -> list[str]:
    """Split text into lines with their endings kept, the way markdown-it counts them."""
    return _LINE_RE.findall(text)


def _fence_prefix(line: str, markup: str) -> str:
    """Return the container prefix (indent, '> ', list marker) before the fence marker."""
    idx = line.find(markup)
    return line[:idx] if idx > 0 else ""


def _is_closing_fence(line: str, markup: str) -> bool:
    m = _CLOSING_FENCE_RE.match(line)
    return bool(m) and m.group(1)[0] == markup[0] and len(m.group(1)) >= len(markup)


def _fence_events(token: Token, lines: list[str]) -> Iterator[Event]:
    """Yield start/text/end events for one fence token using its source line map."""
    start, end = token.map
    opening = lines[start]
    closed = end - 1 > start and _is_closing_fence(lines[end - 1], token.markup)
    body_end = end - 1 if closed else end

    yield Event(
        EventKind.code_start,
        raw=opening,
        info=token.info.strip(),
        prefix=_fence_prefix(opening, token.markup),
    )
    yield Event(EventKind.text, raw="".join(lines[start + 1:body_end]), content=token.content)
    yield Event(EventKind.code_end, raw=lines[end - 1] if closed else "")


def parse_events(content: str, parser_config: str = "gfm-like") -> Iterator[Event]:
    """Yield document events for content; every fence at any depth becomes start/text/end."""
    lines = split_lines(content)
    tokens = _make_parser(parser_config).parse(content)
    cursor = 0

    for tok in tokens:
        if tok.type != "fence" or not tok.map:
            continue
        start, end = tok.map
        if start > cursor:
            yield Event(EventKind.source, raw="".join(lines[cursor:start]))
        yield from _fence_events(tok, lines)
        cursor = end

    if cursor < len(lines):
        yield Event(EventKind.source, raw="".join(lines[cursor:]))
