"""Rendering of evaluation outcomes into replacement Markdown.

Everything here is a pure function of its arguments: no processes, no files.
"""

import json
import re
from typing import Any

from nixeval.core.models import EvalOutcome, Failed, PendingBlock, Skipped


SNIPPET_FENCE_INFO = "nix,rendered"     # not re-matched on a second pass
RESULT_FENCE_INFO = "json"
CONTAINER_OPEN = "<div style='border-left: 2px solid;'>"
CONTAINER_CLOSE = "</div>"

_BACKTICK_RUN_RE = re.compile(r'`{3,}')


def render_value(value: Any) -> str:
    """Render a parsed JSON value; strings are re-quoted, containers pretty-printed."""
    if isinstance(value, str):
        trimmed = value.strip()
        if "\n" in trimmed:
            return f'"\n{trimmed}\n"'
        return f'"{trimmed}"'
    if isinstance(value, (list, dict)):
        return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False)
    # bool, None, int, float
    return json.dumps(value)


def render_outcome(outcome: EvalOutcome) -> str:
    """Text shown in the result slot: the value, the raw output, or the diagnostic."""
    if isinstance(outcome, Failed):
        return outcome.diagnostic.strip()
    if isinstance(outcome, Skipped):
        return outcome.reason.strip()
    if outcome.structured:
        return render_value(outcome.value).strip()
    return str(outcome.value).strip()


def _fence(info: str, body: str) -> str:
    """Fence body with a backtick run longer than any run inside it."""
    longest = max((len(m) for m in _BACKTICK_RUN_RE.findall(body)), default=2)
    marker = "`" * max(3, longest + 1)
    return f"{marker}{info}\n{body}\n{marker}"


def _continuation(prefix: str) -> str:
    return "".join(c if c == ">" else " " for c in prefix)


def _reindent(text: str, prefix: str, first_prefix: str | None = None) -> str:
    """Prefix every line of text so it stays inside the fence's container."""
    if not prefix:
        return text
    first = prefix if first_prefix is None else first_prefix
    cont = _continuation(prefix)
    body = text.lstrip("\n")
    lines = []
    # a list marker must open the first line; otherwise keep one blank
    # line so the replacement does not join the paragraph above it
    if first == cont and len(body) < len(text):
        lines.append(cont.rstrip() + "\n")
    for i, line in enumerate(body.splitlines(keepends=True)):
        p = first if i == 0 else cont
        lines.append(p + line if line.strip() else p.rstrip() + line)
    return "".join(lines)


def render_block(block: PendingBlock, outcome: EvalOutcome) -> str:
    """Replacement text for a completed block: header, snippet, and result in a container."""
    if isinstance(outcome, Skipped):
        return render_skipped(block, outcome)

    header = f"**{block.match.file_name}**\n" if block.match.is_named_file else ""
    snippet = _fence(SNIPPET_FENCE_INFO, block.source.strip())
    result = _fence(RESULT_FENCE_INFO, render_outcome(outcome))
    text = (
        f"\n{header}\n{CONTAINER_OPEN}\n"
        f"\n{snippet}\n\n"
        f"\n{result}\n"
        f"\n{CONTAINER_CLOSE}\n\n"
    )
    return _reindent(text, block.prefix)


def render_skipped(block: PendingBlock, outcome: Skipped) -> str:
    """The original block, verbatim, followed by a comment saying it was not evaluated."""
    original = block.original()
    if original and not original.endswith(("\n", "\r")):
        original += "\n"
    reason = outcome.reason.replace("-->", "- ->").replace("\n", " ")
    comment = f"<!-- nix-eval: evaluation skipped ({reason}) -->\n"
    cont = _continuation(block.prefix)
    return original + _reindent(comment, cont)
