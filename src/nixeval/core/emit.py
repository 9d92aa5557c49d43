"""Re-serialization of a document event stream to Markdown source"""

from collections.abc import Iterable

from nixeval.core.models import Event, EventKind


def emit(events: Iterable[Event]) -> str:
    """Concatenate events back into source text; replacements contribute their content."""
    return "".join(
        e.content if e.kind is EventKind.replacement else e.raw
        for e in events
    )
