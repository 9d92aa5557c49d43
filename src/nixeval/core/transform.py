"""Single-pass event stream transform replacing Nix blocks with evaluated output"""

import logging
import tempfile
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

from nixeval.config import Settings
from nixeval.core.accumulate import BlockAccumulator
from nixeval.core.emit import emit
from nixeval.core.evaluate import Evaluator, ProcessRunner
from nixeval.core.exceptions import ScratchWorkspaceError
from nixeval.core.models import Event, EventKind, PendingBlock
from nixeval.core.parse import parse_events
from nixeval.core.render import render_block


_log = logging.getLogger(__name__)


def transform_events(events: Iterable[Event], evaluator: Evaluator) -> Iterator[Event]:
    """Lazily substitute each matched block with one replacement event; pass the rest through."""
    accumulator = BlockAccumulator()
    for event in events:
        result = accumulator.feed(event)
        if result is None:
            continue
        if isinstance(result, PendingBlock):
            outcome = evaluator.invoke(result.match.file_name, result.source)
            yield Event(EventKind.replacement, content=render_block(result, outcome))
        else:
            yield result

    leftover = accumulator.finish()
    if leftover is not None:
        _log.warning("code block %s was never closed; leaving it unevaluated", leftover.match.file_name)
        yield Event(EventKind.source, raw=leftover.original())


@contextmanager
def scratch_workspace() -> Iterator[Path]:
    """Temporary directory for one chapter, removed on every exit path."""
    try:
        tmp = tempfile.TemporaryDirectory(prefix="nix-eval-")
    except OSError as e:
        raise ScratchWorkspaceError(tempfile.gettempdir(), e) from e
    with tmp as name:
        yield Path(name)


def transform_content(
    content: str,
    settings: Settings,
    workspace: Path,
    runner: Optional[ProcessRunner] = None,
    ) -> str:
    """Parse, transform, and re-serialize one document's Markdown source."""
    evaluator = Evaluator(settings, workspace, runner)
    events = parse_events(content, settings.parser_config)
    return emit(transform_events(events, evaluator))


def transform_chapter(
    settings: Settings,
    chapter: dict[str, Any],
    runner: Optional[ProcessRunner] = None,
    ) -> None:
    """Rewrite chapter["content"] in place; on error the content is left untouched."""
    content = chapter.get("content")
    if not content:
        return
    with scratch_workspace() as workspace:
        chapter["content"] = transform_content(content, settings, workspace, runner)
