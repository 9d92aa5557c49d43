"""Two-state machine collecting the source of a matched code block"""

import logging
from enum import Enum, auto
from typing import Union

from nixeval.core.match import match_fence
from nixeval.core.models import Event, EventKind, PendingBlock


_log = logging.getLogger(__name__)


class AccumulatorState(Enum):
    """IDLE outside a matched block, COLLECTING between its start and end."""
    IDLE = auto()
    COLLECTING = auto()


FeedResult = Union[Event, PendingBlock, None]


class BlockAccumulator:
    """Swallow the events of a matched block and hand back its collected source.

    `feed` returns the event itself to pass it through, None when the event was
    swallowed, or the completed `PendingBlock` when the matching end arrives.
    """

    def __init__(self) -> None:
        self.state = AccumulatorState.IDLE
        self._pending: PendingBlock | None = None

    def feed(self, event: Event) -> FeedResult:
        if self.state is AccumulatorState.IDLE:
            return self._feed_idle(event)
        return self._feed_collecting(event)

    def _feed_idle(self, event: Event) -> FeedResult:
        if event.kind is not EventKind.code_start:
            return event
        match = match_fence(event.info)
        if match is None:
            return event
        self._pending = PendingBlock(match=match, prefix=event.prefix, raw=[event.raw])
        self.state = AccumulatorState.COLLECTING
        return None

    def _feed_collecting(self, event: Event) -> FeedResult:
        pending = self._pending
        if event.kind is EventKind.text:
            pending.source += event.content
            pending.raw.append(event.raw)
            return None
        if event.kind is EventKind.code_start:
            # fences never nest; keep the stray start as snippet text
            _log.warning("nested code block start %r inside %s; treating it as text",
                         event.info, pending.match.file_name)
            pending.source += event.raw
            pending.raw.append(event.raw)
            return None
        if event.kind is EventKind.code_end:
            pending.raw.append(event.raw)
            self._pending = None
            self.state = AccumulatorState.IDLE
            return pending
        return event

    def finish(self) -> PendingBlock | None:
        """Return a block left open at the end of the stream, resetting to IDLE."""
        pending, self._pending = self._pending, None
        self.state = AccumulatorState.IDLE
        return pending
