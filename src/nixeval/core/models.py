"""Document events, fence matches, and evaluation outcomes"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class EventKind(str, Enum):
    source      = "source"          # opaque pass-through source text
    code_start  = "code_start"      # opening line of a fenced code block
    text        = "text"            # body of a fenced code block
    code_end    = "code_end"        # closing line of a fenced code block
    replacement = "replacement"     # rendered text substituted for a block


@dataclass(frozen=True)
class Event:
    """A single document event; `raw` is the exact source text it covers."""
    kind:    EventKind
    raw:     str = ""
    content: str = ""               # code text for `text`, rendered text for `replacement`
    info:    str = ""               # fence annotation for `code_start`
    prefix:  str = ""               # container prefix of the opening fence line


@dataclass(frozen=True)
class FenceMatch:
    """A fence annotation selected for evaluation."""
    file_name:     str
    is_named_file: bool


@dataclass
class PendingBlock:
    """Source collected between a matched fence start and its end."""
    match:  FenceMatch
    prefix: str = ""
    source: str = ""
    raw:    list[str] = field(default_factory=list)

    def original(self) -> str:
        return "".join(self.raw)


@dataclass(frozen=True)
class Evaluated:
    """Successful evaluation; `structured` is False for placeholder or raw text."""
    value:      Any
    structured: bool = True


@dataclass(frozen=True)
class Failed:
    """Evaluator exited non-zero; `diagnostic` is its standard error."""
    diagnostic: str


@dataclass(frozen=True)
class Skipped:
    """Evaluator could not be started; the block is passed through."""
    reason: str


EvalOutcome = Union[Evaluated, Failed, Skipped]
