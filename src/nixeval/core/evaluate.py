"""Evaluator invocation: scratch file, peek pass, and strict JSON pass"""

import json
import logging
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from nixeval.config import Settings
from nixeval.core.exceptions import EvaluatorSpawnError, ScratchWorkspaceError
from nixeval.core.models import EvalOutcome, Evaluated, Failed, Skipped


LAMBDA_SENTINEL = "<LAMBDA>"
NO_OUTPUT = "<< no output >>"

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    stdout:     str
    stderr:     str


class ProcessRunner(Protocol):
    """Run a process to completion with captured output streams."""

    def run(self, args: Sequence[str], cwd: Path) -> ProcessResult:
        """Raise EvaluatorSpawnError when the process cannot be started."""
        ...


def _decode(data: bytes, command: str, stream: str) -> str:
    """Decode process output as UTF-8, replacing invalid sequences with a warning."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        _log.warning("%s wrote invalid UTF-8 to %s (%s); replacing invalid bytes", command, stream, e)
        return data.decode("utf-8", errors="replace")


class SubprocessRunner:
    """ProcessRunner backed by subprocess.run; blocks until the process exits."""

    def run(self, args: Sequence[str], cwd: Path) -> ProcessResult:
        args = [str(a) for a in args]
        _log.debug("running %s (cwd=%s)", shlex.join(args), cwd)
        try:
            proc = subprocess.run(args, cwd=cwd, capture_output=True, stdin=subprocess.DEVNULL)
        except OSError as e:
            raise EvaluatorSpawnError(args[0], e) from e
        return ProcessResult(
            returncode=proc.returncode,
            stdout=_decode(proc.stdout, args[0], "stdout"),
            stderr=_decode(proc.stderr, args[0], "stderr"),
        )


def peek_args(settings: Settings, path: Path) -> list[str]:
    """Arguments for the quick non-JSON pass that reveals bare lambdas."""
    return [settings.eval_command, "--eval", str(path)]


def eval_args(settings: Settings, path: Path, wrap_lambda: bool) -> list[str]:
    """Arguments for the strict JSON pass; lambdas are applied to an empty attrset."""
    args = [settings.eval_command, "--json", "--eval", "--strict"]
    if settings.eval_args:
        args.extend(settings.eval_args.split(" "))
    if wrap_lambda:
        args.extend(["-E", f"import {path.absolute()} {{}}"])
    else:
        args.append(str(path))
    return args


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")


def parse_result(result: ProcessResult) -> EvalOutcome:
    """Turn the strict pass's exit status and output into an outcome.

    Non-zero exit is a Failed carrying stderr. Output that does not parse as
    JSON is still shown, as unstructured text.
    """
    if result.returncode != 0:
        return Failed(diagnostic=result.stderr)

    output = result.stdout.strip()
    if not output:
        return Evaluated(NO_OUTPUT, structured=False)
    try:
        return Evaluated(json.loads(output, parse_constant=_reject_constant))
    except ValueError:
        return Evaluated(output, structured=False)


class Evaluator:
    """Evaluates snippets inside one chapter's scratch workspace."""

    def __init__(self, settings: Settings, workspace: Path, runner: ProcessRunner | None = None):
        self.settings = settings
        self.workspace = workspace
        self.runner = runner or SubprocessRunner()

    def scratch_path(self, file_name: str) -> Path | None:
        """workspace/file_name, or None when the name points outside the workspace."""
        path = self.workspace / file_name
        if not path.resolve().is_relative_to(self.workspace.resolve()):
            return None
        return path

    def write_scratch(self, file_name: str, source: str) -> Path:
        """Write source verbatim to workspace/file_name, overwriting any previous file."""
        path = self.workspace / file_name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source, encoding="utf-8")
        except OSError as e:
            raise ScratchWorkspaceError(path, e) from e
        return path

    def invoke(self, file_name: str, source: str) -> EvalOutcome:
        """Peek then evaluate source; spawn failures yield Skipped, never raise."""
        if self.scratch_path(file_name) is None:
            _log.warning("not evaluating %s block: file name leaves the scratch workspace", file_name)
            return Failed(diagnostic=f"error: file name {file_name!r} must stay inside the scratch workspace")
        path = self.write_scratch(file_name, source)
        try:
            peek = self.runner.run(peek_args(self.settings, path), self.workspace)
            wrap_lambda = peek.stdout.strip() == LAMBDA_SENTINEL
            if wrap_lambda:
                _log.debug("%s evaluates to a function; applying it to {}", file_name)
            result = self.runner.run(eval_args(self.settings, path, wrap_lambda), self.workspace)
        except EvaluatorSpawnError as e:
            _log.warning("not rendering %s block: %s", file_name, e)
            return Skipped(reason=str(e))
        return parse_result(result)
