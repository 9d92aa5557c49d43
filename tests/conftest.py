"""Root test configuration: environment isolation and a fake evaluator process runner"""

import logging
from pathlib import Path

import pytest

from nixeval.core.evaluate import ProcessResult


class FakeRunner:
    """ProcessRunner double: records argument vectors and replies via a handler."""

    def __init__(self, handler=None):
        self.calls: list[tuple[list[str], Path]] = []
        self.handler = handler or (lambda args, cwd: ProcessResult(0, "", ""))

    def run(self, args, cwd):
        self.calls.append((list(args), Path(cwd)))
        return self.handler(list(args), Path(cwd))

    @property
    def real_calls(self) -> list[list[str]]:
        return [args for args, _ in self.calls if "--json" in args]


def nix_handler(peek: str = "", result: ProcessResult | None = None):
    """Handler answering the peek pass with `peek` and the strict pass with `result`."""
    result = result or ProcessResult(0, "", "")

    def handler(args, cwd):
        if "--json" in args:
            return result
        return ProcessResult(0, peek, "")

    return handler


@pytest.fixture(name="fake_runner")
def fake_runner_fixture():
    return FakeRunner()


@pytest.fixture(autouse=True)
def isolate_env(tmp_path, monkeypatch):
    """Run each test from a clean tmp directory with no NIXEVAL_* variables set."""
    for name in ("EVAL_COMMAND", "EVAL_ARGS", "PARSER_CONFIG", "LOG_LEVEL"):
        monkeypatch.delenv(f"NIXEVAL_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo logging.basicConfig(force=True) done by CLI invocations."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(name="make_runner")
def make_runner_fixture():
    """Factory: make_runner(peek=..., result=...) or make_runner(handler=...)."""
    def make(peek: str = "", result: ProcessResult | None = None, handler=None) -> FakeRunner:
        return FakeRunner(handler or nix_handler(peek, result))
    return make
