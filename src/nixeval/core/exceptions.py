"""Exception types raised by the evaluation pipeline"""


class NixEvalError(Exception):
    """Base class for nix-eval errors."""


class ScratchWorkspaceError(NixEvalError):
    """The scratch workspace could not be created or written to."""

    def __init__(self, path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Scratch workspace unusable at {path}: {cause}")


class EvaluatorSpawnError(NixEvalError):
    """The evaluator process could not be started."""

    def __init__(self, command: str, cause: OSError):
        self.command = command
        self.cause = cause
        super().__init__(f"failed to launch {command!r}: {cause}")
