"""Fence annotation matching for evaluable Nix code blocks"""

from nixeval.core.models import FenceMatch


LANGUAGE_TAG = "nix"
FILE_EXTENSION = ".nix"
DEFAULT_FILE_NAME = "eval.nix"


def match_fence(info: str) -> FenceMatch | None:
    """Return the scratch file to evaluate for a fence annotation, or None to pass it through.

    `foo.nix` evaluates as a named file `foo.nix`; the bare tag `nix` evaluates
    inline as `eval.nix`. Anything else, including annotations that merely
    contain the tag (`nix,rendered`, `nixos`), is not matched.
    """
    if info.endswith(FILE_EXTENSION):
        return FenceMatch(file_name=info, is_named_file=True)
    if info == LANGUAGE_TAG:
        return FenceMatch(file_name=DEFAULT_FILE_NAME, is_named_file=False)
    return None
