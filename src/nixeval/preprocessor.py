"""mdBook preprocessor adapter: per-chapter evaluation with logged, non-fatal errors"""

import logging
from typing import Any, Optional

from nixeval.book import iter_chapters
from nixeval.config import Settings
from nixeval.core.evaluate import ProcessRunner
from nixeval.core.exceptions import NixEvalError
from nixeval.core.transform import transform_chapter


PREPROCESSOR_NAME = "nix-eval"
SUPPORTED_RENDERERS = frozenset({"html"})

_log = logging.getLogger(__name__)


class NixEvalPreprocessor:
    """Evaluates `nix` and `*.nix` code blocks in every chapter of a book."""

    name = PREPROCESSOR_NAME

    def __init__(self, settings: Settings, runner: Optional[ProcessRunner] = None):
        self.settings = settings
        self.runner = runner

    def supports_renderer(self, renderer: str) -> bool:
        return renderer in SUPPORTED_RENDERERS

    def run(self, context: dict[str, Any], book: dict[str, Any]) -> dict[str, Any]:
        """Transform each chapter in place and return the book.

        A chapter whose transform fails keeps its original content; the error
        is logged and the remaining chapters are still processed.
        """
        for chapter in iter_chapters(book):
            try:
                transform_chapter(self.settings, chapter, self.runner)
            except (NixEvalError, OSError) as e:
                _log.error("nix-eval error in %s: %s", chapter.get("name", "<unnamed>"), e)
        return book
