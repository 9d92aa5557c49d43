"""Traversal of the mdBook book JSON"""

from collections.abc import Iterable, Iterator
from typing import Any


def _items(book: dict[str, Any]) -> list:
    # mdBook < 0.5 serializes top-level items as "sections"
    return book.get("items") or book.get("sections") or []


def _walk(items: Iterable) -> Iterator[dict[str, Any]]:
    for item in items:
        if isinstance(item, dict) and "Chapter" in item:
            chapter = item["Chapter"]
            yield chapter
            yield from _walk(chapter.get("sub_items") or [])


def iter_chapters(book: dict[str, Any]) -> Iterator[dict[str, Any]]:
    """Yield every chapter mapping depth-first; separators and part titles are skipped."""
    yield from _walk(_items(book))
