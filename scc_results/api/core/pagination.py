"""
Pagination
==========

List operations return one page at a time; each page carries
``next.href``, a URL whose ``start`` query parameter is the cursor of the
following page. `Pager` turns such an operation into a lazy sequence:

    pager = client.new_reports_pager(ListReportsOptions(limit=50))
    while pager.has_next():
        for report in pager.get_next():
            ...

or simply ``for report in pager`` / ``pager.get_all()``.

The pager only knows the operation through a `list_page(options, context)`
callable returning ``(items, next_href)``; it never inspects response
models itself. Pagers are not thread-safe and cannot be restarted: create a
new one to iterate again.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any, Callable, Generic, Iterator, List, Optional, Tuple, TypeVar
from urllib.parse import parse_qs, urlsplit

from scc_results.api.core.context import RequestContext
from scc_results.api.core.errors import StateError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

START_PARAM = "start"

ListPage = Callable[[Any, Optional[RequestContext]], Tuple[List[T], Optional[str]]]


def next_start_from_href(href: Optional[str]) -> Optional[str]:
    """
    Extract the ``start`` cursor from a ``next.href`` URL.

    Returns None when there is no href, no query string, or no non-empty
    ``start`` parameter.
    """
    if not href:
        return None
    query = urlsplit(href).query
    if not query:
        return None
    values = parse_qs(query).get(START_PARAM)
    if not values:
        return None
    return values[0]


class Pager(Generic[T]):
    """Cursor-driven lazy sequence over a paginated list operation."""

    def __init__(self, list_page: ListPage[T], options: Any) -> None:
        if options is None:
            raise ValidationError("options cannot be None")
        if getattr(options, START_PARAM, None) is not None:
            raise StateError("start must not be pre-set on a pager")
        # Snapshot; later changes to the caller's bundle are not seen.
        self._options = replace(options, headers=dict(getattr(options, "headers", None) or {}))
        self._list_page = list_page
        self._next: Optional[str] = None
        self._has_next = True

    def has_next(self) -> bool:
        """True if there are potentially more results to be retrieved."""
        return self._has_next

    def get_next(self, context: Optional[RequestContext] = None) -> List[T]:
        """Fetch the next page and return its items."""
        if not self._has_next:
            raise StateError("no more results")

        options = replace(self._options, start=self._next)
        items, next_href = self._list_page(options, context)

        self._next = next_start_from_href(next_href)
        self._has_next = self._next is not None
        logger.debug(
            "Fetched page",
            extra={"item_count": len(items), "has_next": self._has_next},
        )
        return items

    def get_all(self, context: Optional[RequestContext] = None) -> List[T]:
        """Fetch every remaining page and concatenate the items."""
        all_items: List[T] = []
        while self.has_next():
            all_items.extend(self.get_next(context))
        return all_items

    def __iter__(self) -> Iterator[T]:
        while self.has_next():
            yield from self.get_next()


__all__ = [
    "ListPage",
    "Pager",
    "START_PARAM",
    "next_start_from_href",
]
