"""Unit tests for the generic Pager."""

from dataclasses import dataclass, field
from typing import Dict, Optional

import pytest

from scc_results.api.core.errors import StateError, ValidationError
from scc_results.api.core.pagination import Pager, next_start_from_href


@dataclass
class PageOptions:
    start: Optional[str] = None
    limit: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)


class FakeListOperation:
    """Serves pages keyed by cursor and records the options it was called with."""

    def __init__(self, pages):
        self.pages = pages
        self.seen = []

    def __call__(self, options, context):
        self.seen.append(options)
        return self.pages[options.start]


class TestNextStartFromHref:
    @pytest.mark.parametrize(
        "href,expected",
        [
            ("https://x/y?start=1", "1"),
            ("https://x/y?limit=10&start=abc%3D%3D", "abc=="),
            ("/reports?start=", None),
            ("https://x/y?limit=10", None),
            ("https://x/y", None),
            ("", None),
            (None, None),
        ],
    )
    def test_cursor_extraction(self, href, expected):
        assert next_start_from_href(href) == expected


class TestPager:
    """Cursor handling and lifecycle."""

    def test_follows_cursor_until_exhausted(self):
        operation = FakeListOperation(
            {
                None: (["A"], "https://x/y?start=1"),
                "1": (["B"], "https://x/y?start=2"),
                "2": (["C"], None),
            }
        )
        pager = Pager(operation, PageOptions(limit=1))
        assert pager.get_all() == ["A", "B", "C"]
        assert [o.start for o in operation.seen] == [None, "1", "2"]
        assert not pager.has_next()

    def test_href_without_start_terminates(self):
        operation = FakeListOperation({None: (["A"], "https://x/y?limit=1")})
        pager = Pager(operation, PageOptions())
        assert pager.get_next() == ["A"]
        assert not pager.has_next()

    def test_get_next_after_exhaustion(self):
        pager = Pager(FakeListOperation({None: ([], None)}), PageOptions())
        assert pager.get_next() == []
        with pytest.raises(StateError, match="no more results"):
            pager.get_next()

    @pytest.mark.parametrize("start", ["5", ""])
    def test_rejects_preset_start(self, start):
        with pytest.raises(StateError, match="start must not be pre-set"):
            Pager(FakeListOperation({}), PageOptions(start=start))

    def test_rejects_none_options(self):
        with pytest.raises(ValidationError):
            Pager(FakeListOperation({}), None)

    def test_caller_options_never_mutated(self):
        options = PageOptions(limit=1, headers={"X-A": "1"})
        operation = FakeListOperation({None: (["A"], "https://x/y?start=1"), "1": (["B"], None)})
        pager = Pager(operation, options)
        options.limit = 99
        options.headers["X-B"] = "2"
        pager.get_all()
        assert options.start is None
        assert all(o.limit == 1 for o in operation.seen)
        assert all("X-B" not in o.headers for o in operation.seen)

    def test_iteration_is_lazy(self):
        operation = FakeListOperation({None: (["A", "B"], "https://x/y?start=1"), "1": (["C"], None)})
        iterator = iter(Pager(operation, PageOptions()))
        assert next(iterator) == "A"
        assert len(operation.seen) == 1
        assert list(iterator) == ["B", "C"]
        assert len(operation.seen) == 2
