"""Tests for timecli.log_feed.LogFeed."""

from __future__ import annotations

import pytest

from timecli.log_feed import LogFeed


def make_feed(*messages: str, capacity: int | None = None) -> LogFeed:
    feed = LogFeed(capacity=capacity)
    for message in messages:
        feed.append(message)
    return feed


class TestAppend:
    def test_empty_feed(self) -> None:
        feed = LogFeed()
        assert len(feed) == 0
        assert list(feed.iterate_recent(5)) == []

    def test_append_grows_feed(self) -> None:
        feed = make_feed("a", "b")
        assert len(feed) == 2

    def test_log_formats_arguments(self) -> None:
        feed = LogFeed()
        feed.log("Switched from %s to %s", "MainMenu", "Calendar")
        assert list(feed.iterate_recent(1)) == ["Switched from MainMenu to Calendar"]

    def test_log_without_arguments_keeps_percent(self) -> None:
        feed = LogFeed()
        feed.log("100% done")
        assert list(feed.iterate_recent(1)) == ["100% done"]

    def test_storage_is_unbounded_by_default(self) -> None:
        feed = make_feed(*[str(i) for i in range(100)])
        assert len(feed) == 100


class TestIterateRecent:
    def test_newest_first(self) -> None:
        feed = make_feed("a", "b", "c")
        assert list(feed.iterate_recent(2)) == ["c", "b"]

    def test_limit_larger_than_feed_yields_all(self) -> None:
        feed = make_feed("a", "b", "c")
        assert list(feed.iterate_recent(10)) == ["c", "b", "a"]

    def test_exact_limit(self) -> None:
        feed = make_feed(*[str(i) for i in range(20)])
        recent = list(feed.iterate_recent(15))
        assert len(recent) == 15
        assert recent == [str(i) for i in range(19, 4, -1)]

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_yields_nothing(self, limit: int) -> None:
        feed = make_feed("a")
        assert list(feed.iterate_recent(limit)) == []

    def test_restartable(self) -> None:
        feed = make_feed("a", "b")
        assert list(feed.iterate_recent(5)) == ["b", "a"]
        feed.append("c")
        assert list(feed.iterate_recent(5)) == ["c", "b", "a"]

    def test_is_lazy(self) -> None:
        feed = make_feed("a", "b", "c")
        it = feed.iterate_recent(3)
        assert next(it) == "c"


class TestCapacity:
    def test_evicts_oldest(self) -> None:
        feed = make_feed("a", "b", "c", "d", capacity=3)
        assert len(feed) == 3
        assert list(feed.iterate_recent(10)) == ["d", "c", "b"]

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            LogFeed(capacity=0)


class TestClear:
    def test_clear_releases_entries(self) -> None:
        feed = make_feed("a", "b")
        feed.clear()
        assert len(feed) == 0
        assert list(feed.iterate_recent(5)) == []
