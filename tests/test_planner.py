"""Tests for cloudfront_logs/cache/planner.py"""

from datetime import datetime, timedelta, timezone

from cloudfront_logs.cache.planner import ExtendCache, FetchFresh, UseCacheAsIs, plan
from cloudfront_logs.cache.store import CacheBounds
from tests.conftest import NOW

OLDEST = datetime(2025, 9, 14, 10, 0, 0, tzinfo=timezone.utc)
NEWEST = datetime(2025, 9, 14, 11, 50, 0, tzinfo=timezone.utc)
BOUNDS = CacheBounds(oldest=OLDEST, newest=NEWEST)


class TestPlan:
    def test_start_inside_bounds_uses_cache(self):
        for minutes in (10, 60, 120):
            start = NOW - timedelta(minutes=minutes)
            decision = plan(start, BOUNDS, now=NOW)
            assert decision == UseCacheAsIs()
            assert decision.label == "cached"
            assert not decision.needs_fetch

    def test_start_on_bounds_uses_cache(self):
        assert plan(OLDEST, BOUNDS, now=NOW) == UseCacheAsIs()
        assert plan(NEWEST, BOUNDS, now=NOW) == UseCacheAsIs()

    def test_start_before_oldest_extends(self):
        start = OLDEST - timedelta(seconds=1)
        decision = plan(start, BOUNDS, now=NOW)
        assert decision == ExtendCache(start, NOW)
        assert decision.label == "smart cache"
        assert decision.needs_fetch
        assert decision.merge_with_cache

    def test_start_after_newest_extends(self):
        start = NEWEST + timedelta(minutes=5)
        assert plan(start, BOUNDS, now=NOW) == ExtendCache(start, NOW)

    def test_no_cache_fetches_fresh(self):
        start = NOW - timedelta(minutes=30)
        decision = plan(start, None, now=NOW)
        assert decision == FetchFresh(start, NOW)
        assert decision.label == "fresh data"
        assert not decision.merge_with_cache

    def test_force_fresh_bypasses_covering_cache(self):
        start = NOW - timedelta(minutes=60)
        assert plan(start, BOUNDS, force_fresh=True, now=NOW) == FetchFresh(start, NOW)

    def test_force_fresh_wins_over_force_cache(self):
        start = NOW - timedelta(minutes=60)
        assert plan(start, BOUNDS, force_fresh=True, force_cache=True, now=NOW) == FetchFresh(start, NOW)

    def test_force_cache_skips_coverage_check(self):
        start = OLDEST - timedelta(hours=3)
        assert plan(start, BOUNDS, force_cache=True, now=NOW) == UseCacheAsIs()

    def test_force_cache_without_cache_fetches(self):
        start = NOW - timedelta(minutes=5)
        assert plan(start, None, force_cache=True, now=NOW) == FetchFresh(start, NOW)

    def test_now_defaults_to_current_time(self):
        before = datetime.now(timezone.utc)
        decision = plan(before - timedelta(minutes=1), None)
        assert decision.end >= before
