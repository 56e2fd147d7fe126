"""Tests for cloudfront_logs/query/pipeline.py"""

from datetime import timedelta

import pytest

from cloudfront_logs.cache.planner import ExtendCache, FetchFresh, UseCacheAsIs
from cloudfront_logs.cache.store import CacheError
from cloudfront_logs.parse.log_record import record_key
from cloudfront_logs.query.pipeline import QueryOptions, run_query
from tests.conftest import FakeFetcher, SlowFirstFetcher, make_line, object_name


def options(**kwargs):
    defaults = {'endpoints': ["/api"], 'minutes': 60}
    defaults.update(kwargs)
    return QueryOptions(**defaults)


def times(records):
    return [r.key[1] for r in records]


class TestFreshFetch:
    def test_no_cache_fetches_window(self, store, now):
        fetcher = FakeFetcher({
            object_name("2025-09-14-10"): [make_line(time="10:59:00")],
            object_name("2025-09-14-11"): ["#Version: 1.0", make_line(time="11:40:00"),
                                           make_line(time="11:10:00"), make_line(time="11:20:00", uri="/auth")],
        })
        result = run_query(options(), store, fetcher, now=now)

        assert fetcher.listed == ["2025-09-14-11"]
        assert isinstance(result.decision, FetchFresh)
        assert result.cache_mode == "fresh data"
        assert result.objects_found == 1
        assert times(result.records) == ["11:10:00", "11:40:00"]
        assert store.load() == [make_line(time="11:10:00"), make_line(time="11:20:00", uri="/auth"),
                                make_line(time="11:40:00")]

    def test_objects_before_cutoff_hour_are_not_listed(self, store, now):
        fetcher = FakeFetcher({object_name("2025-09-14-10"): [make_line(time="10:50:00")]})
        result = run_query(options(minutes=30), store, fetcher, now=now)
        assert fetcher.listed == ["2025-09-14-11"]
        assert result.objects_found == 0

    def test_no_objects_is_empty_result(self, store, now):
        result = run_query(options(), store, FakeFetcher(), now=now)
        assert result.records == []
        assert result.fetch is None
        assert not store.exists()

    def test_failed_object_does_not_abort(self, store, now):
        bad = object_name("2025-09-14-11", "bad")
        good = object_name("2025-09-14-11", "good")
        fetcher = FakeFetcher({bad: [make_line(time="11:01:00")], good: [make_line(time="11:02:00")]},
                              failing=[bad])
        result = run_query(options(), store, fetcher, now=now)
        assert times(result.records) == ["11:02:00"]
        assert result.fetch.failed == 1

    def test_all_objects_failing_keeps_cache(self, store, now):
        store.write([make_line(time="11:30:00")])
        bad = object_name("2025-09-14-11", "bad")
        fetcher = FakeFetcher({bad: [make_line(time="11:01:00")]}, failing=[bad])
        run_query(options(force_fresh=True), store, fetcher, now=now)
        assert store.load() == [make_line(time="11:30:00")]

    def test_force_fresh_ignores_covering_cache(self, store, now):
        store.write([make_line(time="10:30:00"), make_line(time="11:30:00", uri="/api/old"),
                     make_line(time="11:55:00")])
        fetcher = FakeFetcher({object_name("2025-09-14-11"): [make_line(time="11:30:00", uri="/api/new")]})
        result = run_query(options(force_fresh=True), store, fetcher, now=now)

        assert result.decision == FetchFresh(now - timedelta(minutes=60), now)
        assert fetcher.listed == ["2025-09-14-11"]
        assert [r.uri_stem for r in result.records] == ["/api/new"]
        assert store.load() == [make_line(time="11:30:00", uri="/api/new")]

    def test_fresh_records_are_sorted(self, store, now):
        fetcher = FakeFetcher({
            object_name("2025-09-14-11", "a"): [make_line(time="11:50:00")],
            object_name("2025-09-14-11", "b"): [make_line(time="11:05:00")],
        })
        result = run_query(options(), store, fetcher, now=now)
        assert times(result.records) == ["11:05:00", "11:50:00"]


    def test_fresh_records_are_deduplicated(self, store, now):
        fetcher = FakeFetcher({
            object_name("2025-09-14-11", "a"): [make_line(time="11:10:00", uri="/api/first")],
            object_name("2025-09-14-11", "b"): [make_line(time="11:10:00", uri="/api/second"),
                                                make_line(time="11:20:00")],
        })
        result = run_query(options(force_fresh=True), store, fetcher, now=now)
        assert [r.uri_stem for r in result.records] == ["/api/first", "/api/users"]
        assert [r.raw for r in result.records] == store.load()

    def test_slow_download_does_not_reorder_output(self, store, now):
        fetcher = SlowFirstFetcher({
            object_name("2025-09-14-11", "a"): [make_line(time="11:50:00"), make_line(time="11:40:00")],
            object_name("2025-09-14-11", "b"): [make_line(time="11:05:00")],
            object_name("2025-09-14-11", "c"): [make_line(time="11:25:00")],
        })
        result = run_query(options(), store, fetcher, now=now, max_workers=3)
        assert fetcher.completed[-1] == fetcher.slow
        assert times(result.records) == ["11:05:00", "11:25:00", "11:40:00", "11:50:00"]

class TestCachedQuery:
    def test_covering_cache_is_used_as_is(self, store, now):
        store.write([make_line(time="10:30:00"), make_line(time="11:15:00"),
                     make_line(time="11:45:00", uri="/auth/login")])
        fetcher = FakeFetcher({object_name("2025-09-14-11"): [make_line(time="11:20:00")]})
        result = run_query(options(), store, fetcher, now=now)

        assert result.decision == UseCacheAsIs()
        assert result.cache_mode == "cached"
        assert fetcher.listed == []
        assert times(result.records) == ["11:15:00"]

    def test_use_cache_flag_skips_coverage_check(self, store, now):
        store.write([make_line(time="11:45:00")])
        fetcher = FakeFetcher({object_name("2025-09-14-11"): [make_line(time="11:20:00")]})
        result = run_query(options(use_cache=True), store, fetcher, now=now)
        assert result.decision == UseCacheAsIs()
        assert fetcher.listed == []
        assert times(result.records) == ["11:45:00"]

    def test_partial_cache_is_extended(self, store, now):
        store.write([make_line(time="11:30:00", uri="/api/cached"), make_line(time="11:45:00")])
        fetcher = FakeFetcher({
            object_name("2025-09-14-11"): [make_line(time="11:55:00"), make_line(time="11:05:00"),
                                           make_line(time="11:30:00", uri="/api/fetched")],
        })
        result = run_query(options(), store, fetcher, now=now)

        assert isinstance(result.decision, ExtendCache)
        assert result.cache_mode == "smart cache"
        assert [r.uri_stem for r in result.records] == ["/api/users", "/api/cached", "/api/users", "/api/users"]
        assert times(result.records) == ["11:05:00", "11:30:00", "11:45:00", "11:55:00"]

        cached = store.load()
        assert [record_key(line)[1] for line in cached] == ["11:05:00", "11:30:00", "11:45:00", "11:55:00"]
        assert store.bounds().oldest <= result.records[0].timestamp

    def test_second_run_is_served_from_cache(self, store, now):
        fetcher = FakeFetcher({object_name("2025-09-14-11"): [make_line(time="11:00:30"), make_line(time="11:59:00")]})
        run_query(options(), store, fetcher, now=now)
        fetcher.listed.clear()

        result = run_query(options(minutes=30), store, fetcher, now=now)
        assert result.decision == UseCacheAsIs()
        assert fetcher.listed == []
        assert times(result.records) == ["11:59:00"]

    def test_ip_trace(self, store, now):
        store.write([make_line(time="10:30:00"), make_line(time="11:10:00", ip="1.1.1.1"),
                     make_line(time="11:20:00", ip="2.2.2.2"), make_line(time="11:30:00", ip="1.1.1.1")])
        result = run_query(options(ip="1.1.1.1"), store, FakeFetcher(), now=now)
        assert times(result.records) == ["11:10:00", "11:30:00"]

    def test_corrupt_cache_is_an_error(self, store, now):
        store.path.write_bytes(b"\xff\xfe broken\n")
        with pytest.raises(CacheError):
            run_query(options(), store, FakeFetcher(), now=now)

    def test_malformed_cache_line_does_not_hide_fetched_record(self, store, now):
        store.write(["2025-09-14\t11:30:00\tjunk", make_line(time="11:45:00")])
        fetcher = FakeFetcher({object_name("2025-09-14-11"): [make_line(time="11:30:00", uri="/api/real")]})
        result = run_query(options(), store, fetcher, now=now)

        assert isinstance(result.decision, ExtendCache)
        assert [r.uri_stem for r in result.records] == ["/api/real", "/api/users"]
        assert store.load() == [make_line(time="11:30:00", uri="/api/real"), make_line(time="11:45:00")]

    def test_bad_size_line_does_not_set_bounds(self, store, now):
        store.write([make_line(time="09:00:00", size="lots"), make_line(time="11:50:00")])
        fetcher = FakeFetcher({object_name("2025-09-14-11"): [make_line(time="11:10:00")]})
        result = run_query(options(), store, fetcher, now=now)

        assert isinstance(result.decision, ExtendCache)
        assert times(result.records) == ["11:10:00", "11:50:00"]
        assert store.bounds().oldest == now.replace(hour=11, minute=10)
