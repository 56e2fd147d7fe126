import gzip
import threading
from datetime import datetime, timezone

import pytest

from cloudfront_logs.cache.store import CacheStore
from cloudfront_logs.sync.base import BaseFetcher, hour_key_of

NOW = datetime(2025, 9, 14, 12, 0, 0, tzinfo=timezone.utc)


def make_line(date="2025-09-14", time="11:30:00", ip="1.1.1.1", method="GET",
              uri="/api/users", status="200", size="512",
              ua="Mozilla/5.0%20(X11;%20Linux%20x86_64)", query="-"):
    """Build a tab-separated CloudFront log line."""
    fields = [
        date, time, "IAD89-C1", size, ip, method, "d111111abcdef8.cloudfront.net",
        uri, status, "-", ua, query, "-", "Miss", "req-id==", "example.com",
        "https", "230", "0.012",
    ]
    return "\t".join(fields)


def object_name(hour_key, suffix="a1b2c3d4"):
    return f"cloudfront/prod/E2LUCT8WBU2LSL.{hour_key}.{suffix}.gz"


class FakeFetcher(BaseFetcher):
    """In-memory log source: object name -> list of lines."""

    def __init__(self, objects=None, failing=()):
        self.objects = dict(objects or {})
        self.failing = set(failing)
        self.listed = []
        self.fetched = []

    def list_objects(self, since_hour_key):
        self.listed.append(since_hour_key)
        return sorted(name for name in self.objects
                      if (hour_key_of(name) or "") >= since_hour_key)

    def fetch(self, object_id):
        self.fetched.append(object_id)
        if object_id in self.failing:
            raise IOError(f"download failed: {object_id}")
        text = "\n".join(self.objects[object_id]) + "\n"
        return gzip.compress(text.encode("utf-8"))


class SlowFirstFetcher(FakeFetcher):
    """Holds the first listed object back until every other object has finished."""

    def __init__(self, objects=None, failing=()):
        super().__init__(objects, failing)
        self.slow = min(self.objects)
        self.release = threading.Event()
        self.completed = []
        self.lock = threading.Lock()

    def fetch(self, object_id):
        if object_id == self.slow:
            assert self.release.wait(timeout=5)
        blob = super().fetch(object_id)
        with self.lock:
            self.completed.append(object_id)
            if len(self.completed) == len(self.objects) - 1:
                self.release.set()
        return blob


@pytest.fixture
def store(tmp_path):
    return CacheStore.for_environment(tmp_path, "prod")


@pytest.fixture
def now():
    return NOW
