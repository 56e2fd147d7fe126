"""
On-disk cache of raw CloudFront log lines, one file per environment
"""

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from ..parse.log_record import parse_timestamp, record_key

DEFAULT_TOOL_NAME = "cloudfront_logs"


class CacheError(Exception):
    """Raised when an existing cache file cannot be read or written."""


@dataclass(frozen=True)
class CacheBounds:
    """Oldest and newest record instants held by a cache."""

    oldest: datetime
    newest: datetime


class CacheStore:
    """Sorted, deduplicated raw log lines persisted in a single text file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @classmethod
    def for_environment(cls, cache_dir, env: str,
                        tool_name: str = DEFAULT_TOOL_NAME) -> 'CacheStore':
        """Build the store for an environment (<tool>_<env>_cache.log)."""
        return cls(Path(cache_dir) / f"{tool_name}_{env}_cache.log")

    def exists(self) -> bool:
        return self.path.is_file()

    def is_empty(self) -> bool:
        """True when the cache file is missing or has zero size."""
        if not self.exists():
            return True
        try:
            return self.path.stat().st_size == 0
        except OSError as e:
            raise CacheError(f"Cannot stat cache file {self.path}: {e}") from e

    def load(self) -> List[str]:
        """
        Read all cached lines.

        Returns:
            Raw lines without trailing newlines; empty list if the file is missing

        Raises:
            CacheError: if the file exists but cannot be read or decoded
        """
        if not self.exists():
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return [line.rstrip('\r\n') for line in f if line.strip()]
        except (OSError, UnicodeDecodeError) as e:
            raise CacheError(f"Cannot read cache file {self.path}: {e}") from e

    def bounds(self, lines: Optional[List[str]] = None) -> Optional[CacheBounds]:
        """
        Compute the oldest and newest instants from the first and last valid lines.

        Args:
            lines: Already loaded cache lines (loads from disk when omitted)

        Returns:
            CacheBounds, or None when the cache holds no valid record
        """
        if lines is None:
            if self.is_empty():
                return None
            lines = self.load()

        first = next((k for k in map(record_key, lines) if k), None)
        last = next((k for k in map(record_key, reversed(lines)) if k), None)
        if first is None or last is None:
            return None
        return CacheBounds(oldest=parse_timestamp(*first), newest=parse_timestamp(*last))

    def write(self, lines: Iterable[str]) -> int:
        """
        Replace the cache contents.

        The new content is written to a temporary file in the same directory
        and renamed over the cache, so a crash never leaves a partial file.

        Returns:
            Number of lines written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        count = 0
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                for line in lines:
                    f.write(line)
                    f.write('\n')
                    count += 1
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise CacheError(f"Cannot write cache file {self.path}: {e}") from e
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
        return count

    def clear(self) -> bool:
        """Delete the cache file. Returns True if a file was removed."""
        if not self.exists():
            return False
        self.path.unlink()
        return True

    def size(self) -> int:
        """Size of the cache file in bytes (0 if missing)."""
        return self.path.stat().st_size if self.exists() else 0
