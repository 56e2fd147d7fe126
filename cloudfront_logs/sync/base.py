"""
Base fetcher class/interface
"""

import re
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from ..parse.log_record import iter_log_lines

# CloudFront object names embed the hour: E2LUCT8WBU2LSL.2025-09-14-00.651a4e58.gz
HOUR_KEY_PATTERN = re.compile(r'(\d{4}-\d{2}-\d{2}-\d{2})')

DEFAULT_MAX_WORKERS = 4


class FetchError(Exception):
    """Raised when the log source cannot be listed or reached."""


@dataclass
class FetchResult:
    """Outcome of fetching a batch of log objects."""

    lines: List[str] = field(default_factory=list)
    downloaded: int = 0
    failed: int = 0
    total: int = 0
    errors: Dict[str, str] = field(default_factory=dict)


def hour_key_of(object_id: str) -> Optional[str]:
    """Extract the YYYY-MM-DD-HH key embedded in an object name."""
    name = object_id.rsplit('/', 1)[-1]
    match = HOUR_KEY_PATTERN.search(name)
    return match.group(1) if match else None


class BaseFetcher(ABC):
    """Base class for retrieving raw log objects."""

    @abstractmethod
    def list_objects(self, since_hour_key: str) -> List[str]:
        """
        List log objects whose embedded hour key is >= since_hour_key.

        Args:
            since_hour_key: Cutoff in YYYY-MM-DD-HH format

        Returns:
            Object identifiers sorted by name

        Raises:
            FetchError: if the source cannot be listed
        """
        pass

    @abstractmethod
    def fetch(self, object_id: str) -> bytes:
        """
        Download one raw log object.

        Returns:
            Raw bytes (possibly gzip-compressed)
        """
        pass

    def _fetch_lines(self, object_id: str) -> List[str]:
        return list(iter_log_lines(self.fetch(object_id)))

    def fetch_all(self, object_ids: Sequence[str], max_workers: int = DEFAULT_MAX_WORKERS,
                  on_progress: Optional[Callable[[int, int], None]] = None) -> FetchResult:
        """
        Download and decompress objects concurrently.

        A failing object contributes no lines and is counted in
        ``failed``; it never aborts the batch. Lines are returned grouped
        in object_ids order regardless of completion order.

        Args:
            object_ids: Objects to fetch
            max_workers: Number of concurrent workers
            on_progress: Called with (completed, total) after each object

        Returns:
            FetchResult
        """
        result = FetchResult(total=len(object_ids))
        if not object_ids:
            return result

        per_object: Dict[str, List[str]] = {}
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            future_to_id = {
                executor.submit(self._fetch_lines, object_id): object_id
                for object_id in object_ids
            }

            completed = 0
            for future in as_completed(future_to_id):
                completed += 1
                object_id = future_to_id[future]
                try:
                    per_object[object_id] = future.result()
                    result.downloaded += 1
                except Exception as e:
                    result.failed += 1
                    result.errors[object_id] = str(e)
                if on_progress:
                    on_progress(completed, result.total)

        for object_id in object_ids:
            result.lines.extend(per_object.get(object_id, []))
        return result
