"""
Merging fetched log lines into the cache
"""

from typing import Iterable, List, Tuple

from ..parse.log_record import record_key


def _keyed(lines: Iterable[str]) -> List[Tuple[Tuple[str, str], str]]:
    """Pair each line with its (date, time) key, dropping lines without one."""
    keyed = []
    for line in lines:
        line = line.rstrip('\r\n')
        key = record_key(line)
        if key is not None:
            keyed.append((key, line))
    return keyed


def merge(existing: Iterable[str], new: Iterable[str]) -> List[str]:
    """
    Merge fetched lines into cached lines.

    Both inputs are concatenated (existing first), stably sorted by the
    verbatim (date, time) key and collapsed so only the first line for each
    key survives; on a collision the already-cached line wins. Comment,
    blank and malformed lines are dropped.

    Args:
        existing: Lines already in the cache (sorted)
        new: Freshly fetched lines in any order

    Returns:
        Sorted list of lines with unique (date, time) keys
    """
    keyed = _keyed(existing) + _keyed(new)
    keyed.sort(key=lambda item: item[0])

    merged = []
    last_key = None
    for key, line in keyed:
        if key == last_key:
            continue
        merged.append(line)
        last_key = key
    return merged
