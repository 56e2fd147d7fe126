"""
CloudFront Log Record
Parses tab-separated CloudFront access-log lines into LogRecord objects.
"""

import gzip
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Optional, Tuple


# CloudFront standard log format (tab-separated):
# date time x-edge-location sc-bytes c-ip cs-method cs(Host) cs-uri-stem sc-status
# cs(Referer) cs(User-Agent) cs-uri-query cs(Cookie) x-edge-result-type ...
DATE_FIELD = 0
TIME_FIELD = 1
BYTES_FIELD = 3
CLIENT_IP_FIELD = 4
METHOD_FIELD = 5
HOST_FIELD = 6
URI_STEM_FIELD = 7
STATUS_FIELD = 8
REFERRER_FIELD = 9
USER_AGENT_FIELD = 10
QUERY_FIELD = 11

MIN_FIELDS = 11

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

USER_AGENT_MAX_LENGTH = 50

# Only the escapes CloudFront commonly produces in user agents
USER_AGENT_ESCAPES = (
    ('%20', ' '),
    ('%28', '('),
    ('%29', ')'),
    ('%2C', ','),
    ('%3B', ';'),
)

GZIP_MAGIC = b'\x1f\x8b'


@dataclass(frozen=True)
class LogRecord:
    """One CloudFront access-log entry."""

    timestamp: datetime
    client_ip: str
    method: str
    uri_stem: str
    status: str
    bytes: int
    user_agent: str
    host: str
    referrer: str
    query_string: Optional[str]
    raw: str

    @property
    def key(self) -> Tuple[str, str]:
        """Verbatim (date, time) pair used for deduplication."""
        fields = self.raw.split('\t', 2)
        return fields[DATE_FIELD], fields[TIME_FIELD]


def decode_user_agent(user_agent: str) -> str:
    """Decode the common percent escapes and truncate for display."""
    for escape, char in USER_AGENT_ESCAPES:
        user_agent = user_agent.replace(escape, char)
    if len(user_agent) > USER_AGENT_MAX_LENGTH:
        user_agent = user_agent[:USER_AGENT_MAX_LENGTH - 3] + '...'
    return user_agent


def parse_timestamp(date_str: str, time_str: str) -> Optional[datetime]:
    """Parse CloudFront date and time fields into an aware UTC datetime."""
    try:
        parsed = datetime.strptime(f"{date_str} {time_str}", TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def record_key(line: str) -> Optional[Tuple[str, str]]:
    """
    Return the (date, time) dedup key of a raw line.

    Args:
        line: Raw log line

    Returns:
        Tuple of (date, time) as they appear in the line, or None for any
        line parse_log_line rejects (comment, blank or malformed)
    """
    record = parse_log_line(line)
    return record.key if record is not None else None


def parse_log_line(line: str) -> Optional[LogRecord]:
    """
    Parse a single log line and return a LogRecord.

    Malformed lines (too few fields, bad timestamp, non-numeric size) are
    dropped by returning None; this function never raises.

    Args:
        line: Raw log line string

    Returns:
        LogRecord or None if the line is a comment, blank or malformed
    """
    line = line.rstrip('\r\n')
    if not line or line.startswith('#'):
        return None

    fields = line.split('\t')
    if len(fields) < MIN_FIELDS:
        return None

    timestamp = parse_timestamp(fields[DATE_FIELD], fields[TIME_FIELD])
    if timestamp is None:
        return None

    size = fields[BYTES_FIELD]
    if size == '-':
        size = '0'
    try:
        size = int(size)
    except ValueError:
        return None

    query_string = fields[QUERY_FIELD] if len(fields) > QUERY_FIELD else None
    if query_string == '-':
        query_string = None

    return LogRecord(
        timestamp=timestamp,
        client_ip=fields[CLIENT_IP_FIELD],
        method=fields[METHOD_FIELD],
        uri_stem=fields[URI_STEM_FIELD],
        status=fields[STATUS_FIELD],
        bytes=size,
        user_agent=decode_user_agent(fields[USER_AGENT_FIELD]),
        host=fields[HOST_FIELD],
        referrer=fields[REFERRER_FIELD],
        query_string=query_string,
        raw=line,
    )


def iter_log_lines(blob: bytes) -> Iterator[str]:
    """
    Yield text lines from a raw log object, decompressing gzip data.

    Args:
        blob: Raw object bytes, gzip-compressed or plain text

    Yields:
        Lines without trailing newlines
    """
    if blob[:2] == GZIP_MAGIC:
        blob = gzip.decompress(blob)
    text = blob.decode('utf-8', errors='ignore')
    for line in text.splitlines():
        if line:
            yield line
