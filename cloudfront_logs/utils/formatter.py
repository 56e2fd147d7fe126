"""
Terminal rendering of query results
"""

import re
from typing import List

from ..parse.log_record import LogRecord
from .colors import Colors
from .date_utils import local_timezone_name, to_local_time

PRIVATE_IP_PATTERN = re.compile(r'^192\.168\.|^10\.|^172\.(1[6-9]|2[0-9]|3[01])\.')

SEPARATOR = "-" * 104


def _paint(text: str, code: str, color: bool) -> str:
    return f"{code}{text}{Colors.NC}" if color else text


def color_status(status: str, color: bool = True) -> str:
    """Color a status code: 2xx success green, 304 blue, 401/403 yellow, other errors red."""
    if not color:
        return status
    if status in ('200', '201', '204'):
        return f"{Colors.GREEN}{Colors.BOLD}{status}{Colors.NC}"
    if status == '304':
        return _paint(status, Colors.BLUE, color)
    if status in ('401', '403'):
        return _paint(status, Colors.YELLOW, color)
    if status.isdigit() and int(status) >= 400:
        return f"{Colors.RED}{Colors.BOLD}{status}{Colors.NC}"
    return status


def is_private_ip(ip: str) -> bool:
    return bool(PRIVATE_IP_PATTERN.match(ip))


def color_ip(ip: str, color: bool = True) -> str:
    """Pad an IP to 15 columns; private ranges yellow, public salmon."""
    padded = f"{ip:<15}"
    return _paint(padded, Colors.YELLOW if is_private_ip(ip) else Colors.SALMON, color)


def format_record(record: LogRecord, tz=None, color: bool = True) -> str:
    """
    Render one record as an output row.

    Args:
        record: Parsed log record
        tz: Timezone for the time column (default: local timezone)
        color: Emit ANSI colors

    Returns:
        local_time | client_ip | status | method | bytes | endpoint | user_agent
    """
    return " | ".join([
        f"{to_local_time(record.timestamp, tz):<8}",
        color_ip(record.client_ip, color),
        color_status(record.status, color),
        _paint(record.method, Colors.PURPLE, color),
        f"{record.bytes:<8}",
        _paint(record.uri_stem, Colors.CYAN, color),
        _paint(record.user_agent, Colors.BRIGHT_GREEN, color),
    ])


def header_lines(tz=None, color: bool = True) -> List[str]:
    """Column legend and table header printed before the rows."""
    tz_name = local_timezone_name(tz)
    legend = [
        f"• {_paint(tz_name + ' Time', Colors.RED, color)}: Local timestamp",
        f"• {_paint('Client_IP', Colors.BRIGHT_RED, color)}: Real client IP address",
        f"• {_paint('Status', Colors.GREEN, color)}: HTTP response status code",
        f"• {_paint('Method', Colors.PURPLE, color)}: HTTP request method",
        f"• {_paint('Bytes', Colors.YELLOW, color)}: Response size in bytes",
        f"• {_paint('Endpoint', Colors.CYAN, color)}: API endpoint path",
        f"• {_paint('User_Agent', Colors.BRIGHT_GREEN, color)}: Browser info (truncated)",
        "Status Colors: " + " ".join([
            color_status('200', color) + "/" + color_status('201', color) + "/" + color_status('204', color),
            color_status('304', color),
            color_status('401', color) + "/" + color_status('403', color),
            _paint("4xx/5xx", Colors.RED + Colors.BOLD, color),
        ]),
    ]
    header = " | ".join([
        _paint(f"{tz_name} Time", Colors.RED, color),
        _paint(f"{'Client_IP':<15}", Colors.BRIGHT_RED, color),
        _paint("Status", Colors.GREEN, color),
        _paint("Method", Colors.PURPLE, color),
        _paint(f"{'Bytes':<8}", Colors.YELLOW, color),
        _paint("Endpoint", Colors.CYAN, color),
        _paint("User_Agent", Colors.BRIGHT_GREEN, color),
    ])
    return legend + [header, SEPARATOR]
