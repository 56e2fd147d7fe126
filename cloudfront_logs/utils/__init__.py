"""
Utility functions for configuration, dates and output
"""

from .colors import Colors
from .config_loader import load_config, get_environment, get_available_environments
from .date_utils import parse_minutes, window_start, hour_key, format_utc, to_local_time
from .formatter import format_record, header_lines

__all__ = [
    'Colors',
    'load_config',
    'get_environment',
    'get_available_environments',
    'parse_minutes',
    'window_start',
    'hour_key',
    'format_utc',
    'to_local_time',
    'format_record',
    'header_lines'
]
