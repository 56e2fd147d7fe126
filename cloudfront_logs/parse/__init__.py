"""
Log parsing modules
"""

from .log_record import LogRecord, parse_log_line, record_key, decode_user_agent, iter_log_lines

__all__ = ['LogRecord', 'parse_log_line', 'record_key', 'decode_user_agent', 'iter_log_lines']
