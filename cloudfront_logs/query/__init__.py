"""
Query modules
"""

from .filters import parse_endpoints, build_endpoint_pattern, filter_records
from .pipeline import QueryOptions, QueryResult, run_query

__all__ = [
    'parse_endpoints',
    'build_endpoint_pattern',
    'filter_records',
    'QueryOptions',
    'QueryResult',
    'run_query'
]
