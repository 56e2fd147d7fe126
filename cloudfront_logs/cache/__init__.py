"""
Local cache modules
"""

from .store import CacheStore, CacheBounds, CacheError
from .planner import CoverageDecision, UseCacheAsIs, ExtendCache, FetchFresh, plan
from .merger import merge

__all__ = [
    'CacheStore',
    'CacheBounds',
    'CacheError',
    'CoverageDecision',
    'UseCacheAsIs',
    'ExtendCache',
    'FetchFresh',
    'plan',
    'merge'
]
