"""
Log fetching modules
"""

from .base import BaseFetcher, FetchError, FetchResult, hour_key_of
from .s3_fetch import S3Fetcher, create_fetcher, parse_s3_uri

__all__ = [
    'BaseFetcher',
    'FetchError',
    'FetchResult',
    'hour_key_of',
    'S3Fetcher',
    'create_fetcher',
    'parse_s3_uri'
]
