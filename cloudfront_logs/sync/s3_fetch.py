"""
S3-specific fetcher implementation
"""

from typing import Dict, List, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .base import BaseFetcher, FetchError, hour_key_of


def parse_s3_uri(s3_uri: str) -> Tuple[str, str]:
    """Parse S3 URI (or bare bucket/path) into bucket name and path."""
    s3_uri = s3_uri.replace("s3://", "")
    parts = s3_uri.split("/", 1)
    bucket_name = parts[0]
    bucket_path = parts[1] if len(parts) > 1 else ""
    if bucket_path and not bucket_path.endswith("/"):
        bucket_path += "/"
    return bucket_name, bucket_path


class S3Fetcher(BaseFetcher):
    """Fetches CloudFront log objects from an S3 bucket."""

    def __init__(self, bucket: str, path: str = "", profile: Optional[str] = None,
                 client=None):
        """
        Initialize fetcher.

        Args:
            bucket: Bucket name or s3:// URI
            path: Key prefix the distribution writes logs under
            profile: Optional AWS named profile
            client: Pre-built S3 client (created lazily when omitted)
        """
        self.bucket_name, uri_path = parse_s3_uri(bucket)
        path = path.strip("/")
        self.bucket_path = f"{path}/" if path else uri_path
        self.profile = profile
        self.s3_client = client

    def _create_s3_client(self):
        """Create S3 client with optional profile."""
        if self.profile:
            session = boto3.Session(profile_name=self.profile)
            return session.client('s3')
        else:
            return boto3.client('s3')

    def _client(self):
        if self.s3_client is None:
            self.s3_client = self._create_s3_client()
        return self.s3_client

    def list_objects(self, since_hour_key: str) -> List[str]:
        """List log objects under the path whose hour key is >= since_hour_key."""
        keys = []
        try:
            paginator = self._client().get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=self.bucket_path):
                for obj in page.get('Contents', []):
                    key = obj['Key']
                    hour_key = hour_key_of(key)
                    if hour_key is not None and hour_key >= since_hour_key:
                        keys.append(key)
        except (ClientError, BotoCoreError) as e:
            raise FetchError(f"Error listing s3://{self.bucket_name}/{self.bucket_path}: {e}") from e

        return sorted(keys)

    def fetch(self, object_id: str) -> bytes:
        """Download one object's raw bytes."""
        response = self._client().get_object(Bucket=self.bucket_name, Key=object_id)
        return response['Body'].read()


def create_fetcher(env_config: Dict, client=None) -> S3Fetcher:
    """
    Create a fetcher for an environment's configuration.

    Args:
        env_config: Environment dict with s3_bucket, s3_path and optional credentials
        client: Optional pre-built S3 client

    Returns:
        S3Fetcher instance
    """
    source_type = env_config.get('type', 's3').lower()

    if source_type == 's3':
        return S3Fetcher(
            env_config['s3_bucket'],
            env_config.get('s3_path', ''),
            profile=(env_config.get('credentials') or {}).get('profile'),
            client=client,
        )
    else:
        raise ValueError(f"Unsupported source type: {source_type}")
