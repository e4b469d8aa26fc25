"""
S3Client - Fetches remote artwork archives from S3/MinIO.
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple
from urllib.parse import urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from retrying import retry

from .errors import NotFoundError
from .s3_config import S3Config


MISSING_CODES = ('404', 'NoSuchKey', 'NoSuchBucket')


def _is_transient(exc: Exception) -> bool:
    """Retry client errors except the ones meaning the object is not there."""
    if isinstance(exc, ClientError):
        return exc.response.get('Error', {}).get('Code') not in MISSING_CODES
    return False


class S3Client:
    """
    Wrapper for the S3 operations needed to stage remote archives locally.
    """

    def __init__(self, config: S3Config, logger: Optional[logging.Logger] = None):
        """
        Create the boto3 client for ``config``.

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'}
            ),
            verify=config.verify_ssl
        )

    @property
    def client(self):
        """The wrapped boto3 S3 client."""
        return self._client

    def parse_locator(self, locator: str) -> Tuple[str, str]:
        """
        Split an ``s3://bucket/key`` locator into (bucket, key).

        A locator without a bucket (``s3:///key``) uses the configured
        bucket and prefix.
        """
        parsed = urlparse(locator)
        key = parsed.path.lstrip('/')
        bucket = parsed.netloc
        if not bucket:
            bucket = self.config.bucket
            if self.config.prefix:
                key = f"{self.config.prefix.strip('/')}/{key}"
        if not bucket or not key:
            raise NotFoundError(f"Cannot determine bucket and key from [ {locator} ]")
        return bucket, key

    def object_exists(self, bucket: str, key: str) -> bool:
        """True if ``bucket/key`` exists; a missing object is not an error."""
        try:
            self._client.head_object(Bucket=bucket, Key=key)
            return True
        except ClientError as e:
            if e.response['Error']['Code'] in MISSING_CODES:
                return False
            raise

    @retry(retry_on_exception=_is_transient, stop_max_attempt_number=3, wait_exponential_multiplier=1000)
    def download_to_file(self, bucket: str, key: str, path: str) -> None:
        """Download an object to a local file."""
        try:
            self._client.download_file(bucket, key, path)
        except ClientError as e:
            if e.response['Error']['Code'] in MISSING_CODES:
                raise NotFoundError(f"Missing object: s3://{bucket}/{key}") from e
            raise

    @contextmanager
    def staged_file(self, locator: str) -> Iterator[str]:
        """
        Yield a temporary local copy of the object named by ``locator``.
        The file is deleted on exit.
        """
        bucket, key = self.parse_locator(locator)
        _, ext = os.path.splitext(key)
        fd, tmp_path = tempfile.mkstemp(prefix='artwork_', suffix=ext)
        os.close(fd)
        try:
            self.logger.info(f"Downloading [ s3://{bucket}/{key} ] to [ {tmp_path} ]")
            self.download_to_file(bucket, key, tmp_path)
            yield tmp_path
        finally:
            self.remove_tempfile(tmp_path)

    def remove_tempfile(self, tmp_path: str) -> None:
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError as e:
                self.logger.warning(f"Could not delete {tmp_path}: {e}")
