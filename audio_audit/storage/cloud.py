from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from audio_audit.errors import ConfigurationError, StorageError
from .base import BaseStorage

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class CloudStorage(BaseStorage):
    """A client for S3-compatible object storage (AWS, DigitalOcean Spaces, GCS interop)."""

    def __init__(
        self,
        bucket_name: str,
        key_id: Optional[str] = None,
        access_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        region: Optional[str] = None,
        max_pool_connections: int = 10,
        client=None,
    ):
        if not bucket_name:
            raise ConfigurationError(["BUCKET_NAME is required for cloud storage"])

        self.bucket_name = bucket_name
        self.endpoint = endpoint

        if client is None:
            if not key_id or not access_key:
                raise ConfigurationError(
                    [
                        "BUCKET_KEY_ID and BUCKET_ACCESS_KEY are required for cloud storage"
                    ]
                )
            session = boto3.session.Session()
            client = session.client(
                "s3",
                region_name=region,
                endpoint_url=endpoint,
                aws_access_key_id=key_id,
                aws_secret_access_key=access_key,
                config=Config(max_pool_connections=max(1, max_pool_connections)),
            )
        self.client = client

    def _get_absolute_filename(self, path: str) -> str:
        """Constructs the absolute object URL.

        Args:
            path (str): Object key.

        Return:
            str: s3:// URL, or endpoint-based URL when a custom endpoint is set.
        """
        if self.endpoint:
            protocol, _, host = self.endpoint.partition("://")
            return f"{protocol}://{self.bucket_name}.{host}/{path}"
        return f"s3://{self.bucket_name}/{path}"

    def file_exist(self, path: str) -> bool:
        """
        Check if an object exists in the bucket with a HEAD request.

        Args:
            path (str): Object key.

        Returns:
            bool: True if the object exists, False on a 404.

        Raises:
            StorageError: For any other client or transport error.
        """
        try:
            self.client.head_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in NOT_FOUND_CODES:
                return False
            raise StorageError(self._get_absolute_filename(path), e) from e
        except BotoCoreError as e:
            raise StorageError(self._get_absolute_filename(path), e) from e
        return True
