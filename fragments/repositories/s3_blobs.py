"""
S3 blob store
Fragment payloads kept as objects keyed "<owner_id>/<fragment_id>"
"""

from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from common.logging_config import get_logger
from fragments.exceptions import BackendError
from fragments.repositories.base import BlobStore

logger = get_logger(__name__)

MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class S3BlobStore(BlobStore):
    """S3-compatible object storage for fragment data"""

    def __init__(
        self,
        bucket_name: str,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client=None,
    ):
        """
        Initialize the S3 blob store

        Args:
            bucket_name: Bucket holding fragment data
            region_name: AWS region
            endpoint_url: Alternate endpoint (e.g. a local S3 emulator)
            client: Pre-built boto3 S3 client
        """
        self.bucket_name = bucket_name

        if client is None:
            client = boto3.client(
                "s3",
                region_name=region_name,
                endpoint_url=endpoint_url,
                config=Config(
                    signature_version="s3v4",
                    retries={"max_attempts": 3, "mode": "standard"},
                ),
            )
        self.client = client

        logger.info(f"S3 blob store initialized for bucket: {bucket_name}")

    @staticmethod
    def object_key(owner_id: str, fragment_id: str) -> str:
        return f"{owner_id}/{fragment_id}"

    def put(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        key = self.object_key(owner_id, fragment_id)
        try:
            self.client.put_object(Bucket=self.bucket_name, Key=key, Body=bytes(data))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading fragment data to S3 [bucket={self.bucket_name}] [key={key}]: {e}")
            raise BackendError(
                "unable to upload fragment data",
                operation="put_data",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e

    def get(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        key = self.object_key(owner_id, fragment_id)
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in MISSING_KEY_CODES:
                return None
            logger.error(f"Error reading fragment data from S3 [bucket={self.bucket_name}] [key={key}]: {e}")
            raise BackendError(
                "unable to read fragment data",
                operation="get_data",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e
        except BotoCoreError as e:
            logger.error(f"Error reading fragment data from S3 [bucket={self.bucket_name}] [key={key}]: {e}")
            raise BackendError(
                "unable to read fragment data",
                operation="get_data",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e

    def delete(self, owner_id: str, fragment_id: str) -> None:
        key = self.object_key(owner_id, fragment_id)
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error deleting fragment data from S3 [bucket={self.bucket_name}] [key={key}]: {e}")
            raise BackendError(
                "unable to delete fragment data",
                operation="delete_data",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e
