"""S3 storage for feed and import artifacts."""
import json
import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class ArtifactStore:
    """Stores the raw calendar feed and the import output in S3."""

    FEED_KEY = 'CalciumEvents.ics'
    IMPORT_KEY = 'IMPORT.json'

    def __init__(self, bucket_name: str):
        """
        Initialize S3 client for the artifact bucket.

        Args:
            bucket_name: Name of the S3 bucket
        """
        self.bucket_name = bucket_name
        self.s3 = boto3.client('s3')
        logger.info(f"Initialized ArtifactStore for bucket: {bucket_name}")

    def save_feed(self, text: str) -> None:
        """
        Store raw feed text.

        Args:
            text: iCalendar text as downloaded
        """
        self._put(self.FEED_KEY, text.encode('utf-8'), 'text/calendar')

    def load_feed(self) -> Optional[str]:
        """
        Load the stored raw feed.

        Returns:
            Feed text, or None if no feed has been stored yet
        """
        try:
            response = self.s3.get_object(
                Bucket=self.bucket_name,
                Key=self.FEED_KEY
            )
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('NoSuchKey', '404'):
                logger.warning(
                    f"No stored feed at s3://{self.bucket_name}/{self.FEED_KEY}"
                )
                return None
            logger.error(f"Error reading stored feed: {e}")
            raise

        return response['Body'].read().decode('utf-8')

    def save_import(self, payload: Dict[str, Any]) -> None:
        """
        Store the import output as JSON.

        Args:
            payload: JSON-serializable import document
        """
        body = json.dumps(payload).encode('utf-8')
        self._put(self.IMPORT_KEY, body, 'application/json')

    def _put(self, key: str, body: bytes, content_type: str) -> None:
        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type
            )
        except ClientError as e:
            logger.error(f"Error writing s3://{self.bucket_name}/{key}: {e}")
            raise
        logger.info(f"Wrote {len(body)} bytes to s3://{self.bucket_name}/{key}")
