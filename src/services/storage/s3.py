"""S3-compatible object storage for photo originals, thumbnails and avatars."""
import boto3
from botocore.client import Config
from botocore.exceptions import ClientError, BotoCoreError
from typing import Optional
import logging

from src.app.config import settings
from src.app.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {'NoSuchKey', '404', 'NotFound'}


class StorageServiceError(ServiceUnavailableError):
    """Raised when the object store rejects or cannot serve a request."""
    default_detail = "Object storage unavailable"


def original_key(owner_id, album_id, upload_id) -> str:
    """<ownerId>/<albumId>/<uuid>.jpg"""
    return f"{owner_id}/{album_id}/{upload_id}.jpg"


def thumbnail_key(owner_id, album_id, upload_id) -> str:
    """<ownerId>/<albumId>/<uuid>_thumb.jpg"""
    return f"{owner_id}/{album_id}/{upload_id}_thumb.jpg"


def avatar_key(user_id) -> str:
    return f"avatars/{user_id}.jpg"


def key_belongs_to(key: str, user_id) -> bool:
    """True when ``key`` sits in the user's photo prefix or is the user's avatar."""
    return key.startswith(f"{user_id}/") or key == avatar_key(user_id)


class StorageService:
    """Thin wrapper over an S3 client: put, presign, delete."""

    def __init__(self, client=None, bucket_name: Optional[str] = None):
        """
        Initialize S3 client with configuration.

        Args:
            client: Pre-built boto3 S3 client (tests); built from settings when omitted
            bucket_name: Bucket override; defaults to S3_BUCKET_NAME
        """
        self.bucket_name = bucket_name or settings.S3_BUCKET_NAME
        if client is not None:
            self.s3_client = client
            return
        try:
            addressing = 'path' if settings.S3_ENDPOINT_URL else 'virtual'
            self.s3_client = boto3.client(
                's3',
                endpoint_url=settings.S3_ENDPOINT_URL,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.S3_REGION,
                config=Config(
                    signature_version='s3v4',
                    s3={'addressing_style': addressing}
                )
            )
            logger.info(f"Storage initialized for bucket: {self.bucket_name}")
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to initialize S3 client: {e}")
            raise StorageServiceError(f"S3 initialization failed: {str(e)}")

    def put_object(self, key: str, data: bytes, content_type: str) -> str:
        """
        Store bytes at ``key``, replacing any existing object.

        Returns:
            The key written

        Raises:
            StorageServiceError: If the upload fails
        """
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
            logger.info(f"Uploaded {len(data)} bytes to: {key}")
            return key
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading {key}: {e}")
            raise StorageServiceError(f"Failed to upload object: {str(e)}")

    def generate_presigned_url(self, key: str, expires_in: Optional[int] = None) -> str:
        """
        Generate a time-limited GET URL.

        Args:
            key: Object key
            expires_in: URL lifetime in seconds (default PRESIGNED_URL_EXPIRE_SECONDS)

        Raises:
            StorageServiceError: If URL generation fails
        """
        try:
            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket_name, 'Key': key},
                ExpiresIn=expires_in or settings.PRESIGNED_URL_EXPIRE_SECONDS,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating download URL for {key}: {e}")
            raise StorageServiceError(f"Failed to generate download URL: {str(e)}")

    def delete_object(self, key: str) -> None:
        """
        Delete object; deleting a key that does not exist succeeds.

        S3 itself returns 204 for missing keys, but some compatible backends
        answer NoSuchKey, which is treated as success here too.

        Raises:
            StorageServiceError: For any other failure
        """
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            logger.info(f"Deleted object: {key}")
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in _MISSING_KEY_CODES:
                logger.info(f"Object already absent: {key}")
                return
            logger.error(f"Error deleting {key}: {e}")
            raise StorageServiceError(f"Failed to delete object: {str(e)}")
        except BotoCoreError as e:
            logger.error(f"Error deleting {key}: {e}")
            raise StorageServiceError(f"Failed to delete object: {str(e)}")

    def ensure_bucket(self) -> bool:
        """
        Create the bucket when missing.

        Returns:
            True if the bucket was created, False if it already existed
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            return False
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') not in _MISSING_KEY_CODES | {'NoSuchBucket'}:
                raise StorageServiceError(f"Cannot access bucket: {str(e)}")

        params = {'Bucket': self.bucket_name}
        if settings.S3_REGION and settings.S3_REGION != 'us-east-1':
            params['CreateBucketConfiguration'] = {'LocationConstraint': settings.S3_REGION}
        try:
            self.s3_client.create_bucket(**params)
        except (ClientError, BotoCoreError) as e:
            raise StorageServiceError(f"Failed to create bucket: {str(e)}")
        logger.info(f"Created bucket: {self.bucket_name}")
        return True
