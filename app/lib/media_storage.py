"""
Media Storage

Storage-agnostic interface for uploaded images and audio.
Provider chain: S3 (when AWS credentials are set) -> Replit Object Storage
(when running on Replit) -> local filesystem (development only).

Every provider method returns None/False on failure and logs the cause;
callers map that to a 500 response.
"""

import os
import logging
from typing import Optional

logger = logging.getLogger(__name__)


def is_safe_path(path: str) -> bool:
    """Relative 'folder/name.ext' paths only."""
    if not path or '..' in path or '\\' in path or path.startswith('/'):
        return False
    return all(part for part in path.split('/'))


class MediaStorage:
    """
    Storage abstraction for media uploads.

    Supports:
    - S3-compatible storage (primary, if AWS credentials set)
    - Replit Object Storage
    - Filesystem (development; files live under MEDIA_LOCAL_DIR)
    """

    def __init__(self, config=None):
        config = config or {}
        self._s3_client = None
        self._replit_client = None
        self.bucket = config.get('MEDIA_BUCKET', 'zuni-uploads')
        self.public_base_url = config.get('MEDIA_PUBLIC_BASE_URL')
        self.local_dir = config.get('MEDIA_LOCAL_DIR') or os.path.join(os.getcwd(), 'uploads')
        self.signed_url_expiry = config.get('SIGNED_URL_EXPIRY', 60)
        self.provider = self._detect_provider()
        logger.info(f"Media storage provider: {self.provider}")

    def _detect_provider(self) -> str:
        if os.environ.get('AWS_ACCESS_KEY_ID') and os.environ.get('AWS_SECRET_ACCESS_KEY'):
            return 's3'

        if os.environ.get('REPL_ID'):
            return 'replit'

        logger.warning("Using filesystem media storage - not suitable for production")
        return 'filesystem'

    def public_url(self, path: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        if self.provider == 's3':
            return f"https://{self.bucket}.s3.amazonaws.com/{path}"
        return f"/api/media/{path}"

    def save(self, data: bytes, path: str, content_type: str) -> Optional[str]:
        """
        Store `data` under `path`.

        Args:
            data: File bytes
            path: Relative object key, e.g. 'posts/abc_1700000000000.png'
            content_type: MIME type stored with the object

        Returns:
            Public URL of the stored object, or None if the save failed
        """
        if not is_safe_path(path):
            logger.error(f"Invalid media path rejected: {path}")
            return None

        if not data:
            logger.error("Empty media data provided")
            return None

        try:
            if self.provider == 's3':
                saved = self._save_s3(data, path, content_type)
            elif self.provider == 'replit':
                saved = self._save_replit(data, path)
            else:
                saved = self._save_filesystem(data, path)
        except Exception as e:
            logger.error(f"Failed to save media file {path}: {e}")
            return None

        return self.public_url(path) if saved else None

    def delete(self, path: str) -> bool:
        if not is_safe_path(path):
            return False
        try:
            if self.provider == 's3':
                self._get_s3_client().delete_object(Bucket=self.bucket, Key=path)
                return True
            elif self.provider == 'replit':
                self._get_replit_client().delete(path)
                return True
            filepath = os.path.join(self.local_dir, path)
            if os.path.exists(filepath):
                os.remove(filepath)
                return True
            return False
        except Exception as e:
            logger.error(f"Failed to delete media file {path}: {e}")
            return False

    def create_signed_upload_url(self, path: str, content_type: str) -> Optional[str]:
        """Presigned PUT URL for direct client uploads. S3 only."""
        if self.provider != 's3' or not is_safe_path(path):
            return None
        try:
            return self._get_s3_client().generate_presigned_url(
                'put_object',
                Params={'Bucket': self.bucket, 'Key': path, 'ContentType': content_type},
                ExpiresIn=self.signed_url_expiry,
            )
        except Exception as e:
            logger.error(f"Failed to sign upload URL for {path}: {e}")
            return None

    def _get_s3_client(self):
        if self._s3_client is None:
            import boto3
            self._s3_client = boto3.client(
                's3',
                aws_access_key_id=os.environ.get('AWS_ACCESS_KEY_ID'),
                aws_secret_access_key=os.environ.get('AWS_SECRET_ACCESS_KEY'),
                endpoint_url=os.environ.get('AWS_ENDPOINT_URL'),
                region_name=os.environ.get('AWS_REGION', 'us-east-1')
            )
        return self._s3_client

    def _get_replit_client(self):
        if self._replit_client is None:
            from replit.object_storage import Client
            self._replit_client = Client()
        return self._replit_client

    def _save_s3(self, data: bytes, path: str, content_type: str) -> bool:
        self._get_s3_client().put_object(
            Bucket=self.bucket,
            Key=path,
            Body=data,
            ContentType=content_type,
            CacheControl='max-age=31536000'
        )
        return True

    def _save_replit(self, data: bytes, path: str) -> bool:
        client = self._get_replit_client()
        if client.exists(path):
            logger.error(f"Refusing to overwrite existing object {path}")
            return False
        client.upload_from_bytes(path, data)
        return True

    def _save_filesystem(self, data: bytes, path: str) -> bool:
        filepath = os.path.join(self.local_dir, path)
        os.makedirs(os.path.dirname(filepath), exist_ok=True)
        if os.path.exists(filepath):
            logger.error(f"Refusing to overwrite existing file {filepath}")
            return False
        with open(filepath, 'wb') as f:
            f.write(data)
        return True
