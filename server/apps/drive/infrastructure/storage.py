"""Custom storage backend for S3-compatible object storage."""

import logging
from typing import Any, final, override

from django.core.files.base import ContentFile
from storages.backends.s3 import S3Storage

from server.apps.drive.infrastructure.naming import build_object_key

logger = logging.getLogger(__name__)


@final
class FileStorage(S3Storage):
    """S3 storage backend holding drive file contents.

    The tree only ever keeps the key returned by ``put_object``; blob
    contents are never inspected. Extends django-storages S3Storage with:
    - Owner-prefixed unique keys for uploads
    - Transaction rollback support for failed DB operations
    - Signed download URLs with explicit expiry
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file to S3 with error handling and logging.

        Args:
            name: Storage key for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the key.

        Returns:
            Actual key used (may differ from name if conflicts).
        """
        try:
            logger.info('Uploading object to storage: %s', name)
            saved_name = super().save(name, content, max_length)
        except Exception:
            logger.exception('Failed to upload object to storage: %s', name)
            raise
        else:
            logger.info('Successfully uploaded object: %s', saved_name)
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete object from S3 with error handling and logging.

        Args:
            name: Storage key of the object to delete.
        """
        try:
            logger.info('Deleting object from storage: %s', name)
            super().delete(name)
        except Exception:
            logger.exception('Failed to delete object from storage: %s', name)
            raise
        logger.info('Successfully deleted object: %s', name)

    def put_object(
        self,
        content: bytes,
        name: str,
        mime_type: str,
        owner_id: int,
    ) -> str:
        """Store file bytes under a fresh owner-prefixed key.

        Args:
            content: Raw file bytes.
            name: Original filename (only used to build the key).
            mime_type: Content type sent to the object store.
            owner_id: Owner's user ID.

        Returns:
            Key under which the content was stored.
        """
        content_file = ContentFile(content)
        # S3Storage picks this up as the object's ContentType
        content_file.content_type = mime_type  # type: ignore[attr-defined]
        return self.save(build_object_key(owner_id, name), content_file)

    def signed_url(self, key: str, expires_in: int) -> str:
        """Generate a time-limited download URL.

        Args:
            key: Storage key of the object.
            expires_in: Validity in seconds.

        Returns:
            Presigned URL.
        """
        return self.url(key, expire=expires_in)

    def rollback_upload(self, name: str) -> None:
        """Delete uploaded object for DB transaction rollback.

        Called when the database record could not be created after the
        content was uploaded. Best effort: failures are logged, not raised.

        Args:
            name: Storage key of the object to delete.
        """
        try:
            logger.warning('Rolling back upload, deleting object: %s', name)
            self.delete(name)
        except Exception:
            # The object stays in storage without a database record
            logger.exception(
                'Failed to rollback upload, orphaned object: %s',
                name,
            )
