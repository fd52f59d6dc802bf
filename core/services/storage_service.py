# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles logo uploads to the public logos bucket.
# =============================================================================

import logging
import os
import uuid

from lib.supabase_client import SupabaseClient
from app.config import settings
from app.exceptions import FileTooLargeError, InvalidFileTypeError, StorageUploadError

logger = logging.getLogger(__name__)

# Extension -> content type accepted for logos
LOGO_CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


class StorageService:
    """
    Service for Supabase Storage operations.

    Logos live at {user_id}/logo-{random}.{ext} in the logos bucket.
    """

    @staticmethod
    def validate_logo(filename: str, size: int) -> str:
        """
        Check a logo's extension and size.

        Returns:
            Content type for the upload

        Raises:
            InvalidFileTypeError: Unsupported extension
            FileTooLargeError: Larger than MAX_LOGO_SIZE_MB
        """
        ext = os.path.splitext(filename or "")[1].lower()
        if ext not in LOGO_CONTENT_TYPES:
            raise InvalidFileTypeError(filename or "", sorted(LOGO_CONTENT_TYPES))

        if size > settings.max_logo_size_bytes:
            raise FileTooLargeError(size / (1024 * 1024), settings.MAX_LOGO_SIZE_MB)

        return LOGO_CONTENT_TYPES[ext]

    @staticmethod
    def upload_logo(
        user_id: str,
        file_content: bytes,
        filename: str,
    ) -> dict[str, str]:
        """
        Upload a logo and return its public URL.

        Args:
            user_id: Owner UUID (first path segment)
            file_content: File bytes
            filename: Original filename (for the extension)

        Returns:
            Dict with path and logo_url

        Raises:
            StorageUploadError: If upload fails
        """
        content_type = StorageService.validate_logo(filename, len(file_content))
        ext = os.path.splitext(filename)[1].lower()
        path = f"{user_id}/logo-{uuid.uuid4().hex[:12]}{ext}"

        client = SupabaseClient.get_client()
        bucket = client.storage.from_(settings.LOGO_BUCKET)

        try:
            bucket.upload(
                path=path,
                file=file_content,
                file_options={"content-type": content_type, "upsert": "true"},
            )
            logger.info(f"Uploaded logo to storage: {path}")
        except Exception as e:
            logger.error(f"Logo upload failed: {e}")
            raise StorageUploadError(str(e))

        return {"path": path, "logo_url": bucket.get_public_url(path)}

    @staticmethod
    def delete_file(storage_path: str) -> bool:
        """
        Delete a file from the logos bucket.

        Returns:
            True if deleted successfully
        """
        client = SupabaseClient.get_client()

        try:
            client.storage.from_(settings.LOGO_BUCKET).remove([storage_path])
            logger.info(f"Deleted file from storage: {storage_path}")
            return True

        except Exception as e:
            logger.error(f"Failed to delete file: {e}")
            return False
