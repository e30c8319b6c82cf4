"""Photo and avatar ingest: process, store objects, persist the record."""
import logging
import os
import uuid
from typing import Optional
from uuid import UUID

from src.schemas.upload import UploadResult
from src.services.clients.services import AuthClient, PhotosClient
from src.services.image.processor import ImageProcessor
from src.services.storage.s3 import StorageService, avatar_key, original_key, thumbnail_key

logger = logging.getLogger(__name__)

THUMBNAIL_CONTENT_TYPE = "image/jpeg"
UNTITLED = "Untitled"


def title_from_filename(filename: Optional[str]) -> str:
    """Photo title derived from the uploaded file name, without extension."""
    if not filename:
        return UNTITLED
    stem, _ = os.path.splitext(os.path.basename(filename))
    return stem.strip()[:255] or UNTITLED


class UploadOrchestrator:
    """
    Drives one upload end to end.

    The photo record is created through the photos service after both
    objects are stored. When a later step fails, the objects already
    written are logged as orphans and a best-effort delete is attempted
    before the original error propagates.
    """

    def __init__(
        self,
        storage: StorageService,
        processor: ImageProcessor,
        photos_client: PhotosClient,
        auth_client: Optional[AuthClient] = None,
    ):
        self.storage = storage
        self.processor = processor
        self.photos_client = photos_client
        self.auth_client = auth_client

    def ingest_photo(
        self,
        owner_id: UUID,
        owner_email: str,
        album_id: UUID,
        data: bytes,
        filename: Optional[str] = None,
    ) -> UploadResult:
        upload_id = uuid.uuid4()
        processed = self.processor.process(data)
        metadata = processed.metadata

        file_key = original_key(owner_id, album_id, upload_id)
        thumb_key = thumbnail_key(owner_id, album_id, upload_id)
        written: list[str] = []

        try:
            self.storage.put_object(file_key, processed.original, metadata.mime_type)
            written.append(file_key)
            self.storage.put_object(thumb_key, processed.thumbnail, THUMBNAIL_CONTENT_TYPE)
            written.append(thumb_key)

            photo = self.photos_client.create_photo(
                {
                    "id": str(upload_id),
                    "album_id": str(album_id),
                    "title": title_from_filename(filename),
                    "file_key": file_key,
                    "thumbnail_key": thumb_key,
                    "size_bytes": metadata.size_bytes,
                    "mime_type": metadata.mime_type,
                    "dominant_color": metadata.dominant_color.value,
                    "acquired_at": metadata.acquired_at.value.isoformat(),
                },
                owner_id,
                owner_email,
            )
        except Exception:
            if written:
                self._compensate(upload_id, written)
            raise

        logger.info(f"Upload {upload_id} stored as photo {photo['id']} in album {album_id}")
        return UploadResult(
            upload_id=upload_id,
            photo_id=photo["id"],
            file_key=file_key,
            thumbnail_key=thumb_key,
            size_bytes=metadata.size_bytes,
            mime_type=metadata.mime_type,
            dominant_color=metadata.dominant_color.value,
            acquired_at=metadata.acquired_at.value,
            acquired_at_source=metadata.acquired_at.source.value,
            dominant_color_source=metadata.dominant_color.source.value,
        )

    def _compensate(self, upload_id: UUID, keys: list[str]) -> None:
        logger.error(f"Upload {upload_id} failed; orphaned objects: {', '.join(keys)}")
        for key in keys:
            try:
                self.storage.delete_object(key)
            except Exception as exc:
                logger.error(f"Upload {upload_id}: could not delete orphan {key}: {exc}")

    def ingest_avatar(self, user_id: UUID, email: str, data: bytes) -> str:
        """
        Store the user's avatar and point their profile at it.

        Returns:
            The avatar object key
        """
        rendition = self.processor.process_avatar(data)
        key = avatar_key(user_id)
        self.storage.put_object(key, rendition, THUMBNAIL_CONTENT_TYPE)
        if self.auth_client is not None:
            self.auth_client.update_profile(user_id, email, avatar_url=key)
        logger.info(f"Avatar stored for user {user_id}")
        return key
