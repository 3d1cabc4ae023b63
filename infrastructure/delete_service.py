"""Photo deletion across the object-storage bucket and the roll files.

The bucket object is deleted before the roll file is touched. If the bucket
delete fails nothing local changes, so a retry starts from the same state.
"""

from __future__ import annotations

from loguru import logger

from core.errors import InvalidIdError, StorageError
from core.services.interfaces import PhotoDeleteResult
from infrastructure.content_writer import ContentWriter
from infrastructure.object_storage import BucketStorage


class PhotoDeleteService:
    """Coordinates bucket deletes and shot removal."""

    def __init__(self, writer: ContentWriter, storage: BucketStorage | None) -> None:
        self._writer = writer
        self._storage = storage

    def delete_photo(self, roll_id: str, sequence: str, src: str) -> PhotoDeleteResult:
        """Delete a shot's image from the bucket, then remove the shot.

        Raises:
            NotFoundError: The roll or sequence does not exist.
            InvalidIdError: `src` is not the image of that shot.
            StorageError: Storage is unconfigured or the delete failed.
        """
        shot = self._writer.get_shot(roll_id, sequence)
        if shot.image.src != src:
            raise InvalidIdError(
                f"Shot {sequence} in roll {roll_id} shows {shot.image.src}, not {src}"
            )
        if self._storage is None:
            raise StorageError("Object storage is not configured")

        key = self._storage.delete_object(src)
        roll_path = self._writer.remove_shot(roll_id, sequence)
        logger.info("Deleted photo {} (key {}) from roll {}", src, key, roll_id)
        return PhotoDeleteResult(
            roll_id=roll_id, sequence=sequence, src=src, object_key=key, roll_path=roll_path
        )
