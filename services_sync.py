# services_sync.py — write-through of a camp's image list (img_src) to the record store
import logging
from dataclasses import dataclass
from typing import List, Optional

from errors import AppError, ValidationError
from services_storage import StorageResult

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    persisted: bool
    ok: bool = True
    message: Optional[str] = None

    def to_dict(self):
        return {"persisted": self.persisted, "ok": self.ok, "message": self.message}


@dataclass(frozen=True)
class RemovalResult:
    images: List[str]
    removed: str
    storage: StorageResult
    sync: SyncResult


class ImageSetSynchronizer:
    """
    Persists the full image list of a saved camp. Without a record id (create
    mode) nothing is written: the list travels with the eventual insert.
    A failed write is reported but the caller keeps its list.
    """

    def __init__(self, records, gateway):
        self.records = records
        self.gateway = gateway

    def sync(self, record_id, images) -> SyncResult:
        if not record_id:
            log.info("No record id, skipping image auto-save")
            return SyncResult(persisted=False)
        images = list(images)
        try:
            self.records.update_images(record_id, images)
        except AppError as e:
            log.error("Failed to save images for camp row %s: %s", record_id, e.message)
            return SyncResult(persisted=False, ok=False, message="Failed to save images to database")
        log.info("Images saved for camp row %s (%d)", record_id, len(images))
        return SyncResult(persisted=True, message="Images saved")

    def remove_image(self, images, index: int, record_id=None) -> RemovalResult:
        """Deletes the stored object (best effort), drops `index`, then syncs."""
        images = list(images)
        if index < 0 or index >= len(images):
            raise ValidationError(f"image index {index} out of range", field="index")
        target = images[index]
        deleted = self.gateway.delete(target)
        log.info("Delete from storage: %s ok=%s reason=%s", target, deleted.ok, deleted.reason)

        remaining = images[:index] + images[index + 1:]
        return RemovalResult(remaining, target, deleted, self.sync(record_id, remaining))
