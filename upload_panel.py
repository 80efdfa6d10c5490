# upload_panel.py — editable image list of one camp form (create or edit mode)
from services_upload import BatchState


class ImageUploadPanel:
    """
    Owns the form's image list and the state of the running batch. Uploads go
    through the orchestrator; any change to the list is handed to the
    synchronizer, which only writes when the camp already has a row id.
    """

    def __init__(self, orchestrator, synchronizer, camp_id, images=(), record_id=None, registry=None):
        self.orchestrator = orchestrator
        self.synchronizer = synchronizer
        self.camp_id = camp_id
        self.record_id = record_id
        self.registry = registry
        self.images = list(images or [])
        self.batch = BatchState()
        self.batch_id = None
        self.last_sync = None

    @property
    def mode(self) -> str:
        return "edit" if self.record_id else "create"

    @property
    def max_images(self) -> int:
        return self.orchestrator.max_images

    @property
    def can_upload(self) -> bool:
        return not self.batch.uploading and len(self.images) < self.max_images

    def _on_update(self, state):
        self.batch = state
        if self.registry is not None and self.batch_id:
            self.registry.publish(self.batch_id, state)

    def upload(self, files):
        if self.registry is not None:
            self.batch_id = self.registry.new_batch_id()
        result = self.orchestrator.run_batch(files, self.camp_id, self.images, on_update=self._on_update)
        self.batch = result.state
        if result.changed:
            self.images = list(result.images)
            self.last_sync = self.synchronizer.sync(self.record_id, self.images)
        return result

    def remove(self, index: int):
        res = self.synchronizer.remove_image(self.images, index, self.record_id)
        self.images = list(res.images)
        self.last_sync = res.sync
        return res

    def snapshot(self) -> dict:
        return {
            "mode": self.mode,
            "camp_id": self.camp_id,
            "record_id": self.record_id,
            "images": list(self.images),
            "image_count": len(self.images),
            "max_images": self.max_images,
            "can_upload": self.can_upload,
            "batch_id": self.batch_id,
            "batch": self.batch.to_dict(),
            "sync": self.last_sync.to_dict() if self.last_sync else None,
        }
