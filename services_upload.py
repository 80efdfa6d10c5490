# services_upload.py — sequential compress → upload pipeline for a batch of camp photos
import logging
import threading
import time
import uuid
from dataclasses import asdict, dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from errors import AppError, ValidationError
from services_images import MAX_FILE_SIZE_MB, compress_image, needs_compression
from utils import format_file_size, generate_file_name, storage_path

log = logging.getLogger(__name__)

DEFAULT_MAX_IMAGES = 10
SETTLE_SECONDS = 2.0

UPLOADING = "uploading"
COMPRESSING = "compressing"
DONE = "done"
ERROR = "error"


@dataclass(frozen=True)
class TaskState:
    file_name: str
    size: int
    stage: str = UPLOADING
    progress: int = 0
    error: Optional[str] = None

    def to_dict(self):
        d = asdict(self)
        d["size_label"] = format_file_size(self.size)
        return d


@dataclass(frozen=True)
class BatchState:
    tasks: Tuple[TaskState, ...] = ()
    accumulated_urls: Tuple[str, ...] = ()
    finished: bool = False

    def with_task(self, index: int, **changes):
        tasks = list(self.tasks)
        tasks[index] = replace(tasks[index], **changes)
        return replace(self, tasks=tuple(tasks))

    def with_url(self, url: str):
        return replace(self, accumulated_urls=self.accumulated_urls + (url,))

    @property
    def uploading(self) -> bool:
        return bool(self.tasks) and not self.finished

    def to_dict(self):
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "accumulated_urls": list(self.accumulated_urls),
            "finished": self.finished,
            "uploading": self.uploading,
        }


@dataclass(frozen=True)
class BatchResult:
    state: BatchState
    images: List[str] = field(default_factory=list)
    changed: bool = False

    @property
    def new_urls(self) -> List[str]:
        return list(self.state.accumulated_urls)


def camp_id_unset(camp_id) -> bool:
    if camp_id is None or isinstance(camp_id, bool):
        return True
    try:
        return Decimal(str(camp_id).strip()) == 0
    except InvalidOperation:
        return True


class UploadOrchestrator:
    """
    Drives files one at a time through compression (when oversized) and the
    storage upload. Every state change is published to `on_update` as an
    immutable BatchState; the orchestrator is the only code that builds them.
    """

    def __init__(self, gateway, compressor=compress_image, max_images: int = DEFAULT_MAX_IMAGES,
                 max_size_mb: float = MAX_FILE_SIZE_MB, clock_ms=None):
        self.gateway = gateway
        self.compressor = compressor
        self.max_images = max_images
        self.max_size_mb = max_size_mb
        self.clock_ms = clock_ms or (lambda: int(time.time() * 1000))

    def accept(self, files, current_images) -> list:
        room = max(0, self.max_images - len(current_images))
        return list(files or [])[:room]

    def run_batch(self, files, camp_id, current_images, on_update=None) -> BatchResult:
        current = list(current_images or [])
        accepted = self.accept(files, current)
        if not accepted:
            return BatchResult(BatchState(finished=True), current, False)
        if camp_id_unset(camp_id):
            raise ValidationError("Please enter a Camp ID first before uploading images.", field="camp_id")

        state = BatchState(tasks=tuple(TaskState(f.name, f.size) for f in accepted))

        def publish():
            if on_update:
                on_update(state)

        def progress(index, stage, pct):
            nonlocal state
            state = state.with_task(index, stage=stage, progress=int(pct))
            publish()

        publish()
        stamp = self.clock_ms()
        log.info("Upload batch: %d file(s) for camp %s", len(accepted), camp_id)

        for i, upload in enumerate(accepted):
            # extension comes from the picked name, also when compression re-encodes to JPEG;
            # the object's Content-Type carries the stored format
            name = generate_file_name(upload.name, i, now_ms=stamp)
            try:
                url = self._process(upload, camp_id, name, lambda stage, pct, i=i: progress(i, stage, pct))
            except AppError as e:
                log.warning("Upload of %s failed: %s", upload.name, e.message)
                state = state.with_task(i, stage=ERROR, error=e.message)
            except Exception as e:
                log.exception("Upload of %s failed", upload.name)
                state = state.with_task(i, stage=ERROR, error=str(e) or "Upload failed")
            else:
                state = state.with_task(i, stage=DONE, progress=100).with_url(url)
            publish()

        state = replace(state, finished=True)
        publish()

        if state.accumulated_urls:
            return BatchResult(state, current + list(state.accumulated_urls), True)
        return BatchResult(state, current, False)

    def _process(self, upload, camp_id, file_name, progress) -> str:
        processed = upload
        if needs_compression(upload, self.max_size_mb):
            progress(COMPRESSING, 0)
            processed = self.compressor(upload, lambda pct: progress(COMPRESSING, pct),
                                        max_size_mb=self.max_size_mb)
            progress(COMPRESSING, 100)

        progress(UPLOADING, 0)
        path = storage_path(camp_id, file_name)
        # the transport gives no byte-level progress
        progress(UPLOADING, 30)
        self.gateway.upload(path, processed.data, processed.content_type,
                            overwrite=True, cache_control_seconds=3600)
        progress(UPLOADING, 100)
        return self.gateway.public_url(path)


class BatchRegistry:
    """Latest snapshot per batch; finished batches are dropped after `settle_seconds`."""

    def __init__(self, settle_seconds: float = SETTLE_SECONDS, clock=time.monotonic):
        self.settle_seconds = settle_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._batches = {}

    @staticmethod
    def new_batch_id() -> str:
        return uuid.uuid4().hex[:12]

    def publish(self, batch_id: str, state: BatchState):
        expires = self.clock() + self.settle_seconds if state.finished else None
        with self._lock:
            self._purge()
            self._batches[batch_id] = (state, expires)

    def get(self, batch_id: str) -> Optional[BatchState]:
        with self._lock:
            self._purge()
            entry = self._batches.get(batch_id)
        return entry[0] if entry else None

    def _purge(self):
        now = self.clock()
        for key in [k for k, (_, exp) in self._batches.items() if exp is not None and exp <= now]:
            del self._batches[key]
