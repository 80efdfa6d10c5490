# models_uploads.py — in-memory image file flowing through the upload pipeline
import os
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class ImageFile:
    name: str
    data: bytes = field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)

    def with_data(self, data: bytes, content_type: str = None):
        return replace(self, data=data, content_type=content_type or self.content_type)

    @classmethod
    def from_storage(cls, fs):
        """Builds an ImageFile from a werkzeug FileStorage (request.files entry)."""
        raw = fs.read()
        # kept as typed (non-ASCII included); storage paths use generated names
        name = os.path.basename((fs.filename or "").replace("\\", "/")).strip() or "image"
        return cls(name=name, data=raw, content_type=fs.mimetype or "application/octet-stream")
