# services_storage.py — camp images in the hosted object storage bucket
import logging
import re
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import unquote, urlparse

import requests

from errors import StorageError
from utils import STORAGE_ROOT, folder_name

log = logging.getLogger(__name__)

BUCKET_NAME = "camps"
DEFAULT_TIMEOUT = 15
LIST_LIMIT = 1000


@dataclass(frozen=True)
class StorageResult:
    ok: bool
    reason: Optional[str] = None
    path: Optional[str] = None


def _backend_message(r) -> str:
    try:
        body = r.json()
    except ValueError:
        return (r.text or "").strip() or f"HTTP {r.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


class StorageGateway:
    """
    Thin client for the storage REST API (`<base>/storage/v1`).
    Upload raises StorageError; delete and list report failures instead of raising.
    """

    def __init__(self, base_url: str, api_key: str, bucket: str = BUCKET_NAME,
                 access_token: str = None, timeout: float = DEFAULT_TIMEOUT, session=None):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.bucket = bucket
        self.access_token = access_token
        self.timeout = timeout
        self.session = session or requests.Session()
        self._public_re = re.compile(r"/storage/v1/object/public/" + re.escape(bucket) + r"/(.+)")

    def _headers(self, **extra):
        h = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }
        h.update(extra)
        return h

    def _object_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{path}"

    # ---------- upload ----------
    def upload(self, path: str, data: bytes, content_type: str = "application/octet-stream",
               overwrite: bool = True, cache_control_seconds: int = 3600) -> None:
        headers = self._headers(**{
            "Content-Type": content_type,
            "cache-control": f"max-age={cache_control_seconds}",
            "x-upsert": "true" if overwrite else "false",
        })
        try:
            r = self.session.request("POST", self._object_url(path), data=data,
                                     headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            log.error("Upload error %s: %s", path, e)
            raise StorageError(f"Upload failed: {e}", path=path) from e
        if r.status_code >= 400:
            msg = _backend_message(r)
            log.error("Upload error %s: %s", path, msg)
            raise StorageError(msg, path=path)
        log.info("Uploaded %s (%d bytes)", path, len(data))

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    def path_from_url(self, public_url: str) -> Optional[str]:
        try:
            m = self._public_re.search(urlparse(public_url or "").path)
        except ValueError:
            return None
        return unquote(m.group(1)) if m else None

    # ---------- delete ----------
    def delete(self, public_url: str) -> StorageResult:
        path = self.path_from_url(public_url)
        if not path:
            log.warning("Could not extract path from URL: %s", public_url)
            return StorageResult(ok=False, reason="unrecognized_url")
        try:
            r = self.session.request("DELETE", f"{self.base_url}/storage/v1/object/{self.bucket}",
                                     json={"prefixes": [path]}, headers=self._headers(),
                                     timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("Delete failed %s: %s", path, e)
            return StorageResult(ok=False, reason=str(e), path=path)
        if r.status_code >= 400:
            msg = _backend_message(r)
            log.warning("Delete error %s: %s", path, msg)
            return StorageResult(ok=False, reason=msg, path=path)
        return StorageResult(ok=True, path=path)

    # ---------- list ----------
    def list(self, folder_path: str) -> List[str]:
        folder_path = folder_path.strip("/")
        body = {
            "prefix": folder_path,
            "limit": LIST_LIMIT,
            "offset": 0,
            "sortBy": {"column": "name", "order": "asc"},
        }
        try:
            r = self.session.request("POST", f"{self.base_url}/storage/v1/object/list/{self.bucket}",
                                     json=body, headers=self._headers(), timeout=self.timeout)
            if r.status_code >= 400:
                log.warning("List error %s: %s", folder_path, _backend_message(r))
                return []
            items = r.json() or []
        except (requests.RequestException, ValueError) as e:
            log.warning("List error %s: %s", folder_path, e)
            return []
        names = [it.get("name") or "" for it in items if isinstance(it, dict)]
        return [self.public_url(f"{folder_path}/{n}") for n in names if n and not n.startswith(".")]

    def list_camp_images(self, camp_id) -> List[str]:
        return self.list(f"{STORAGE_ROOT}/{folder_name(camp_id)}")
