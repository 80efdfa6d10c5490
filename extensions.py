# extensions.py — single shared entry point to the hosted backend (records + storage + auth)
# One instance for the whole app; create_app configures it through init_app().
import requests

from errors import BackendNotConfigured
from services_auth import AuthClient
from services_records import RecordStore
from services_storage import BUCKET_NAME, StorageGateway
from services_sync import ImageSetSynchronizer
from services_upload import DEFAULT_MAX_IMAGES, SETTLE_SECONDS, BatchRegistry, UploadOrchestrator
from upload_panel import ImageUploadPanel


class HostedBackend:
    def __init__(self, app=None):
        self.url = ""
        self.api_key = ""
        self.bucket = BUCKET_NAME
        self.timeout = 15
        self.jwt_secret = None
        self.max_images = DEFAULT_MAX_IMAGES
        self.registry = BatchRegistry()
        self.session = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        cfg = app.config
        self.url = (cfg.get("SUPABASE_URL") or "").strip().rstrip("/")
        self.api_key = (cfg.get("SUPABASE_ANON_KEY") or "").strip()
        self.bucket = cfg.get("CAMPS_BUCKET") or BUCKET_NAME
        self.timeout = float(cfg.get("BACKEND_TIMEOUT") or 15)
        self.jwt_secret = cfg.get("SUPABASE_JWT_SECRET") or None
        self.max_images = int(cfg.get("MAX_IMAGES") or DEFAULT_MAX_IMAGES)
        self.registry = BatchRegistry(float(cfg.get("UPLOAD_SETTLE_SECONDS", SETTLE_SECONDS)))
        self.session = requests.Session()
        app.extensions["hosted_backend"] = self

    @property
    def configured(self) -> bool:
        return bool(self.url and self.api_key)

    def require(self):
        if not self.configured:
            raise BackendNotConfigured()

    # ---------- clients ----------
    def records(self, access_token=None) -> RecordStore:
        self.require()
        return RecordStore(self.url, self.api_key, access_token=access_token,
                           timeout=self.timeout, session=self.session)

    def storage(self, access_token=None) -> StorageGateway:
        self.require()
        return StorageGateway(self.url, self.api_key, bucket=self.bucket, access_token=access_token,
                              timeout=self.timeout, session=self.session)

    def auth(self) -> AuthClient:
        self.require()
        return AuthClient(self.url, self.api_key, timeout=self.timeout, session=self.session)

    # ---------- upload pipeline ----------
    def upload_panel(self, camp_id, images=(), record_id=None, access_token=None) -> ImageUploadPanel:
        gateway = self.storage(access_token)
        orchestrator = UploadOrchestrator(gateway, max_images=self.max_images)
        synchronizer = ImageSetSynchronizer(self.records(access_token), gateway)
        return ImageUploadPanel(orchestrator, synchronizer, camp_id, images,
                                record_id=record_id, registry=self.registry)


# Global instance imported by routes and app
backend = HostedBackend()

__all__ = ["backend", "HostedBackend"]
