# tests/conftest.py
import io
import os
import time
from datetime import datetime, timezone
from urllib.parse import urlparse

import jwt
import pytest
from PIL import Image

from app import create_app
from extensions import backend
from models_uploads import ImageFile

BASE_URL = "https://proj.supabase.co"
ANON_KEY = "anon-key"
JWT_SECRET = "test-jwt-secret"
MB = 1024 * 1024


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text="", headers=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.headers = headers or {}

    def json(self):
        if self._json is None:
            raise ValueError("no json body")
        return self._json


def make_token(email="admin@example.com", expires_in=3600):
    now = int(time.time())
    return jwt.encode({"sub": "user-1", "email": email, "role": "authenticated",
                       "aud": "authenticated", "iat": now, "exp": now + expires_in},
                      JWT_SECRET, algorithm="HS256")


class FakePlatform:
    """In-memory stand-in for the hosted REST, storage and auth endpoints (used as a requests session)."""

    def __init__(self):
        self.calls = []
        self.camps = {}
        self.events = 0
        self.objects = {}
        self.users = {"admin@example.com": "secret"}
        self.next_id = 1
        self.fail_upload = set()      # object name suffixes that fail on upload
        self.fail_updates = False
        self.fail_inserts = False
        self.fail_object_delete = False
        self.fail_list = False

    # ---------- helpers ----------
    def add_camp(self, **row):
        rid = row.pop("id", None) or self.next_id
        self.next_id = max(self.next_id, rid) + 1
        stamp = datetime.now(timezone.utc).isoformat()
        base = {"id": rid, "name": None, "province": None, "img_src": [],
                "location": "Somewhere", "director": "Director", "date": "ธ.ค. 2568",
                "created_at": stamp, "updated_at": stamp}
        base.update(row)
        self.camps[rid] = base
        return base

    def calls_to(self, method, fragment):
        return [c for c in self.calls if c["method"] == method and fragment in c["url"]]

    # ---------- requests.Session API ----------
    def request(self, method, url, params=None, json=None, data=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json,
                           "data": data, "headers": headers or {}, "timeout": timeout})
        assert timeout, "every backend call carries a timeout"
        path = urlparse(url).path
        if path.startswith("/auth/v1/"):
            return self._auth(path, json, headers or {})
        if path.startswith("/rest/v1/"):
            return self._rest(method, path[len("/rest/v1/"):], params or {}, json)
        if path.startswith("/storage/v1/"):
            return self._storage(method, path[len("/storage/v1/"):], json, data)
        return FakeResponse(404, {"message": "unknown route"})

    def _auth(self, path, body, headers):
        if path.endswith("/token"):
            body = body or {}
            if self.users.get(body.get("email")) != body.get("password"):
                return FakeResponse(400, {"error": "invalid_grant",
                                          "error_description": "Invalid login credentials"})
            return FakeResponse(200, {
                "access_token": make_token(body["email"]),
                "refresh_token": "refresh-1",
                "expires_at": int(time.time()) + 3600,
                "user": {"id": "user-1", "email": body["email"], "role": "authenticated",
                         "last_sign_in_at": "2026-10-18T08:00:00Z"},
            })
        if path.endswith("/logout"):
            return FakeResponse(204)
        return FakeResponse(404, {"message": "unknown auth route"})

    def _rest(self, method, table, params, body):
        rid = None
        if str(params.get("id", "")).startswith("eq."):
            rid = int(params["id"][3:])
        if table == "events":
            if method == "HEAD":
                return FakeResponse(200, headers={"Content-Range": f"*/{self.events}"})
            return FakeResponse(200, [])
        if method == "HEAD":
            n = len(self.camps)
            return FakeResponse(200, headers={"Content-Range": f"0-{max(n - 1, 0)}/{n}" if n else "*/0"})
        if method == "GET":
            rows = list(self.camps.values())
            if rid is not None:
                rows = [r for r in rows if r["id"] == rid]
            if params.get("order") == "camp_id.desc":
                rows.sort(key=lambda r: r["camp_id"], reverse=True)
            return FakeResponse(200, [dict(r) for r in rows])
        if method == "POST":
            if self.fail_inserts:
                return FakeResponse(409, {"message": "duplicate key value violates unique constraint"})
            row = self.add_camp(**dict(body))
            return FakeResponse(201, [dict(row)])
        if method == "PATCH":
            if self.fail_updates:
                return FakeResponse(500, {"message": "database unavailable"})
            row = self.camps.get(rid)
            if row is None:
                return FakeResponse(200, [])
            row.update(body)
            return FakeResponse(200, [dict(row)])
        if method == "DELETE":
            row = self.camps.pop(rid, None)
            return FakeResponse(200, [dict(row)] if row else [])
        return FakeResponse(405, {"message": "method not allowed"})

    def _storage(self, method, path, body, data):
        if path.startswith("object/list/"):
            if self.fail_list:
                return FakeResponse(500, {"message": "list failed"})
            prefix = (body or {}).get("prefix", "").strip("/") + "/"
            names = sorted(k[len(prefix):] for k in self.objects if k.startswith(prefix))
            return FakeResponse(200, [{"name": n} for n in names if "/" not in n])
        rest = path[len("object/"):]
        bucket, _, key = rest.partition("/")
        if method == "POST":
            if any(key.endswith(s) for s in self.fail_upload):
                return FakeResponse(400, {"statusCode": "413", "message": "The object exceeded the maximum allowed size"})
            self.objects[key] = data
            return FakeResponse(200, {"Key": f"{bucket}/{key}"})
        if method == "DELETE":
            if self.fail_object_delete:
                return FakeResponse(500, {"message": "storage unavailable"})
            for p in (body or {}).get("prefixes", []):
                self.objects.pop(p, None)
            return FakeResponse(200, [])
        return FakeResponse(405, {"message": "method not allowed"})


def make_image_bytes(size=(64, 48), fmt="JPEG", color=(200, 120, 40)):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def make_noise_png(size):
    """Incompressible PNG; ~3 bytes per pixel."""
    w, h = size
    buf = io.BytesIO()
    Image.frombytes("RGB", (w, h), os.urandom(w * h * 3)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def app(platform):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "SUPABASE_URL": BASE_URL,
        "SUPABASE_ANON_KEY": ANON_KEY,
        "SUPABASE_JWT_SECRET": JWT_SECRET,
        "LOG_TO_FILE": False,
    })
    backend.session = platform
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "secret"})
    assert r.status_code == 200
    return client


@pytest.fixture
def small_image():
    return ImageFile("photo.JPG", make_image_bytes(), "image/jpeg")
