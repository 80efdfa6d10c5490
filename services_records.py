# services_records.py — camps table through the hosted REST endpoint (<base>/rest/v1)
import logging

import requests

from errors import NotFoundError, PersistenceError, ValidationError
from models_camps import Camp
from utils import decimal_string, normalize

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15
CAMPS = "camps"
EVENTS = "events"


def search_camps(camps, q: str):
    """Filter used by the camps table: name, location, director, or camp id substring."""
    term = normalize(q)
    if not term:
        return list(camps)
    raw = (q or "").strip()
    out = []
    for c in camps:
        if (term in normalize(c.name) or term in normalize(c.location)
                or term in normalize(c.director) or raw in decimal_string(c.camp_id)):
            out.append(c)
    return out


class RecordStore:
    def __init__(self, base_url: str, api_key: str, access_token: str = None,
                 timeout: float = DEFAULT_TIMEOUT, session=None):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, **extra):
        h = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
            "Accept": "application/json",
        }
        h.update(extra)
        return h

    def _request(self, method, table, params=None, json=None, headers=None, action="query"):
        url = f"{self.base_url}/rest/v1/{table}"
        try:
            r = self.session.request(method, url, params=params, json=json,
                                     headers=self._headers(**(headers or {})), timeout=self.timeout)
        except requests.RequestException as e:
            log.error("[%s] %s %s failed: %s", table, method, action, e)
            raise PersistenceError(f"{action} failed: {e}", table=table) from e
        if r.status_code >= 400:
            try:
                body = r.json()
                msg = body.get("message") or body.get("hint") or str(body)
            except (ValueError, AttributeError):
                msg = (r.text or "").strip() or f"HTTP {r.status_code}"
            log.error("[%s] %s %s error %s: %s", table, method, action, r.status_code, msg)
            raise PersistenceError(msg, table=table)
        return r

    # ---------- camps ----------
    def list_camps(self):
        r = self._request("GET", CAMPS, params={"select": "*", "order": "camp_id.desc"}, action="list")
        return [Camp.from_row(row) for row in (r.json() or [])]

    def get_camp(self, record_id: int) -> Camp:
        r = self._request("GET", CAMPS, params={"select": "*", "id": f"eq.{record_id}"}, action="get")
        rows = r.json() or []
        if not rows:
            raise NotFoundError("Camp not found", resource=CAMPS, ident=record_id)
        return Camp.from_row(rows[0])

    def create_camp(self, data) -> Camp:
        payload = data.model_dump()
        r = self._request("POST", CAMPS, json=payload,
                          headers={"Prefer": "return=representation"}, action="insert")
        rows = r.json() or []
        if not rows:
            raise PersistenceError("insert returned no row", table=CAMPS)
        camp = Camp.from_row(rows[0])
        log.info("[camps] created id=%s camp_id=%s", camp.id, camp.camp_id)
        return camp

    def update_camp(self, record_id: int, changes: dict) -> Camp:
        if "camp_id" in changes:
            raise ValidationError("camp_id cannot be changed after creation", field="camp_id")
        r = self._request("PATCH", CAMPS, params={"id": f"eq.{record_id}"}, json=changes,
                          headers={"Prefer": "return=representation"}, action="update")
        rows = r.json() or []
        if not rows:
            raise NotFoundError("Camp not found", resource=CAMPS, ident=record_id)
        return Camp.from_row(rows[0])

    def update_images(self, record_id: int, images) -> None:
        self._request("PATCH", CAMPS, params={"id": f"eq.{record_id}"},
                      json={"img_src": list(images)}, headers={"Prefer": "return=minimal"},
                      action="update img_src")

    def delete_camp(self, record_id: int) -> None:
        r = self._request("DELETE", CAMPS, params={"id": f"eq.{record_id}"},
                          headers={"Prefer": "return=representation"}, action="delete")
        if not (r.json() or []):
            raise NotFoundError("Camp not found", resource=CAMPS, ident=record_id)
        log.info("[camps] deleted id=%s", record_id)

    # ---------- stats ----------
    def count(self, table: str) -> int:
        r = self._request("HEAD", table, params={"select": "*"},
                          headers={"Prefer": "count=exact"}, action="count")
        rng = r.headers.get("Content-Range", "")
        total = rng.rsplit("/", 1)[-1] if "/" in rng else ""
        return int(total) if total.isdigit() else 0
