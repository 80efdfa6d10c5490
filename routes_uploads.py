# routes_uploads.py — camp photo uploads (edit mode writes through, create mode stays in the form)
import json
import math

from flask import Blueprint, current_app, jsonify, request

from errors import NotFoundError, ValidationError
from extensions import backend
from models_uploads import ImageFile
from routes_auth import current_token, login_required

bp_uploads = Blueprint("uploads", __name__)


def _incoming_files():
    """Supports 'file', 'files', 'files[]' and any other multipart file field."""
    seen = []
    for _key, fs in request.files.items(multi=True):
        if fs and fs.filename:
            seen.append(fs)
    files = [ImageFile.from_storage(fs) for fs in seen]
    return [f for f in files if f.size > 0]


def _parse_camp_id(raw) -> float:
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return 0
    return value if math.isfinite(value) else 0


def _parse_images(raw) -> list:
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        images = raw
    else:
        try:
            images = json.loads(raw)
        except ValueError as e:
            raise ValidationError("img_src must be a JSON list of URLs", field="img_src") from e
    if not isinstance(images, list) or not all(isinstance(u, str) for u in images):
        raise ValidationError("img_src must be a JSON list of URLs", field="img_src")
    return images


def _edit_panel(record_id):
    token = current_token()
    camp = backend.records(token).get_camp(record_id)
    return backend.upload_panel(camp.camp_id, camp.img_src, record_id=camp.id, access_token=token)


def _upload_response(panel, result):
    return jsonify(ok=True, changed=result.changed, new_urls=result.new_urls, panel=panel.snapshot())


# ---------- edit mode ----------
@bp_uploads.get("/api/camps/<int:record_id>/images")
@login_required
def camp_images(record_id):
    return jsonify(ok=True, panel=_edit_panel(record_id).snapshot())


@bp_uploads.post("/api/camps/<int:record_id>/images")
@login_required
def upload_camp_images(record_id):
    """
    form-data:
      files | files[] | file   one or more images
    Each file is compressed when above 5 MB and stored under main/<camp folder>/.
    The new list is saved on the camp row; per-file failures are reported in
    panel.batch.tasks without aborting the others.
    """
    files = _incoming_files()
    if not files:
        raise ValidationError("Attach one or more images", field="files")
    panel = _edit_panel(record_id)
    result = panel.upload(files)
    current_app.logger.info("[uploads] camp row %s: %d new image(s)", record_id, len(result.new_urls))
    return _upload_response(panel, result)


@bp_uploads.delete("/api/camps/<int:record_id>/images/<int:index>")
@login_required
def remove_camp_image(record_id, index):
    panel = _edit_panel(record_id)
    res = panel.remove(index)
    return jsonify(ok=True, removed=res.removed, storage_deleted=res.storage.ok,
                   storage_reason=res.storage.reason, panel=panel.snapshot())


@bp_uploads.get("/api/camps/<int:record_id>/images/storage")
@login_required
def list_stored_images(record_id):
    token = current_token()
    camp = backend.records(token).get_camp(record_id)
    urls = backend.storage(token).list_camp_images(camp.camp_id)
    return jsonify(ok=True, camp_id=camp.camp_id, objects=urls, count=len(urls))


# ---------- create mode ----------
@bp_uploads.post("/api/uploads/camps")
@login_required
def upload_for_new_camp():
    """
    form-data:
      camp_id   business id typed in the form (required, not 0)
      img_src   JSON list of the images already in the form
      files     one or more images
    Nothing is written to the camps table; the returned list goes into the create call.
    """
    files = _incoming_files()
    if not files:
        raise ValidationError("Attach one or more images", field="files")
    panel = backend.upload_panel(_parse_camp_id(request.form.get("camp_id")),
                                 _parse_images(request.form.get("img_src")),
                                 access_token=current_token())
    result = panel.upload(files)
    return _upload_response(panel, result)


@bp_uploads.post("/api/uploads/remove")
@login_required
def remove_for_new_camp():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError("JSON object expected")
    try:
        index = int(data.get("index"))
    except (TypeError, ValueError) as e:
        raise ValidationError("index is required", field="index") from e
    panel = backend.upload_panel(_parse_camp_id(data.get("camp_id")), _parse_images(data.get("img_src")),
                                 access_token=current_token())
    res = panel.remove(index)
    return jsonify(ok=True, removed=res.removed, storage_deleted=res.storage.ok,
                   storage_reason=res.storage.reason, panel=panel.snapshot())


@bp_uploads.get("/api/uploads/batches/<batch_id>")
@login_required
def batch_status(batch_id):
    state = backend.registry.get(batch_id)
    if state is None:
        raise NotFoundError("Batch finished or unknown", resource="batch", ident=batch_id)
    return jsonify(ok=True, batch_id=batch_id, batch=state.to_dict())
