# routes_camps.py — camp records: table, detail, create, edit, delete
from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from errors import PersistenceError, ValidationError
from extensions import backend
from routes_auth import current_token, login_required
from schemas import CampCreate, CampUpdate, error_list
from services_records import search_camps
from utils import same_decimal

bp_camps = Blueprint("camps", __name__)


def _records():
    return backend.records(current_token())


def _payload() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError("JSON object expected")
    return data


@bp_camps.get("/api/camps")
@login_required
def list_camps():
    """
    Query:
      q   optional search over name, location, director and camp id
    Returns the camps ordered by camp_id desc plus total/filtered counts.
    """
    camps = _records().list_camps()
    q = (request.args.get("q") or "").strip()
    shown = search_camps(camps, q)
    return jsonify(ok=True, q=q, total=len(camps), count=len(shown),
                   camps=[c.to_dict() for c in shown])


@bp_camps.get("/api/camps/<int:record_id>")
@login_required
def get_camp(record_id):
    camp = _records().get_camp(record_id)
    return jsonify(ok=True, camp=camp.to_dict())


@bp_camps.post("/api/camps")
@login_required
def create_camp():
    data = _payload()
    try:
        body = CampCreate.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Please fill in the required fields", errors=error_list(e)) from e
    try:
        camp = _records().create_camp(body)
    except PersistenceError as e:
        # the form keeps its values for a retry
        return jsonify(ok=False, error=e.code, message=e.message, form=data), e.status
    return jsonify(ok=True, camp=camp.to_dict(), message="Camp created successfully!"), 201


@bp_camps.patch("/api/camps/<int:record_id>")
@bp_camps.put("/api/camps/<int:record_id>")
@login_required
def update_camp(record_id):
    data = dict(_payload())
    records = _records()
    if "camp_id" in data:
        existing = records.get_camp(record_id)
        sent = data.pop("camp_id")
        if not same_decimal(sent, existing.camp_id):
            raise ValidationError("camp_id cannot be changed after creation", field="camp_id")
    try:
        body = CampUpdate.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Invalid camp fields", errors=error_list(e)) from e
    changes = body.changes()
    if not changes:
        raise ValidationError("Nothing to update")
    try:
        camp = records.update_camp(record_id, changes)
    except PersistenceError as e:
        return jsonify(ok=False, error=e.code, message=e.message, form=data), e.status
    return jsonify(ok=True, camp=camp.to_dict(), message="Camp updated successfully!")


@bp_camps.delete("/api/camps/<int:record_id>")
@login_required
def delete_camp(record_id):
    # stored images are left in the bucket
    _records().delete_camp(record_id)
    current_app.logger.info("[camps] row %s deleted", record_id)
    return jsonify(ok=True, deleted=record_id, redirect="/camps")
