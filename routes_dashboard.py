# routes_dashboard.py — dashboard counters, events placeholder, account settings
from flask import Blueprint, g, jsonify

from extensions import backend
from routes_auth import current_token, current_user, login_required
from services_records import CAMPS, EVENTS

bp_dashboard = Blueprint("dashboard", __name__)


@bp_dashboard.get("/api/config/status")
def config_status():
    if backend.configured:
        return jsonify(ok=True, configured=True)
    return jsonify(ok=True, configured=False,
                   message="Supabase is not configured. Please set environment variables.",
                   missing=[k for k, v in (("SUPABASE_URL", backend.url),
                                           ("SUPABASE_ANON_KEY", backend.api_key)) if not v])


@bp_dashboard.get("/api/dashboard/stats")
@login_required
def stats():
    records = backend.records(current_token())
    return jsonify(ok=True, camps=records.count(CAMPS), events=records.count(EVENTS))


@bp_dashboard.get("/api/events")
@login_required
def events():
    count = backend.records(current_token()).count(EVENTS)
    return jsonify(ok=True, status="coming_soon", count=count,
                   message="The events management feature is under development.")


@bp_dashboard.get("/api/settings")
@login_required
def settings():
    user = current_user()
    claims = g.token_claims
    return jsonify(ok=True, account={
        "email": user.get("email") or claims.get("email"),
        "role": user.get("role") or claims.get("role"),
        "last_sign_in_at": user.get("last_sign_in_at"),
    })
