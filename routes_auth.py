# routes_auth.py — sign-in / sign-out for the dashboard (email + password)
from functools import wraps

from flask import Blueprint, current_app, g, jsonify, request, session
from pydantic import ValidationError as PydanticValidationError

from errors import AuthError, ValidationError
from extensions import backend
from schemas import LoginRequest, error_list
from services_auth import token_claims

bp_auth = Blueprint("auth", __name__)

LOGIN_ROUTE = "/login"
AFTER_LOGIN_ROUTE = "/dashboard"


def current_token():
    return session.get("access_token")


def current_user() -> dict:
    return session.get("user") or {}


def login_required(fn):
    """
    Requires a live session. Expired or missing tokens answer 401 with the
    login route so the client can redirect.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        backend.require()
        try:
            claims = token_claims(current_token(), backend.jwt_secret)
        except AuthError as e:
            session.clear()
            return jsonify(ok=False, error="unauthorized", message=e.message, redirect=LOGIN_ROUTE), 401
        g.token_claims = claims
        return fn(*args, **kwargs)
    return wrapper


@bp_auth.post("/api/auth/login")
def login():
    data = request.get_json(silent=True) or request.form.to_dict() or {}
    try:
        body = LoginRequest.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Email and password are required", errors=error_list(e)) from e

    try:
        result = backend.auth().sign_in(body.email, body.password)
    except AuthError as e:
        return jsonify(ok=False, error="bad_credentials", message=e.message), 401

    session.clear()
    session["access_token"] = result["access_token"]
    session["refresh_token"] = result["refresh_token"]
    session["user"] = result["user"]
    current_app.logger.info("[AUTH] login %s", result["user"].get("email"))
    return jsonify(ok=True, user=result["user"], redirect=AFTER_LOGIN_ROUTE)


@bp_auth.post("/api/auth/logout")
def logout():
    token = current_token()
    if token and backend.configured:
        backend.auth().sign_out(token)
    session.clear()
    return jsonify(ok=True, redirect=LOGIN_ROUTE)


@bp_auth.get("/api/auth/me")
@login_required
def me():
    claims = g.token_claims
    return jsonify(ok=True, user=current_user(), expires_at=claims.get("exp"))
