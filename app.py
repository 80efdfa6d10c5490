# app.py — Camps admin backend-API (camps + images + auth + dashboard)
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from errors import AppError
from extensions import backend

BASE_DIR = Path(__file__).resolve().parent

SUPABASE_URL = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY") or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY", "")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "")
SECRET_KEY = os.getenv("SECRET_KEY", "camps-dev-secret")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
LOG_DIR = os.getenv("LOG_DIR", str(BASE_DIR / "logs"))

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def create_app(test_config=None):
    app = Flask(__name__)

    app.config.update(
        SECRET_KEY=SECRET_KEY,
        SUPABASE_URL=SUPABASE_URL,
        SUPABASE_ANON_KEY=SUPABASE_ANON_KEY,
        SUPABASE_JWT_SECRET=SUPABASE_JWT_SECRET,
        CAMPS_BUCKET=os.getenv("CAMPS_BUCKET", "camps"),
        MAX_IMAGES=int(os.getenv("MAX_IMAGES", "10")),
        UPLOAD_SETTLE_SECONDS=float(os.getenv("UPLOAD_SETTLE_SECONDS", "2")),
        BACKEND_TIMEOUT=float(os.getenv("BACKEND_TIMEOUT", "15")),
        MAX_CONTENT_LENGTH=60 * 1024 * 1024,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        LOG_DIR=LOG_DIR,
        LOG_TO_FILE=True,
    )
    if test_config:
        app.config.update(test_config)

    _init_logging(app)
    backend.init_app(app)
    CORS(app, resources={r"/api/*": {"origins": CORS_ORIGINS}}, supports_credentials=True)

    from routes_auth import bp_auth
    from routes_camps import bp_camps
    from routes_dashboard import bp_dashboard
    from routes_uploads import bp_uploads

    for bp in (bp_auth, bp_camps, bp_uploads, bp_dashboard):
        app.register_blueprint(bp)

    _register_error_handlers(app)

    if not backend.configured:
        app.logger.warning("Supabase not configured (SUPABASE_URL / SUPABASE_ANON_KEY empty); API disabled")

    # ---------- Health ----------
    @app.get("/health")
    @app.get("/healthz")
    def health():
        return jsonify(ok=True, service="camps-admin", configured=backend.configured)

    return app


def _register_error_handlers(app):
    @app.errorhandler(AppError)
    def _app_error(e):
        if e.status >= 500:
            app.logger.warning("%s %s -> %s: %s", request.method, request.path, e.code, e.message)
        return jsonify(e.to_dict()), e.status

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(e):
        return jsonify(ok=False, error="payload_too_large", message="Upload exceeds the request size limit"), 413

    @app.errorhandler(HTTPException)
    def _http_error(e):
        return jsonify(ok=False, error=e.name.lower().replace(" ", "_"), message=e.description), e.code

    @app.errorhandler(Exception)
    def _unexpected(e):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(ok=False, error="internal_error", message="Something went wrong. Please try again."), 500


def _init_logging(app):
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    app.logger.setLevel(logging.INFO)
    if getattr(root, "_camps_logging", False):
        return
    fmt = logging.Formatter(LOG_FORMAT)
    sh = logging.StreamHandler(); sh.setFormatter(fmt); root.addHandler(sh)
    if app.config.get("LOG_TO_FILE"):
        logs_dir = Path(app.config["LOG_DIR"])
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(logs_dir / "backend.log", maxBytes=5_000_000, backupCount=3, encoding="utf-8")
            fh.setFormatter(fmt); root.addHandler(fh)
        except OSError as e:
            app.logger.warning("File logging disabled: %s", e)
    root._camps_logging = True
    app.logger.info("Logging ready")


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "10000")), debug=True)
