# errors.py — taxonomy of errors raised by the services and mapped to JSON by app.py


class AppError(Exception):
    """Base error. `status` and `code` are used by the JSON error handler."""
    status = 500
    code = "app_error"

    def __init__(self, message: str = "", **detail):
        self.message = message or self.code
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self):
        d = {"ok": False, "error": self.code, "message": self.message}
        if self.detail:
            d.update(self.detail)
        return d


class ValidationError(AppError):
    """Missing or invalid input (e.g. upload attempted with an unset camp id)."""
    status = 400
    code = "validation_error"

    def __init__(self, message: str, field: str = None, **detail):
        self.field = field
        if field:
            detail["field"] = field
        super().__init__(message, **detail)


class CompressionError(AppError):
    status = 422
    code = "compression_failed"


class StorageError(AppError):
    """Upload/delete/list against the object storage failed."""
    status = 502
    code = "storage_error"


class PersistenceError(AppError):
    """Insert/update/delete against the record store failed."""
    status = 502
    code = "persistence_error"


class NotFoundError(AppError):
    status = 404
    code = "not_found"

    def __init__(self, message: str = "", resource: str = None, ident=None):
        detail = {}
        if resource:
            detail["resource"] = resource
        if ident is not None:
            detail["id"] = ident
        super().__init__(message or "not found", **detail)


class AuthError(AppError):
    status = 401
    code = "unauthorized"


class BackendNotConfigured(AppError):
    status = 503
    code = "backend_not_configured"

    def __init__(self, message: str = ""):
        super().__init__(message or (
            "The hosted backend is not configured. "
            "Set SUPABASE_URL and SUPABASE_ANON_KEY to enable the dashboard."
        ))


__all__ = [
    "AppError", "ValidationError", "CompressionError", "StorageError",
    "PersistenceError", "NotFoundError", "AuthError", "BackendNotConfigured",
]
