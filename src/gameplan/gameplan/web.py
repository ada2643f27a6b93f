"""Shared pieces of the Flask controller layer."""

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from .core.enums import Role
from .core.exceptions import (
    AlreadyMarkedTodayError,
    AuthenticationError,
    AuthorizationError,
    BackendUnreachableError,
    DomainError,
    IncompleteTasksError,
    LocationPermissionDeniedError,
    LocationUnavailableError,
    NotFoundError,
    OutOfRangeError,
    PermissionDeniedError,
    ValidationError,
)
from .logging_config import get_logger
from .users.model import SessionContext

logger = get_logger(__name__)

# Most specific classes first; lookup walks this in order.
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int, str], ...] = (
    (ValidationError, 400, "validation_error"),
    (AuthenticationError, 401, "invalid_credentials"),
    (AuthorizationError, 403, "forbidden"),
    (PermissionDeniedError, 403, "permission_denied"),
    (LocationPermissionDeniedError, 403, "location_permission_denied"),
    (NotFoundError, 404, "not_found"),
    (AlreadyMarkedTodayError, 409, "already_marked_today"),
    (OutOfRangeError, 422, "out_of_range"),
    (LocationUnavailableError, 422, "location_unavailable"),
    (IncompleteTasksError, 422, "incomplete_tasks"),
    (BackendUnreachableError, 503, "backend_unreachable"),
)


def error_status(error: DomainError) -> tuple[int, str]:
    for cls, status, code in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status, code
    return 400, "domain_error"


def json_ok(payload: Optional[dict] = None, status: int = 200):
    body = {"success": True}
    body.update(payload or {})
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status, code = error_status(e)
        body = {"success": False, "error": code, "message": str(e)}
        if isinstance(e, OutOfRangeError) and e.distance_meters is not None:
            body["distanceMeters"] = round(e.distance_meters, 1)
        return jsonify(body), status

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # HTTP errors raised by Flask itself keep their own status.
        code = getattr(e, "code", None)
        if isinstance(code, int) and 400 <= code < 600:
            return jsonify({"success": False, "error": "http_error", "message": str(e)}), code

        logger.exception("Unhandled error on %s %s", request.method, request.path)
        message = f"Internal error: {e}" if app.config.get("DEBUG") else "Internal error"
        return jsonify({"success": False, "error": "internal_error", "message": message}), 500


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "uid" not in session:
            return jsonify({"success": False, "error": "unauthenticated", "message": "Please log in again."}), 401
        return view(*args, **kwargs)

    return wrapper


def current_context(container) -> SessionContext:
    """Rebuild the signed-in user's context from the Flask session."""
    return container.auth_service.load_context(str(session["uid"]), Role(session["role"]))
