from __future__ import annotations

from functools import wraps
from typing import Any, Mapping

import structlog
from flask import Flask, current_app, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import DomainError, PersistenceError, PolicyViolation, ValidationError

logger = structlog.get_logger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Turn domain errors into ``{"success": false, "message": ...}`` responses."""

    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        body: dict[str, Any] = {"success": False, "message": str(exc)}
        if isinstance(exc, PersistenceError):
            logger.error("request_failed", path=request.path, method=request.method, error=str(exc))
        elif isinstance(exc, PolicyViolation) and exc.debug_info and _geo_debug_enabled():
            body["debug"] = exc.debug_info
        return jsonify(body), exc.http_status


def _geo_debug_enabled() -> bool:
    return bool(current_app.config.get("EXPOSE_GEO_DEBUG")) and current_app.config.get("ENVIRONMENT") != "production"


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return jsonify({"success": False, "message": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "employee_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            if session.get("role") not in allowed:
                names = " or ".join(r.value.replace("_", " ") for r in roles)
                return jsonify({"success": False, "message": f"Access denied. {names} role required."}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_employee_id() -> int:
    return int(session["employee_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        return Role.EMPLOYEE


def json_body() -> Mapping[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(data: Any = None, *, status: int = 200, message: str | None = None, **extra: Any):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status
