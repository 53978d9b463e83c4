from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, g, jsonify, request

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    QuotaExceededError,
    StorageError,
    ValidationError,
)
from .datetime_utils import parse_iso_date
from .serialization import to_jsonable

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (QuotaExceededError, 400),
    (ValidationError, 400),
    (StorageError, 503),
)


def status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = status_for(error)
        if status >= 500:
            logger.error("%s on %s %s", type(error).__name__, request.method, request.path)
        return jsonify({"error": type(error).__name__, "message": str(error)}), status


def json_response(value: Any, status: int = 200):
    return jsonify(to_jsonable(value)), status


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.args.get("token") or None


def login_required(container):
    """Attach the verified employee id to ``g.employee_id``."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.employee_id = container.tokens.verify(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(container, *roles: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.employee_id = container.tokens.verify(bearer_token())
            employee = container.employees.get_by_id(g.employee_id)
            if not employee or employee.role not in roles:
                raise AuthorizationError("You do not have permission for this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def optional_date(value: Optional[str], field_name: str):
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def required_date(value: Optional[str], field_name: str):
    parsed = optional_date(value, field_name)
    if parsed is None:
        raise ValidationError(f"{field_name} is required")
    return parsed
