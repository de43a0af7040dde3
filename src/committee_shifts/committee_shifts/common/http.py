from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError
from .datetime_utils import parse_iso_date, parse_month

logger = logging.getLogger(__name__)


def login_required(view):
    """The auth layer puts the user id in the session; we only read it."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"message": "Authentication required", "error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def error_response(e: DomainError):
    if isinstance(e, NotFoundError):
        status = 404
    elif isinstance(e, AuthorizationError):
        status = 403
    elif isinstance(e, ValidationError):
        status = 400
    else:
        status = 500
    return jsonify({"message": str(e), "error": e.code}), status


def internal_error(action: str):
    logger.exception("Failed to %s", action)
    return jsonify({"message": f"Failed to {action}", "error": "InternalError"}), 500


def require_date(value: Optional[str], field_name: str) -> date:
    if not value:
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def optional_month(value: Optional[str], default: date) -> date:
    if not value:
        return default.replace(day=1)
    try:
        return parse_month(value)
    except ValueError:
        raise ValidationError("month must be YYYY-MM")
