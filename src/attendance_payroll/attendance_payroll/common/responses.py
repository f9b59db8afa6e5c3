from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request

from ..core.exceptions import InvalidTransitionError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def ok(message: str, status: int = 200, **data):
    return jsonify({"ok": True, "message": message, **data}), status


def fail(message: str, status: int):
    return jsonify({"ok": False, "message": message}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def json_endpoint(view):
    """Turn domain exceptions into `{"ok": false, "message": ...}` responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except InvalidTransitionError as e:
            return fail(str(e), 409)
        except NotFoundError as e:
            return fail(str(e), 404)
        except ValidationError as e:
            return fail(str(e), 400)
        except Exception:
            logger.exception("Unhandled error in %s", request.path)
            return fail("Internal server error", 500)

    return wrapper
