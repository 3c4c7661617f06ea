"""
Shared utilities for the JSON API.

Request parsing, id validation and access to the per-app components
(university cache, media storage).
"""
import logging
from typing import Any, Dict

from flask import request, current_app
from flask_limiter.util import get_remote_address
from flask_login import current_user

from app import db
from app.api.errors import InvalidInput, NotFound
from app.lib.validation import validate_id

logger = logging.getLogger(__name__)


def get_rate_limit_key():
    """Per-user limits for signed-in users, per-IP otherwise."""
    if current_user and current_user.is_authenticated:
        return f"user:{current_user.id}"
    return f"ip:{get_remote_address()}"


def get_json_body() -> Dict[str, Any]:
    """Parse the request body as a JSON object or raise InvalidInput."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput('Invalid JSON in request body')
    return data


def require_valid_id(value: Any, label: str = 'ID') -> str:
    """Return the trimmed id or raise InvalidInput with the validator's message."""
    is_valid, error = validate_id(value)
    if not is_valid:
        raise InvalidInput(error or f"Invalid {label}")
    return value.strip()


def get_or_404(model, object_id: str, message: str = 'Not found'):
    """Primary-key lookup that raises NotFound instead of returning None."""
    obj = db.session.get(model, object_id)
    if obj is None:
        raise NotFound(message)
    return obj


def get_university_cache():
    return current_app.extensions['university_cache']


def get_media_storage():
    return current_app.extensions['media_storage']
