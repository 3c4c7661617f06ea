"""
Input Validation

Id-shape checks, text sanitisation and payload validation for the JSON API.
Validators return a (value_or_ok, error_message) tuple; error_message is
None when the input is acceptable.
"""

import html
import re
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

ID_MAX_LENGTH = 100
ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')

POST_TITLE_MAX_LENGTH = 200
POST_CONTENT_MAX_LENGTH = 10000
COMMENT_CONTENT_MAX_LENGTH = 2000
MEDIA_URL_MAX_LENGTH = 1024

_DANGEROUS_PATTERNS = [
    re.compile(r'javascript:', re.IGNORECASE),
    re.compile(r'on\w+\s*=', re.IGNORECASE),
    re.compile(r'data:text/html', re.IGNORECASE),
    re.compile(r'vbscript:', re.IGNORECASE),
    re.compile(r'<\s*/?\s*(script|iframe|object|embed|link|style)', re.IGNORECASE),
]
_TAG_PATTERN = re.compile(r'<[^>]*>')
_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')


def validate_id(value: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate a path/body id.

    Args:
        value: Raw id from the URL or request body

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not value or not isinstance(value, str):
        return False, "ID is required"

    trimmed = value.strip()
    if not trimmed:
        return False, "ID cannot be empty"

    if len(trimmed) > ID_MAX_LENGTH:
        return False, "ID is too long"

    if not ID_PATTERN.match(trimmed):
        return False, "ID contains invalid characters"

    return True, None


def sanitize_input(text: Any) -> str:
    """
    Reduce user text to plain text.

    Strips script-ish patterns and every HTML tag, decodes entities and
    drops control characters other than newline and tab.
    """
    if not text or not isinstance(text, str):
        return ''

    sanitized = text.strip()
    for pattern in _DANGEROUS_PATTERNS:
        sanitized = pattern.sub('', sanitized)

    sanitized = _TAG_PATTERN.sub('', sanitized)
    sanitized = html.unescape(sanitized)
    sanitized = _CONTROL_CHARS.sub('', sanitized)

    return sanitized.strip()


def sanitize_and_validate(text: Any, max_length: int, field_name: str = 'Input') -> Tuple[str, Optional[str]]:
    """Sanitize then enforce presence and maximum length."""
    if not text or not isinstance(text, str):
        return '', f"{field_name} is required"

    sanitized = sanitize_input(text)

    if not sanitized:
        return '', f"{field_name} cannot be empty"

    if len(sanitized) > max_length:
        return sanitized[:max_length], f"{field_name} must be {max_length} characters or less"

    return sanitized, None


def validate_media_url(value: Any, field_name: str) -> Tuple[Optional[str], Optional[str]]:
    """Optional http(s) URL for an uploaded image or audio file."""
    if value is None or value == '':
        return None, None
    if not isinstance(value, str):
        return None, f"{field_name} must be a URL"

    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return None, f"{field_name} must be a valid URL"
    if len(value) > MEDIA_URL_MAX_LENGTH:
        return None, f"{field_name} URL is too long"

    return value, None


def _validate_body(data: Dict[str, Any], max_content: int, label: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    content = data.get('content') or ''
    if not isinstance(content, str):
        return None, "Content must be a string"

    image, error = validate_media_url(data.get('image'), 'Image')
    if error:
        return None, error
    audio, error = validate_media_url(data.get('audio'), 'Audio')
    if error:
        return None, error

    sanitized_content = ''
    if content.strip():
        sanitized_content, error = sanitize_and_validate(content, max_content, 'Content')
        if error:
            return None, error

    if not sanitized_content and not image and not audio:
        return None, f"{label} must have at least content, image, or audio"

    return {'content': sanitized_content, 'image': image, 'audio': audio}, None


def validate_post_payload(data: Any) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Validate a post creation body.

    Returns:
        Tuple of (cleaned fields, error_message)
    """
    if not isinstance(data, dict):
        return None, "Invalid input"

    title, error = sanitize_and_validate(data.get('title'), POST_TITLE_MAX_LENGTH, 'Title')
    if error:
        return None, error

    cleaned, error = _validate_body(data, POST_CONTENT_MAX_LENGTH, 'Post')
    if error:
        return None, error

    cleaned['title'] = title
    return cleaned, None


def validate_comment_payload(data: Any) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Validate a comment creation body."""
    if not isinstance(data, dict):
        return None, "Invalid input"

    return _validate_body(data, COMMENT_CONTENT_MAX_LENGTH, 'Comment')
