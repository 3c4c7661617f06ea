"""
Standardized API Error Responses

Every error leaves the API as {"error": "<human readable message>"} with the
matching HTTP status. Handlers either return api_error() directly or raise
one of the ApiError subclasses below from shared helpers.
"""
from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException

from app import db


GENERIC_ERROR_MESSAGE = 'An internal error occurred. Please try again later.'


def api_error(message: str, status_code: int = 400, **extra):
    """
    Create a standardized API error response.

    Args:
        message: Human-readable error message
        status_code: HTTP status code (default 400)
        **extra: Additional top-level fields (e.g. rateLimit details)

    Returns:
        Flask response with the status code set

    Example:
        return api_error('Post not found', 404)
    """
    body = {'error': message}
    body.update(extra)
    response = jsonify(body)
    response.status_code = status_code
    return response


class ApiError(Exception):
    status_code = 500
    default_message = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str = None, **extra):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        # Extra top-level response fields, e.g. rateLimit on quota rejections
        self.extra = extra


class Unauthorized(ApiError):
    status_code = 401
    default_message = 'Unauthorized'


class InvalidInput(ApiError):
    status_code = 400
    default_message = 'Invalid input'


class NotFound(ApiError):
    status_code = 404
    default_message = 'Not found'


class Forbidden(ApiError):
    status_code = 403
    default_message = 'Forbidden'


class Conflict(ApiError):
    # Duplicate subscription and friends; clients expect 400, not 409
    status_code = 400
    default_message = 'Conflict'


class RateLimited(ApiError):
    status_code = 429
    default_message = 'Too many requests. Please try again later.'


class Internal(ApiError):
    status_code = 500


def register_error_handlers(app):
    """
    Register JSON error handlers on the application.
    Ensures all errors return JSON, not HTML.
    """

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            current_app.logger.error(f"API error: {e.message}")
        return api_error(e.message, e.status_code, **e.extra)

    @app.errorhandler(413)
    def payload_too_large(e):
        return api_error('Request body too large.', 413)

    @app.errorhandler(429)
    def rate_limited(e):
        return api_error('Too many requests. Please try again later.', 429)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle any other HTTP exceptions with JSON response."""
        return api_error(e.description or e.name, e.code)

    @app.errorhandler(Exception)
    def handle_exception(e):
        current_app.logger.error(f"Unhandled exception: {e}", exc_info=True)
        try:
            db.session.rollback()
        except Exception as rollback_error:
            current_app.logger.error(f"Session rollback failed: {rollback_error}")
        if current_app.debug:
            return api_error(f"{GENERIC_ERROR_MESSAGE} ({e})", 500)
        return api_error(GENERIC_ERROR_MESSAGE, 500)
