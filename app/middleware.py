from flask import request, current_app

from app.api.errors import api_error


# Multipart endpoints enforce their own per-kind limits under MAX_CONTENT_LENGTH
BODY_LIMIT_EXEMPT_ENDPOINTS = {
    'uploads_api.upload_image',
    'uploads_api.upload_audio',
}


def init_middleware(app):
    @app.before_request
    def enforce_body_size_limit():
        """Reject oversized bodies before any handler reads them."""
        if request.endpoint in BODY_LIMIT_EXEMPT_ENDPOINTS:
            return None

        max_size = current_app.config['MAX_JSON_BODY_SIZE']
        if request.content_length is not None and request.content_length > max_size:
            current_app.logger.warning(
                f"Rejected {request.method} {request.path}: body of {request.content_length} bytes"
            )
            return api_error(
                f"Request body too large. Maximum size is {max_size // (1024 * 1024)}MB.",
                413,
            )
        return None
