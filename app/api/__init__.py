"""
Zuni JSON API

Blueprints for universities, posts/comments, the user's own views, pokes
and media uploads. All endpoints live under /api, return JSON and share the
error format from app.api.errors.
"""
from flask_cors import CORS

from app import login_manager
from app.api.errors import Unauthorized, register_error_handlers
from app.api.universities import universities_bp
from app.api.posts import posts_bp
from app.api.user import user_bp
from app.api.pokes import pokes_bp
from app.api.uploads import uploads_bp


# Capacitor shells and the local web frontend
DEFAULT_ORIGINS = [
    'capacitor://localhost',
    'ionic://localhost',
    'http://localhost',
    'http://localhost:3000',
    'http://127.0.0.1:3000',
]


def init_api(app):
    """
    Register the API blueprints, CORS and JSON error handlers.

    Args:
        app: Flask application instance
    """
    register_error_handlers(app)

    @login_manager.unauthorized_handler
    def unauthorized():
        raise Unauthorized()

    for blueprint in (universities_bp, posts_bp, user_bp, pokes_bp, uploads_bp):
        app.register_blueprint(blueprint, url_prefix='/api')

    CORS(
        app,
        resources={
            r"/api/*": {
                "origins": DEFAULT_ORIGINS + list(app.config.get('CORS_ORIGINS') or []),
                "methods": ['GET', 'POST', 'PATCH', 'DELETE', 'OPTIONS'],
                "allow_headers": ['Content-Type', 'X-Requested-With'],
                "max_age": 86400,
            }
        },
        supports_credentials=True,
    )

    app.logger.info("Zuni API initialized")


__all__ = ['init_api']
