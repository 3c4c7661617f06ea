from flask import Flask
from flask.logging import default_handler
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_talisman import Talisman
from config import Config, config_dict
import os
import time
from logging.config import dictConfig
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# JSON-only API: nothing is rendered, so the policy can stay strict
csp = {
    'default-src': ["'none'"],
    'frame-ancestors': ["'self'"],
    'base-uri': ["'self'"],
    'form-action': ["'self'"]
}


db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
cache = Cache()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per hour"]
)


def try_connect_db(app, retries=3):
    for attempt in range(retries):
        try:
            with app.app_context():
                with db.engine.connect():
                    return True
        except Exception as e:
            app.logger.error(f"Database connection attempt {attempt + 1} failed: {e}")
            time.sleep(1)
    return False


def _init_cache(app):
    redis_url = app.config.get('REDIS_URL')
    try:
        if redis_url and redis_url.strip():
            cache.init_app(app, config={
                'CACHE_TYPE': 'RedisCache',
                'CACHE_REDIS_URL': redis_url,
                'CACHE_DEFAULT_TIMEOUT': 300,
                'CACHE_KEY_PREFIX': 'zuni_cache_',
                'CACHE_OPTIONS': {
                    'socket_timeout': 5,
                    'socket_connect_timeout': 5
                }
            })
            app.logger.info("Cache initialized with Redis URL")
        else:
            app.logger.warning("No REDIS_URL available, using simple cache")
            cache.init_app(app, config={'CACHE_TYPE': 'SimpleCache'})
    except Exception as e:
        app.logger.error(f"Cache initialization error: {e}, falling back to simple cache")
        cache.init_app(app, config={'CACHE_TYPE': 'SimpleCache'})


def _init_limiter(app, env):
    redis_url = app.config.get('REDIS_URL')
    if redis_url and redis_url.strip():
        try:
            import redis
            redis.from_url(redis_url).ping()
            app.config['RATELIMIT_STORAGE_URI'] = redis_url
            app.config['RATELIMIT_STORAGE_URL'] = redis_url
            app.logger.info("Rate limiter configured with Redis")
        except Exception as redis_error:
            log = app.logger.error if env == 'production' else app.logger.warning
            log(f"Redis connection failed for rate limiting: {redis_error}, using memory storage")
            app.config['RATELIMIT_STORAGE_URI'] = 'memory://'
            app.config['RATELIMIT_STORAGE_URL'] = 'memory://'
    else:
        app.config.setdefault('RATELIMIT_STORAGE_URI', 'memory://')
        if env == 'production':
            app.logger.error("REDIS_URL is not set; rate limits won't be shared across instances")
    limiter.init_app(app)


def create_app():

    env = os.getenv('FLASK_ENV', 'development')

    if env == 'production' and os.getenv('SENTRY_DSN'):
        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.2,
        )

    app = Flask(__name__)

    dictConfig(Config.LOGGING_CONFIG)
    # Records reach the root console handler; the Flask default one would print them twice
    app.logger.removeHandler(default_handler)

    app.config.from_object(Config)
    app.config.from_object(config_dict.get(env, config_dict['default']))

    Talisman(
        app,
        force_https=env == 'production',
        session_cookie_secure=env == 'production',
        content_security_policy=csp,
        content_security_policy_nonce_in=None,
        permissions_policy={'camera': '()', 'microphone': '(self)', 'geolocation': '()'},
    )

    _init_cache(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    _init_limiter(app, env)

    if not try_connect_db(app):
        raise RuntimeError("Could not establish database connection")

    from app.lib.university_cache import UniversityListCache
    app.extensions['university_cache'] = UniversityListCache(
        backend=cache,
        ttl_seconds=app.config['UNIVERSITY_CACHE_TTL'],
    )

    from app.lib.media_storage import MediaStorage
    app.extensions['media_storage'] = MediaStorage(app.config)

    from app.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, str(user_id))

    from app.middleware import init_middleware
    init_middleware(app)

    from app.api import init_api
    init_api(app)

    from app.commands import init_commands
    init_commands(app)

    @app.route('/health')
    def health():
        return {'status': 'ok'}

    return app
