from dotenv import load_dotenv
from datetime import timedelta
import os

load_dotenv()

class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')

    if not SQLALCHEMY_DATABASE_URI:
        raise ValueError("DATABASE_URL environment variable not set")

    # Heroku/Supabase style URLs
    if SQLALCHEMY_DATABASE_URI and SQLALCHEMY_DATABASE_URI.startswith('postgres://'):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
        'pool_size': 5,
        'max_overflow': 10,
        'pool_timeout': 30,
        'connect_args': {
            'connect_timeout': 10,
            'keepalives': 1,
            'keepalives_idle': 60,
            'keepalives_interval': 10,
            'keepalives_count': 5
        }
    }

    LOGGING_CONFIG = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'default': {
                'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'level': 'INFO',
                'formatter': 'default',
            },
        },
        'root': {
            'handlers': ['console'],
            'level': 'INFO',
        }
    }
    LOG_TO_STDOUT = os.getenv('LOG_TO_STDOUT', 'False').lower() == 'true'

    REDIS_URL = os.getenv('REDIS_URL')
    RATELIMIT_STORAGE_URL = os.getenv('REDIS_URL') or 'memory://'
    RATELIMIT_ENABLED = os.getenv('RATELIMIT_ENABLED', 'True').lower() == 'true'

    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Extra origins for the mobile shell / web frontend, comma separated
    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '').split(',') if o.strip()]

    # Request size limits (bytes)
    MAX_JSON_BODY_SIZE = 1024 * 1024
    MAX_CONTENT_LENGTH = 12 * 1024 * 1024
    MAX_IMAGE_UPLOAD_SIZE = 5 * 1024 * 1024
    MAX_AUDIO_UPLOAD_SIZE = 10 * 1024 * 1024

    # Per-user upload quota
    UPLOAD_MAX_PER_HOUR = int(os.getenv('UPLOAD_MAX_PER_HOUR', '20'))
    UPLOAD_MAX_PER_DAY = int(os.getenv('UPLOAD_MAX_PER_DAY', '100'))
    UPLOAD_MAX_BYTES_PER_DAY = int(os.getenv('UPLOAD_MAX_BYTES_PER_DAY', str(500 * 1024 * 1024)))

    # Object storage
    MEDIA_BUCKET = os.getenv('AWS_S3_BUCKET', 'zuni-uploads')
    MEDIA_PUBLIC_BASE_URL = os.getenv('MEDIA_PUBLIC_BASE_URL')
    MEDIA_LOCAL_DIR = os.getenv('MEDIA_LOCAL_DIR', os.path.join(os.getcwd(), 'uploads'))
    SIGNED_URL_EXPIRY = 60

    UNIVERSITY_CACHE_TTL = 300
    DEFAULT_UNIVERSITY_SHORT_NAME = 'GENEL'


class DevelopmentConfig(Config):
    FLASK_ENV = 'development'
    DEBUG = True
    SQLALCHEMY_ECHO = False


class ProductionConfig(Config):
    FLASK_ENV = 'production'
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    PREFERRED_URL_SCHEME = 'https'
    REMEMBER_COOKIE_SECURE = True
    REMEMBER_COOKIE_HTTPONLY = True
    SENTRY_DSN = os.getenv('SENTRY_DSN')


config_dict = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
