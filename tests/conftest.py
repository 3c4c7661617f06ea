"""
Pytest configuration and shared fixtures.
"""

import pytest
import os
import sys

# Add the app directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set DATABASE_URL before Config class is imported (it validates at class-definition time)
os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')


@pytest.fixture
def app(tmp_path):
    """Create application for testing."""
    from config import Config

    # Override Config attributes BEFORE create_app() so the app is built with
    # SQLite-compatible settings (SQLite does not support pool_size, etc.)
    _orig_uri = Config.SQLALCHEMY_DATABASE_URI
    _orig_engine = Config.SQLALCHEMY_ENGINE_OPTIONS
    _orig_ratelimit = Config.RATELIMIT_ENABLED
    _orig_media_dir = Config.MEDIA_LOCAL_DIR
    Config.SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    Config.SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}
    Config.RATELIMIT_ENABLED = False
    Config.MEDIA_LOCAL_DIR = str(tmp_path / 'uploads')

    from app import create_app
    app = create_app()
    app.config['TESTING'] = True

    # Restore Config for isolation
    Config.SQLALCHEMY_DATABASE_URI = _orig_uri
    Config.SQLALCHEMY_ENGINE_OPTIONS = _orig_engine
    Config.RATELIMIT_ENABLED = _orig_ratelimit
    Config.MEDIA_LOCAL_DIR = _orig_media_dir

    return app


@pytest.fixture
def app_context(app):
    """Application context for testing."""
    with app.app_context():
        yield


@pytest.fixture
def db(app, app_context):
    """Database for testing."""
    from app import db as _db

    _db.create_all()
    yield _db
    _db.session.remove()
    _db.drop_all()


@pytest.fixture
def client(app, db):
    """Flask test client with database tables created."""
    return app.test_client()


def login(client, user):
    """Attach a Flask-Login session for `user` to the test client."""
    with client.session_transaction() as flask_session:
        flask_session['_user_id'] = str(user.id)
        flask_session['_fresh'] = True
    # The db fixture keeps one app context pushed across requests, so Flask-Login's
    # per-request user cache on `g` would otherwise leak between test-client requests.
    from flask import g
    g.pop('_login_user', None)


def make_user(db, email, gender='female', custom_color='#ff6600', name='Test User'):
    from app.models import User
    user = User(email=email, name=name, gender=gender, custom_color=custom_color)
    db.session.add(user)
    db.session.commit()
    return user


def make_university(db, name, short_name, city='İstanbul', type_='public'):
    from app.models import University
    university = University(name=name, short_name=short_name, city=city, type=type_)
    db.session.add(university)
    db.session.commit()
    return university


def make_post(db, author, university, title='Hello', content='First post', created_at=None):
    from app.models import Post
    post = Post(title=title, content=content, author_id=author.id, university_id=university.id)
    if created_at is not None:
        post.created_at = created_at
    db.session.add(post)
    db.session.commit()
    return post


def make_comment(db, author, post, content='Nice', created_at=None):
    from app.models import Comment
    comment = Comment(content=content, author_id=author.id, post_id=post.id)
    if created_at is not None:
        comment.created_at = created_at
    db.session.add(comment)
    db.session.commit()
    return comment


@pytest.fixture
def user(db):
    return make_user(db, 'ayse@example.edu.tr')


@pytest.fixture
def other_user(db):
    return make_user(db, 'mehmet@example.edu.tr', gender='male', custom_color='#0066ff', name='Other User')


@pytest.fixture
def university(db):
    return make_university(db, 'Boğaziçi Üniversitesi', 'BOUN')


@pytest.fixture
def default_university(db):
    return make_university(db, 'Genel', 'GENEL', city=None)


@pytest.fixture
def auth_client(client, user):
    """Test client signed in as `user`."""
    login(client, user)
    return client
