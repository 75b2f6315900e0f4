import os
import sys
import pytest

# Ensure the backend root (containing the `catalog` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from catalog import create_app, db


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    JWT_SECRET = 'test-jwt-secret'
    JWT_EXPIRES_HOURS = 24
    # Overridden per test with a file under tmp_path
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {}
    BCRYPT_LOG_ROUNDS = 4
    ALLOWED_ORIGINS = ['http://localhost:4200']
    RATELIMIT_WINDOW_SEC = 900
    RATELIMIT_GLOBAL_MAX = 1000
    RATELIMIT_WRITE_MAX = 1000
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024
    API_VERSION = 'test'
    LIST_QUERY_WORKERS = 2
    LOG_LEVEL = 'DEBUG'


def make_config(tmp_path, **overrides):
    # File-backed SQLite so the concurrent list queries each get a connection
    attrs = {'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'catalog.db'}"}
    attrs.update(overrides)
    return type('Config', (TestConfig,), attrs)


@pytest.fixture()
def config_overrides():
    return {}


@pytest.fixture()
def flask_app(tmp_path, config_overrides):
    application = create_app(make_config(tmp_path, **config_overrides))
    with application.app_context():
        # Ensure models are imported so tables are created
        import catalog.models  # noqa: F401
        db.create_all()
    # Requests push their own app context (fresh `g` and session)
    yield application
    with application.app_context():
        db.drop_all()
        application.extensions['catalog'].close(db.engine)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def register(client, email='a@b.com', password='secret1', name='A'):
    return client.post('/api/auth/register', json={'email': email, 'password': password, 'name': name})


@pytest.fixture()
def token(client):
    res = register(client)
    assert res.status_code == 201
    return res.get_json()['data']['token']


@pytest.fixture()
def auth(token):
    return {'Authorization': f'Bearer {token}'}


GAME = {
    'name': 'Elden Ring',
    'genre': 'Action RPG',
    'rating': 9.3,
    'price': 59.99,
    'description': 'A dark fantasy action RPG.',
    'releaseDate': '2022-02-25',
    'platform': ['PC', 'PlayStation 5'],
}


@pytest.fixture()
def game_payload():
    return dict(GAME)
