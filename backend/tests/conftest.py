import os
import sys
import pytest

# Ensure the backend root (containing the `bingo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from bingo import create_app, db


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    GAME_STORE_BACKEND = 'file'
    GAMES_FILE = 'games.json'
    STORE_CONFLICT_RETRIES = 3
    HASH_ADMIN_PASSWORDS = False
    STRICT_TEAM_IDS = False
    PUBLIC_BASE_URL = ''
    CORS_ORIGINS = '*'
    LOG_LEVEL = 'DEBUG'
    # Cheap hashes keep the password tests fast
    BCRYPT_LOG_ROUNDS = 4


def _app_with(tmp_path, **overrides):
    settings = {
        'GAMES_FILE': str(tmp_path / 'games.json'),
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'bingo.db'}",
    }
    settings.update(overrides)
    application = create_app(type('TestConfigOverride', (TestConfig,), settings))
    with application.app_context():
        # Ensure models are imported so tables are created
        import bingo.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture(params=['file', 'sql'])
def flask_app(request, tmp_path):
    yield from _app_with(tmp_path, GAME_STORE_BACKEND=request.param)


@pytest.fixture()
def file_app(tmp_path):
    yield from _app_with(tmp_path, GAME_STORE_BACKEND='file')


@pytest.fixture()
def sql_app(tmp_path):
    yield from _app_with(tmp_path, GAME_STORE_BACKEND='sql')


@pytest.fixture()
def hashed_app(tmp_path):
    yield from _app_with(tmp_path, HASH_ADMIN_PASSWORDS=True)


@pytest.fixture()
def strict_app(tmp_path):
    yield from _app_with(tmp_path, STRICT_TEAM_IDS=True)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def store(flask_app):
    return flask_app.extensions['game_store']


def empty_grid(size):
    return [[None] * size for _ in range(size)]


@pytest.fixture()
def game_data():
    return {
        'gridSize': 3,
        'grid': empty_grid(3),
        'teamAName': 'Red',
        'teamBName': 'Blue',
        'adminPassword': 'pass1',
    }
