import os
import sys
import pytest

# Ensure the backend root (containing the `snakeladder` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from snakeladder import create_app, get_registry, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    MIN_PLAYERS = 2
    RECONNECT_GRACE_SEC = 0
    JOIN_CREATES_MISSING_ROOM = True
    SOCKETIO_NAMESPACE = '/'
    LOG_LEVEL = 'DEBUG'


class FixedDice:
    """Stands in for the room's random source and replays queued rolls."""

    def __init__(self, *values):
        self.values = list(values)

    def push(self, *values):
        self.values.extend(values)

    def randint(self, low, high):
        value = self.values.pop(0)
        assert low <= value <= high
        return value


@pytest.fixture()
def dice():
    return FixedDice()


@pytest.fixture()
def flask_app(dice):
    application = create_app(TestConfig)
    get_registry(application).rng = dice
    with application.app_context():
        yield application


@pytest.fixture()
def registry(flask_app):
    return get_registry(flask_app)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
        )
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()
