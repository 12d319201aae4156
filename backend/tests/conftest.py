import os
import sys
import pytest

# Ensure the backend root (containing the `zombie_lane` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from zombie_lane import create_app, socketio
from zombie_lane.services import RegistryListener, RoomRegistry, SimulationSettings


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SERVER_ID = 'test-server'
    HOST_USERNAME = 'tester'
    TICK_INTERVAL_SEC = 2
    REJOIN_GRACE_PERIOD_SEC = 30
    RANDOM_SEED = 1234


class RecordingListener(RegistryListener):
    """Keeps every registry output as (event, payload) tuples."""

    def __init__(self):
        self.events = []

    def report_map(self, room, client_id):
        self.events.append(('map', client_id, room))

    def report_zombie_hit(self, client_id, zombie_id, killed):
        self.events.append(('hit', client_id, (zombie_id, killed)))

    def report_game_over(self, client_id, room_id):
        self.events.append(('game_over', client_id, room_id))

    def rooms_changed(self, summary):
        self.events.append(('rooms_changed', None, summary))

    def of(self, kind, client_id=None):
        return [e for e in self.events if e[0] == kind and (client_id is None or e[1] == client_id)]

    def clear(self):
        self.events.clear()


class ManualTimer:
    """Collects scheduled callbacks; tests fire them explicitly."""

    def __init__(self):
        self.pending = []

    def __call__(self, delay, fn, *args):
        self.pending.append((delay, fn, args))

    def fire_all(self):
        pending, self.pending = self.pending, []
        for _, fn, args in pending:
            fn(*args)

    def fire_next(self):
        _, fn, args = self.pending.pop(0)
        fn(*args)


class ScriptedRandom:
    """Stand-in RNG: queued ``random()`` values, fixed row, fixed drift roll."""

    def __init__(self, randoms=(), default=0.99, row=0, roll=0):
        self.randoms = list(randoms)
        self.default = default
        self.row = row
        self.roll = roll

    def random(self):
        return self.randoms.pop(0) if self.randoms else self.default

    def randint(self, a, b):
        return self.roll

    def randrange(self, stop):
        return self.row


@pytest.fixture()
def listener():
    return RecordingListener()


@pytest.fixture()
def timer():
    return ManualTimer()


@pytest.fixture()
def make_registry(listener, timer):
    def _make(rng=None, **settings):
        registry = RoomRegistry(
            settings=SimulationSettings(**settings),
            rng=rng or ScriptedRandom(),
            timer=timer,
            server_id='test-server',
            host_username='tester',
        )
        registry.add_listener(listener)
        return registry
    return _make


@pytest.fixture()
def registry(make_registry):
    return make_registry()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    application.extensions['zombie_lane'].stop()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
