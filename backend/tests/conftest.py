import os, sys, pytest
# Ensure backend directory is on path so 'tracker' and 'tests' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from tracker import create_app
from tracker.store import MemoryStore

TEST_SECRET = 'test-secret-key-with-at-least-32-bytes!'


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def app_instance(store):
    app = create_app({
        'TESTING': True,
        'TRACKER_STORE': 'memory',
        'STORE': store,
        'JWT_SECRET_KEY': TEST_SECRET,
        'LOG_LEVEL': 'DEBUG',
    })
    yield app


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
