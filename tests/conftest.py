import os
import sys
import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from store.client import _fallback


@pytest.fixture(autouse=True)
def clear_fallback(monkeypatch):
    """Wipe the in-memory redis fallback before and after each test and override
    the redis helpers so they always operate on the in-memory store.
    """
    _fallback.clear()

    # stub out client calls so tests don't attempt network
    import store.client as client
    import store.cycles as cycles

    async def fake_get(key: str):
        return _fallback.get(key)

    async def fake_set(key: str, value: str, ttl=None):
        _fallback[key] = value

    async def no_redis():
        return None

    monkeypatch.setattr(client, "get_redis", no_redis)
    monkeypatch.setattr(client, "redis_get", fake_get)
    monkeypatch.setattr(client, "redis_set", fake_set)

    # also update modules that imported the helpers at import-time
    monkeypatch.setattr(cycles, "redis_get", fake_get)
    monkeypatch.setattr(cycles, "redis_set", fake_set)

    yield

    _fallback.clear()


@pytest.fixture
def sqlite_db(tmp_path):
    """Initialise the shared database module against a throwaway SQLite file."""
    import database

    database.dispose_database()
    database.init_database(f"sqlite:///{tmp_path / 'metropulse-test.db'}")
    database.init_db()
    yield database
    database.dispose_database()
