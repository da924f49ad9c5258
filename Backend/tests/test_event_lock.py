import threading
from types import SimpleNamespace

from app.models import db
from app.utils import event_lock as event_lock_module
from app.utils.event_lock import KeyedLock, event_lock


def test_same_key_is_exclusive():
    locks = KeyedLock()
    entered = threading.Event()

    def contender():
        with locks.hold("event-a"):
            entered.set()

    with locks.hold("event-a"):
        t = threading.Thread(target=contender)
        t.start()
        assert not entered.wait(0.2)

    t.join(timeout=5)
    assert entered.is_set()


def test_different_keys_do_not_contend():
    locks = KeyedLock()
    entered = threading.Event()

    def other_event():
        with locks.hold("event-b"):
            entered.set()

    with locks.hold("event-a"):
        t = threading.Thread(target=other_event)
        t.start()
        assert entered.wait(5)
        t.join(timeout=5)


def test_unused_locks_are_dropped():
    locks = KeyedLock()

    with locks.hold("event-a"):
        with locks.hold("event-b"):
            assert len(locks) == 2

    assert len(locks) == 0


def test_lock_released_when_block_raises():
    locks = KeyedLock()

    try:
        with locks.hold("event-a"):
            raise ValueError("boom")
    except ValueError:
        pass

    assert len(locks) == 0
    with locks.hold("event-a"):
        pass


def test_event_lock_uses_process_lock_on_sqlite(app, monkeypatch):
    locks = KeyedLock()
    monkeypatch.setattr(event_lock_module, "_local_locks", locks)

    with app.app_context():
        with event_lock(db.session, "event-a"):
            assert len(locks) == 1

    assert len(locks) == 0


class _StubSession:
    """Records statements instead of talking to PostgreSQL"""

    def __init__(self, dialect_name):
        self.dialect_name = dialect_name
        self.statements = []

    def get_bind(self):
        return SimpleNamespace(dialect=SimpleNamespace(name=self.dialect_name))

    def execute(self, statement, params=None):
        self.statements.append((str(statement), params))


def test_event_lock_takes_advisory_lock_on_postgresql(monkeypatch):
    locks = KeyedLock()
    monkeypatch.setattr(event_lock_module, "_local_locks", locks)
    session = _StubSession("postgresql")

    with event_lock(session, "event-a"):
        assert session.statements == [
            ("SELECT pg_advisory_xact_lock(hashtext(:key))", {"key": "event-a"}),
        ]
        assert len(locks) == 0

    assert len(session.statements) == 1
