# Backend/app/utils/event_lock.py
"""
Event-scoped mutual exclusion for the pairing critical section

PostgreSQL: transaction-level advisory lock keyed by hashtext(event_id), shared
by every worker process and released automatically at COMMIT/ROLLBACK.

Other backends (SQLite in development/tests): a process-local lock per event id.
"""
from contextlib import contextmanager
import logging
import threading

from sqlalchemy import text

logger = logging.getLogger(__name__)


class KeyedLock:
    """One threading.Lock per key, created on demand and dropped when unused"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}  # key -> [lock, holders]

    @contextmanager
    def hold(self, key):
        with self._guard:
            slot = self._locks.get(key)
            if slot is None:
                slot = self._locks[key] = [threading.Lock(), 0]
            slot[1] += 1

        slot[0].acquire()
        try:
            yield
        finally:
            slot[0].release()
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[key]

    def __len__(self):
        with self._guard:
            return len(self._locks)


_local_locks = KeyedLock()


@contextmanager
def event_lock(session, event_id):
    """
    Serialize pairing attempts for one event.

    Must be entered before the pairing transaction does any reads; the caller
    commits or rolls back inside the block.
    """
    if session.get_bind().dialect.name == "postgresql":
        session.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
            {"key": event_id}
        )
        yield
        return

    with _local_locks.hold(event_id):
        yield
