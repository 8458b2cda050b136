"""Per-event critical sections for work that must not interleave on one event"""

from contextlib import contextmanager
from threading import Lock


class EventLockRegistry:
    """Hands out one lock per event id; different events never contend.

    An entry lives only while someone holds or waits on it, so the map stays
    as small as the number of events being worked on right now.
    """

    def __init__(self):
        self._locks: dict[str, Lock] = {}
        self._users: dict[str, int] = {}
        self._registry_lock = Lock()

    def _acquire_entry(self, event_id: str) -> Lock:
        with self._registry_lock:
            lock = self._locks.get(event_id)
            if lock is None:
                lock = Lock()
                self._locks[event_id] = lock
            self._users[event_id] = self._users.get(event_id, 0) + 1
            return lock

    def _release_entry(self, event_id: str):
        with self._registry_lock:
            remaining = self._users[event_id] - 1
            if remaining:
                self._users[event_id] = remaining
            else:
                del self._users[event_id]
                del self._locks[event_id]

    def active_count(self) -> int:
        with self._registry_lock:
            return len(self._locks)

    @contextmanager
    def hold(self, event_id: str):
        lock = self._acquire_entry(event_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(event_id)


# Shared by every request handled in this process
event_locks = EventLockRegistry()
