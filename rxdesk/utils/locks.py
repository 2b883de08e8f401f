"""Per-key locks for serialising check-then-write sequences on one record."""
import threading
from contextlib import contextmanager


class KeyedLock:
    """Lock per key, kept only while some thread holds or waits on it."""

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._locks = {}

    def __len__(self):
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key):
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]
