# backend/utils/locks.py
import threading
from contextlib import contextmanager


class KeyedLock:
    """Mutex per hashable key, e.g. (product_id, warehouse_id).

    Locks are created on first use and dropped once no thread holds or waits
    for them, so the registry does not grow with every pair ever touched.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}
        self._waiters = {}

    @contextmanager
    def hold(self, key):
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            self._waiters[key] = self._waiters.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self):
        with self._guard:
            return len(self._locks)


# Shared by every StockService in this process; FastAPI runs sync routes in a threadpool
stock_locks = KeyedLock()
