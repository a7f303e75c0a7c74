"""Per-user serialization of voice profile changes."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ProfileLockRegistry:
    """Hands out one re-entrant lock per user.

    Profile creation, re-enrollment and long enrollment for the same user
    run one at a time, so the user record and the active enrollment always
    end up referencing the same profile. Different users never contend.
    """

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: dict[int, threading.RLock] = {}

    def _lock_for(self, user_id: int) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: int) -> Iterator[None]:
        lock = self._lock_for(user_id)
        with lock:
            yield


profile_locks = ProfileLockRegistry()
