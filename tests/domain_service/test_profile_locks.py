"""Tests for ProfileLockRegistry."""

import threading
import time

from voicesign.domain_service import ProfileLockRegistry


class TestProfileLockRegistry:
    def test_reentrant_for_same_user(self, locks: ProfileLockRegistry) -> None:
        with locks.hold(1):
            with locks.hold(1):
                pass

    def test_same_user_is_serialized(self, locks: ProfileLockRegistry) -> None:
        active = 0
        overlaps = 0
        guard = threading.Lock()

        def work() -> None:
            nonlocal active, overlaps
            with locks.hold(7):
                with guard:
                    active += 1
                    if active > 1:
                        overlaps += 1
                time.sleep(0.01)
                with guard:
                    active -= 1

        threads = [threading.Thread(target=work) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert overlaps == 0

    def test_different_users_do_not_contend(self, locks: ProfileLockRegistry) -> None:
        acquired = threading.Event()

        def other_user() -> None:
            with locks.hold(2):
                acquired.set()

        with locks.hold(1):
            thread = threading.Thread(target=other_user)
            thread.start()
            assert acquired.wait(timeout=1.0)
            thread.join()
