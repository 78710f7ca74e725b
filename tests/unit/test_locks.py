"""Tests for per-key locking."""

from __future__ import annotations

import threading
import time

from triton_lb_operator.utils.locks import KeyedLock


class TestKeyedLock:
    """Test cases for KeyedLock."""

    def test_lock_released_and_cleaned_up(self):
        """Test that a key disappears once no one holds it."""
        locks = KeyedLock()

        with locks.hold("default/web"):
            assert "default/web" in locks

        assert "default/web" not in locks

    def test_released_on_error(self):
        """Test that an exception inside the block releases the key."""
        locks = KeyedLock()

        try:
            with locks.hold("default/web"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert "default/web" not in locks
        with locks.hold("default/web"):
            pass

    def test_same_key_serialized(self):
        """Test that two holders of the same key never overlap."""
        locks = KeyedLock()
        active = 0
        max_active = 0
        counter_lock = threading.Lock()

        def worker():
            nonlocal active, max_active
            with locks.hold("default/web"):
                with counter_lock:
                    active += 1
                    max_active = max(max_active, active)
                time.sleep(0.01)
                with counter_lock:
                    active -= 1

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert max_active == 1
        assert "default/web" not in locks

    def test_different_keys_independent(self):
        """Test that different keys can be held at once."""
        locks = KeyedLock()
        entered = threading.Event()
        release = threading.Event()

        def hold_other():
            with locks.hold("default/api"):
                entered.set()
                release.wait(1)

        thread = threading.Thread(target=hold_other)
        with locks.hold("default/web"):
            thread.start()
            assert entered.wait(1)
            release.set()
        thread.join()
