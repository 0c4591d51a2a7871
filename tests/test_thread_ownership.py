"""Tests for single-thread ownership of the entity store."""

import threading

import pytest

from codeshell.vfs.storage import MemoryStorage
from codeshell.vfs.store import EntityStore


def run_in_thread(func):
    """Run func on another thread and return the exception it raised, if any"""
    errors = []

    def target():
        try:
            func()
        except AssertionError as e:
            errors.append(e)

    thread = threading.Thread(target=target)
    thread.start()
    thread.join()
    return errors[0] if errors else None


class TestThreadOwnership:
    def test_unclaimed_store_works_from_any_thread(self):
        store = EntityStore(MemoryStorage())

        assert run_in_thread(lambda: store.create_file("a.txt")) is None
        assert len(store.get_files()) == 1

    def test_claimed_store_rejects_other_threads(self):
        store = EntityStore(MemoryStorage())
        store.claim_thread()

        error = run_in_thread(lambda: store.create_file("a.txt"))

        assert error is not None
        assert "used from thread" in str(error)
        assert "pinned to" in str(error)
        assert store.get_files() == []

    def test_owner_can_use_claimed_store(self):
        store = EntityStore(MemoryStorage())
        store.claim_thread()

        store.create_file("a.txt")

        assert len(store.get_files()) == 1

    def test_release_allows_other_threads(self):
        store = EntityStore(MemoryStorage())
        store.claim_thread()
        store.release_thread()

        assert run_in_thread(lambda: store.create_folder("src")) is None

    def test_claim_from_second_thread_fails(self):
        store = EntityStore(MemoryStorage())
        store.claim_thread()

        error = run_in_thread(store.claim_thread)

        assert error is not None
        assert "cannot take it over" in str(error)

    def test_release_from_non_owner_fails(self):
        store = EntityStore(MemoryStorage())
        store.claim_thread()

        error = run_in_thread(store.release_thread)
        assert error is not None
        assert "cannot release it" in str(error)

        store.release_thread()
        with pytest.raises(AssertionError):
            store.release_thread()
