"""
Single-thread guard for the entity store
"""

import threading


class ThreadOwned:
    """Pins the entity store to the Qt UI thread once the shell starts.

    Store operations publish events that repaint widgets, so they must
    run where the widgets live. Before claim_thread() the store is free
    to use anywhere (tests build stores on whatever thread pytest runs).
    The file-loading worker only reads disk and never calls in here.
    """

    def __init__(self) -> None:
        self._owner_thread_id: int | None = None

    def claim_thread(self) -> None:
        """Pin the store to the calling thread"""
        current = threading.get_ident()
        if self._owner_thread_id is not None and self._owner_thread_id != current:
            raise AssertionError(
                f"Entity store is pinned to thread {self._owner_thread_id}; "
                f"thread {current} cannot take it over"
            )
        self._owner_thread_id = current

    def release_thread(self) -> None:
        """Unpin the store. Only the pinning thread may do this."""
        current = threading.get_ident()
        if self._owner_thread_id != current:
            raise AssertionError(
                f"Entity store is pinned to thread {self._owner_thread_id}; "
                f"thread {current} cannot release it"
            )
        self._owner_thread_id = None

    def _assert_owner(self) -> None:
        current = threading.get_ident()
        if self._owner_thread_id is not None and self._owner_thread_id != current:
            raise AssertionError(
                f"Entity store used from thread {current} while pinned to "
                f"thread {self._owner_thread_id}"
            )
