"""
Identity generation for store entities
"""

import time
from collections.abc import Callable

from codeshell.constants import ID_PREFIX


class IdGenerator:
    """Produces process-unique entity ids of the form ``item_<n>_<millis>``.

    The counter only ever moves forward, so an id handed out once is never
    produced again by this generator, even after the store is cleared or a
    snapshot with a lower counter is imported.
    """

    def __init__(self, start: int = 1, clock: Callable[[], float] = time.time) -> None:
        self._next = max(1, start)
        self._clock = clock

    @property
    def next_value(self) -> int:
        """Counter value the next generated id will use"""
        return self._next

    def generate(self) -> str:
        """Allocate a fresh id"""
        value = self._next
        self._next += 1
        millis = int(self._clock() * 1000)
        return f"{ID_PREFIX}_{value}_{millis}"

    def advance_to(self, value: int) -> None:
        """Move the counter forward to at least ``value`` (never backwards)"""
        if value > self._next:
            self._next = value


def counter_of(entity_id: str) -> int | None:
    """Extract the counter part of a generated id, or None for foreign ids"""
    parts = entity_id.split("_")
    if len(parts) < 2 or parts[0] != ID_PREFIX:
        return None
    try:
        return int(parts[1])
    except ValueError:
        return None
