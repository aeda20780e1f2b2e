"""
Per-identifier mutual exclusion.

One lock per application id, created on first use and discarded once no
thread holds or waits on it. Unrelated applications never contend; the
arena's own mutex only guards the bookkeeping dict and is never held while
a caller's critical section runs.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

logger = logging.getLogger(__name__)


@dataclass
class _Slot:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class KeyedLockArena:
    """Arena of locks keyed by identifier."""

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._slots: dict[str, _Slot] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Serialize callers that pass the same key."""
        with self._mutex:
            slot = self._slots.get(key)
            if slot is None:
                slot = _Slot()
                self._slots[key] = slot
            slot.users += 1

        if slot.lock.locked():
            logger.debug(f"Waiting for in-flight transition on {key}")
        slot.lock.acquire()
        try:
            yield
        finally:
            slot.lock.release()
            with self._mutex:
                slot.users -= 1
                if slot.users == 0:
                    del self._slots[key]

    def active_keys(self) -> list[str]:
        """Ids with a holder or waiter right now."""
        with self._mutex:
            return sorted(self._slots)

    def __len__(self) -> int:
        with self._mutex:
            return len(self._slots)
