"""
Serialized, change-detected writes of derived documents.

Every write for a document key goes through one ChangeDetectingWriter, which
holds a lock per key for the duration of the read-compare-write. Runs take a
generation number when they start; a write carrying an older generation than
the last one committed for its key is dropped, so a slow run can never
overwrite the results of a newer run that already finished.
"""

from __future__ import annotations

import itertools
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterator, Mapping, Optional

from ...constants import EPSILON
from ...utils.helpers import utc_now


class WriteOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    REPLACED = "replaced"
    SKIPPED_EMPTY = "skipped_empty"
    SUPERSEDED = "superseded"

    @property
    def wrote(self) -> bool:
        return self in (WriteOutcome.CREATED, WriteOutcome.UPDATED, WriteOutcome.REPLACED)


class PersistenceError(Exception):
    """Writing (or reading back) a derived document failed."""

    def __init__(self, key: str, original: BaseException) -> None:
        self.key = key
        self.original = original
        super().__init__(f"Could not persist {key}: {original}")


class KeyedLocks:
    """One lock per document key, created on first use."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield


def fields_differ(old: Mapping[str, float], new: Mapping[str, float], tol: float = EPSILON) -> bool:
    """True if any field of `new` is missing from `old` or differs by more than tol."""
    for name, value in new.items():
        if name not in old:
            return True
        if abs(float(old[name] or 0.0) - float(value or 0.0)) > tol:
            return True
    return False


def format_timestamp(ts: datetime) -> str:
    """Fixed-width ISO text so stored timestamps sort chronologically as strings."""
    return ts.isoformat(timespec="microseconds")


class ChangeDetectingWriter:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or utc_now
        self._locks = KeyedLocks()
        self._gen_lock = threading.Lock()
        self._generations = itertools.count(1)
        self._committed: Dict[str, int] = {}

    def next_generation(self) -> int:
        with self._gen_lock:
            return next(self._generations)

    def last_committed(self, key: str) -> Optional[int]:
        return self._committed.get(key)

    def _superseded(self, key: str, generation: int) -> bool:
        last = self._committed.get(key)
        return last is not None and last > generation

    def write_if_changed(
        self,
        key: str,
        generation: int,
        fresh: Mapping[str, float],
        *,
        load: Callable[[], Optional[Mapping[str, float]]],
        save: Callable[[str], None],
    ) -> WriteOutcome:
        """
        Compare `fresh` with what `load()` returns and call `save(timestamp)`
        only if there is nothing stored yet or a monitored field changed.
        An unchanged document keeps its old timestamp.
        """
        with self._locks.hold(key):
            if self._superseded(key, generation):
                return WriteOutcome.SUPERSEDED
            try:
                current = load()
                if current is not None and not fields_differ(current, fresh):
                    outcome = WriteOutcome.UNCHANGED
                else:
                    save(format_timestamp(self._clock()))
                    outcome = WriteOutcome.CREATED if current is None else WriteOutcome.UPDATED
            except sqlite3.Error as e:
                raise PersistenceError(key, e) from e
            self._committed[key] = generation
            return outcome

    def replace(self, key: str, generation: int, *, save: Callable[[], None]) -> WriteOutcome:
        """Unconditional overwrite, still serialized and subject to latest-wins."""
        with self._locks.hold(key):
            if self._superseded(key, generation):
                return WriteOutcome.SUPERSEDED
            try:
                save()
            except sqlite3.Error as e:
                raise PersistenceError(key, e) from e
            self._committed[key] = generation
            return WriteOutcome.REPLACED
