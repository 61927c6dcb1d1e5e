"""Shared pool of unassigned participants."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
import threading

from teamforge.participant_models import Participant


class ParticipantPool:
    """Thread-safe container for participants not yet placed on a team.

    Every change bumps ``version``. A formation task drafts a team from a
    versioned snapshot and hands the roster to ``claim``, which removes it
    only when the pool is still at that version, so no participant is handed
    out twice. The guard is re-entrant so a task may hold it for its whole
    duration and still call ``claim``.
    """

    def __init__(self, participants: Iterable[Participant] = ()) -> None:
        self._available: list[Participant] = list(participants)
        self._lock = threading.RLock()
        self._version = 0

    @contextmanager
    def guard(self) -> Iterator[None]:
        """Hold exclusive access to the pool."""
        with self._lock:
            yield

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def versioned_snapshot(self) -> tuple[int, list[Participant]]:
        with self._lock:
            return self._version, list(self._available)

    def snapshot(self) -> list[Participant]:
        with self._lock:
            return list(self._available)

    def claim(self, participants: Sequence[Participant], expected_version: int | None = None) -> bool:
        """Atomically remove *participants*.

        Returns False, leaving the pool untouched, when *expected_version* is
        stale or any participant is no longer available.
        """
        with self._lock:
            if expected_version is not None and expected_version != self._version:
                return False
            wanted = {p.id for p in participants}
            if len(wanted) != len(participants):
                return False
            present = {p.id for p in self._available}
            if not wanted <= present:
                return False
            if wanted:
                self._available = [p for p in self._available if p.id not in wanted]
                self._version += 1
            return True

    def restore(self, participants: Iterable[Participant]) -> None:
        """Return participants to the pool (used when a team is rolled back)."""
        with self._lock:
            present = {p.id for p in self._available}
            added = False
            for p in participants:
                if p.id not in present:
                    self._available.append(p)
                    present.add(p.id)
                    added = True
            if added:
                self._version += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._available)
