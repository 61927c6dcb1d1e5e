"""Thread-pool scheduling for compatibility precomputation and team formation.

Two parallel phases share one fixed-size ``ThreadPoolExecutor``:

1. pairwise compatibility scoring, batched over unordered pairs;
2. one formation task per team against the shared ``ParticipantPool``.

Python threads cannot be interrupted, so abandoned work is stopped through a
per-task ``threading.Event`` that ``form_single_team`` checks between picks.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import (
    CancelledError,
    Future,
    ThreadPoolExecutor,
    TimeoutError as FuturesTimeoutError,
    wait,
)
from dataclasses import dataclass, field
from functools import partial
import logging
import threading
import time

from teamforge.config import EngineSettings
from teamforge.engine.compatibility import CompatibilityMap, freeze, iter_pairs, score_pairs
from teamforge.engine.formation import form_single_team, release_team
from teamforge.engine.pool import ParticipantPool
from teamforge.errors import ConcurrencyFailure, FormationCancelled, TaskFailure
from teamforge.participant_models import Participant
from teamforge.team import MIN_TEAM_SIZE, Team


logger = logging.getLogger(__name__)


@dataclass
class FormationRun:
    """Outcome of one concurrent formation phase, teams in numbering order."""

    teams: list[Team] = field(default_factory=list)
    failures: list[TaskFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return not self.failures


class ConcurrencyCoordinator:
    """Owns the worker pool and every future submitted to it."""

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self.settings = settings or EngineSettings()
        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.max_workers,
            thread_name_prefix="teamforge",
        )
        self._lock = threading.Lock()
        self._in_flight: dict[Future, threading.Event | None] = {}
        self._closed = False
        logger.info("Coordinator initialized with %d workers", self.settings.max_workers)

    # ------------------------------------------------------------------
    # Submission bookkeeping
    # ------------------------------------------------------------------
    def _submit(self, token: threading.Event | None, fn: Callable, *args, **kwargs) -> Future:
        with self._lock:
            if self._closed:
                raise ConcurrencyFailure("Coordinator has been shut down")
            future = self._executor.submit(fn, *args, **kwargs)
            self._in_flight[future] = token
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._in_flight.pop(future, None)

    @property
    def in_flight(self) -> int:
        with self._lock:
            return len(self._in_flight)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    # ------------------------------------------------------------------
    # Phase 1: pairwise compatibility
    # ------------------------------------------------------------------
    def precompute_compatibility(self, participants: Sequence[Participant]) -> CompatibilityMap:
        """Score every unordered pair on the worker pool.

        Batches return plain dicts that are merged on the calling thread, so
        workers never share a mutable map. The merged map is read-only.

        Raises:
            ConcurrencyFailure: A batch failed, or the phase did not finish
                within ``precompute_timeout_seconds``.
        """
        pairs = list(iter_pairs(list(participants)))
        if not pairs:
            return freeze({})

        size = self.settings.pair_batch_size
        batches = [pairs[i:i + size] for i in range(0, len(pairs), size)]
        started = time.monotonic()
        futures = [self._submit(None, score_pairs, batch) for batch in batches]

        _, not_done = wait(futures, timeout=self.settings.precompute_timeout_seconds)
        if not_done:
            for f in not_done:
                f.cancel()
            raise ConcurrencyFailure(
                f"Compatibility precomputation timed out after "
                f"{self.settings.precompute_timeout_seconds} seconds "
                f"({len(not_done)} of {len(futures)} batches unfinished)"
            )

        merged: dict[str, float] = {}
        for f in futures:
            try:
                merged.update(f.result())
            except CancelledError as exc:
                raise ConcurrencyFailure("Compatibility precomputation was interrupted") from exc
            except Exception as exc:
                raise ConcurrencyFailure("Error during compatibility precomputation") from exc

        logger.info(
            "Precomputed %d pair scores in %d batches (%.1fms)",
            len(merged), len(batches), (time.monotonic() - started) * 1000,
        )
        return freeze(merged)

    # ------------------------------------------------------------------
    # Phase 2: per-team formation
    # ------------------------------------------------------------------
    def run_formation(
        self,
        pool: ParticipantPool,
        team_size: int,
        team_count: int,
        compat: CompatibilityMap,
    ) -> FormationRun:
        """Submit one task per team and collect results in submission order.

        A task that raises, is cancelled, or exceeds ``task_timeout_seconds``
        is recorded as a ``TaskFailure`` and discarded; sibling tasks keep
        running. A timed-out task is told to stop through its cancellation
        token, and any team it still produces is returned to the pool.
        """
        started = time.monotonic()
        submitted: list[tuple[int, Future, threading.Event]] = []
        for team_number in range(1, team_count + 1):
            token = threading.Event()
            future = self._submit(
                token,
                form_single_team,
                pool,
                team_size,
                team_number,
                compat,
                lock_scope=self.settings.lock_scope,
                cancel=token,
            )
            submitted.append((team_number, future, token))

        run = FormationRun()
        for team_number, future, token in submitted:
            try:
                team = future.result(timeout=self.settings.task_timeout_seconds)
            except FuturesTimeoutError:
                token.set()
                if not future.cancel():
                    future.add_done_callback(partial(_release_abandoned, pool))
                logger.warning(
                    "Team %d formation timed out after %.1fs; discarding",
                    team_number, self.settings.task_timeout_seconds,
                )
                run.failures.append(TaskFailure(team_number, "timeout"))
                continue
            except CancelledError as exc:
                logger.warning("Team %d formation was interrupted", team_number)
                run.failures.append(TaskFailure(team_number, "interrupted", exc))
                continue
            except FormationCancelled as exc:
                logger.warning("Team %d formation was cancelled", team_number)
                run.failures.append(TaskFailure(team_number, "cancelled", exc))
                continue
            except Exception as exc:
                logger.warning("Team %d formation failed: %s", team_number, exc, exc_info=True)
                run.failures.append(TaskFailure(team_number, "error", exc))
                continue

            if team.size >= MIN_TEAM_SIZE:
                run.teams.append(team)
            elif team.size:
                logger.info(
                    "Team %d discarded with %d members (minimum %d)",
                    team_number, team.size, MIN_TEAM_SIZE,
                )
                release_team(team, pool)

        run.elapsed_seconds = time.monotonic() - started
        return run

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------
    def shutdown(self, grace_seconds: float | None = None) -> None:
        """Stop accepting work, drain for *grace_seconds*, then force-stop.

        A drain that finishes in time joins the worker threads. Forcing cancels queued futures and sets every outstanding
        cancellation token; running tasks stop at their next checkpoint.
        """
        grace = self.settings.shutdown_grace_seconds if grace_seconds is None else grace_seconds
        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = dict(self._in_flight)

        self._executor.shutdown(wait=False)
        not_done = wait(list(pending), timeout=grace).not_done if pending else set()
        if not_done:
            logger.warning(
                "%d tasks still running after %.1fs grace period; forcing shutdown",
                len(not_done), grace,
            )
            self._executor.shutdown(wait=False, cancel_futures=True)
            for f in not_done:
                f.cancel()
                token = pending.get(f)
                if token is not None:
                    token.set()
        else:
            self._executor.shutdown(wait=True)
        logger.info("Coordinator shutdown complete")

    def __enter__(self) -> ConcurrencyCoordinator:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


def _release_abandoned(pool: ParticipantPool, future: Future) -> None:
    """Return the members of a team produced after its task was abandoned."""
    if future.cancelled() or future.exception() is not None:
        return
    team = future.result()
    if team.size:
        logger.info("Releasing %d members of abandoned team %s", team.size, team.id)
        release_team(team, pool)
