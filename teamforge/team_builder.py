"""Public entry points for team formation.

``TeamBuilder`` wires validation, the compatibility precomputation, the
per-team greedy engine and the worker pool together. The module-level
functions wrap a short-lived builder for one-off calls.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
import time

from teamforge.config import EngineSettings
from teamforge.engine.compatibility import CompatibilityMap, build_compatibility_map
from teamforge.engine.coordinator import ConcurrencyCoordinator
from teamforge.engine.formation import (
    form_single_team,
    plan_team_count,
    release_team,
    validate_formation_input,
)
from teamforge.engine.pool import ParticipantPool
from teamforge.engine.statistics import FormationStatistics
from teamforge.errors import ConcurrencyFailure
from teamforge.participant_models import UNASSIGNED, Participant
from teamforge.team import MIN_TEAM_SIZE, Team


logger = logging.getLogger(__name__)


def _reset_assignments(participants: Sequence[Participant]) -> None:
    for p in participants:
        p.assigned_team = UNASSIGNED


class TeamBuilder:
    """Forms balanced teams from a participant pool."""

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self.settings = settings or EngineSettings()
        self._coordinator = ConcurrencyCoordinator(self.settings)

    # ------------------------------------------------------------------
    # Compatibility
    # ------------------------------------------------------------------
    def precompute_compatibility(self, participants: Sequence[Participant]) -> CompatibilityMap:
        """Score every unordered pair on the worker pool."""
        return self._coordinator.precompute_compatibility(participants)

    # ------------------------------------------------------------------
    # Formation
    # ------------------------------------------------------------------
    def form_teams(self, participants: Sequence[Participant], team_size: int) -> list[Team]:
        """Form teams concurrently.

        Args:
            participants: Validated participants. Each one's
                ``assigned_team`` is reset, then set for those placed.
            team_size: Target size per team (>= 3).

        Returns:
            Teams of at least 3 members, ordered by team number.

        Raises:
            FormationError: Empty pool, team size below 3, too few
                participants, or no leaders (raised before any work is
                scheduled).
            ConcurrencyFailure: A precompute batch or formation task failed,
                timed out, or was interrupted. ``partial_teams`` holds what
                the remaining tasks produced.
        """
        validate_formation_input(participants, team_size)
        logger.info(
            "Starting team formation: %d participants, team size %d",
            len(participants), team_size,
        )
        started = time.monotonic()
        _reset_assignments(participants)

        team_count = plan_team_count(participants, team_size)
        logger.info("Forming %d teams...", team_count)

        compat = self._coordinator.precompute_compatibility(participants)
        pool = ParticipantPool(participants)
        run = self._coordinator.run_formation(pool, team_size, team_count, compat)

        if not run.succeeded:
            raise ConcurrencyFailure(
                f"{len(run.failures)} of {team_count} formation tasks did not complete",
                partial_teams=run.teams,
                failures=run.failures,
            )

        logger.info(
            "Team formation completed in %.0fms. Created %d teams.",
            (time.monotonic() - started) * 1000, len(run.teams),
        )
        return run.teams

    def form_teams_sequential(self, participants: Sequence[Participant], team_size: int) -> list[Team]:
        """Same contract as ``form_teams`` without touching the worker pool."""
        return form_teams_sequential(participants, team_size)

    # ------------------------------------------------------------------
    # Reporting & lifecycle
    # ------------------------------------------------------------------
    @staticmethod
    def statistics(teams: Sequence[Team] | None) -> FormationStatistics:
        return FormationStatistics.from_teams(teams)

    def shutdown(self, grace_seconds: float | None = None) -> None:
        self._coordinator.shutdown(grace_seconds)

    def __enter__(self) -> TeamBuilder:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


# ---------------------------------------------------------------------------
# Module-level API
# ---------------------------------------------------------------------------
def precompute_compatibility(
    participants: Sequence[Participant],
    settings: EngineSettings | None = None,
) -> CompatibilityMap:
    """Score every unordered pair in parallel; equal to ``build_compatibility_map``."""
    with TeamBuilder(settings) as builder:
        return builder.precompute_compatibility(participants)


def form_teams(
    participants: Sequence[Participant],
    team_size: int,
    settings: EngineSettings | None = None,
) -> list[Team]:
    """Form teams on a temporary worker pool. See ``TeamBuilder.form_teams``."""
    with TeamBuilder(settings) as builder:
        return builder.form_teams(participants, team_size)


def form_teams_sequential(participants: Sequence[Participant], team_size: int) -> list[Team]:
    """Form teams on the calling thread; the oracle for the concurrent path."""
    validate_formation_input(participants, team_size)
    started = time.monotonic()
    _reset_assignments(participants)

    team_count = plan_team_count(participants, team_size)
    compat = build_compatibility_map(participants)
    pool = ParticipantPool(participants)

    teams: list[Team] = []
    for team_number in range(1, team_count + 1):
        team = form_single_team(pool, team_size, team_number, compat)
        if team.size >= MIN_TEAM_SIZE:
            teams.append(team)
        elif team.size:
            release_team(team, pool)

    logger.info(
        "Sequential team formation completed in %.0fms. Created %d teams.",
        (time.monotonic() - started) * 1000, len(teams),
    )
    return teams
