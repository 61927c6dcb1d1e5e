"""Constraint-aware greedy team formation.

Rules:
- minimum team size 3
- every team is seeded with exactly one leader (highest personality score)
- at most 2 leaders per team
- at most 2 members sharing one preferred activity

Scoring and selection functions are *pure*; ``form_single_team`` mutates the
shared ``ParticipantPool`` and the participants it places.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import nullcontext
import logging
import threading
from typing import Literal

from teamforge.engine.compatibility import CompatibilityMap, lookup
from teamforge.engine.pool import ParticipantPool
from teamforge.errors import (
    DuplicateParticipantError,
    EmptyPoolError,
    FormationCancelled,
    InsufficientParticipantsError,
    NoLeadersError,
    TeamSizeTooSmallError,
)
from teamforge.participant_models import Participant
from teamforge.personality_classifier import HIGHEST_TIER
from teamforge.team import MAX_LEADERS_PER_TEAM, MIN_TEAM_SIZE, Team


logger = logging.getLogger(__name__)

LockScope = Literal["team", "pick"]

MAX_SAME_ACTIVITY_PER_TEAM = 2

ACTIVITY_NOVELTY_WEIGHT = 0.30
ROLE_NOVELTY_WEIGHT = 0.25
PERSONALITY_FIT_WEIGHT = 0.20
SKILL_FIT_WEIGHT = 0.15
COMPATIBILITY_WEIGHT = 0.10

SKILL_FIT_PENALTY = 0.15

_TEAM_NAMES: tuple[str, ...] = (
    "Alpha", "Bravo", "Charlie", "Delta", "Echo",
    "Foxtrot", "Golf", "Hotel", "India", "Juliet",
    "Kilo", "Lima", "Mike", "November", "Oscar",
    "Papa", "Quebec", "Romeo", "Sierra", "Tango",
    "Phoenix", "Titans", "Legends", "Storm", "Thunder",
)


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------
def count_leaders(participants: Sequence[Participant]) -> int:
    return sum(1 for p in participants if p.personality_type == HIGHEST_TIER)


def _duplicate_ids(participants: Sequence[Participant]) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for p in participants:
        if p.id in seen and p.id not in duplicates:
            duplicates.append(p.id)
        seen.add(p.id)
    return duplicates


def validate_formation_input(participants: Sequence[Participant] | None, team_size: int) -> None:
    """Raise the matching ``FormationError`` subclass for unusable input.

    Checked in order: empty pool, team size, participant count, leaders,
    duplicate participant ids.
    """
    if not participants:
        raise EmptyPoolError("Participant list cannot be null or empty")
    if team_size < MIN_TEAM_SIZE:
        raise TeamSizeTooSmallError(
            f"Team size must be at least {MIN_TEAM_SIZE}",
            required=MIN_TEAM_SIZE,
            available=team_size,
        )
    if len(participants) < team_size:
        raise InsufficientParticipantsError(
            f"Not enough participants ({len(participants)}) for team size {team_size}",
            required=team_size,
            available=len(participants),
        )
    leaders = count_leaders(participants)
    if leaders == 0:
        raise NoLeadersError(
            "Cannot form teams: no leaders available. Each team requires at least 1 leader.",
            required=1,
            available=0,
        )
    duplicates = _duplicate_ids(participants)
    if duplicates:
        raise DuplicateParticipantError(
            f"Duplicate participant ids: {', '.join(duplicates)}",
            duplicate_ids=duplicates,
        )


def plan_team_count(participants: Sequence[Participant], team_size: int) -> int:
    """``len // team_size`` teams, capped at the number of leaders."""
    by_size = len(participants) // team_size
    leaders = count_leaders(participants)
    if leaders < by_size:
        logger.warning(
            "Only %d leaders for %d teams - each team requires 1 leader", leaders, by_size
        )
        return leaders
    return by_size


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------
def team_id(team_number: int) -> str:
    return f"TEAM-{team_number:03d}"


def team_name(team_number: int) -> str:
    """Cycle through the name list; later cycles get a numeric suffix."""
    cycle, index = divmod(team_number - 1, len(_TEAM_NAMES))
    base = _TEAM_NAMES[index]
    return base if cycle == 0 else f"{base} {cycle + 1}"


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------
def select_leader(available: Sequence[Participant]) -> Participant | None:
    """Leader with the highest personality score; first one wins ties."""
    best: Participant | None = None
    for p in available:
        if p.personality_type != HIGHEST_TIER:
            continue
        if best is None or p.personality_score > best.personality_score:
            best = p
    return best


def meets_team_constraints(team: Team, candidate: Participant) -> bool:
    """Leader cap and same-activity cap."""
    if (
        candidate.personality_type == HIGHEST_TIER
        and team.tier_count(HIGHEST_TIER) >= MAX_LEADERS_PER_TEAM
    ):
        return False
    if team.activity_count(candidate.preferred_activity) >= MAX_SAME_ACTIVITY_PER_TEAM:
        return False
    return True


def personality_fit(team: Team, candidate: Participant) -> float:
    tier = candidate.personality_type
    if not team.has_tier(tier):
        return 1.0
    if team.size > 0 and team.tier_count(tier) > team.size / 2:
        return 0.3
    return 0.6


def skill_fit(team: Team, candidate: Participant) -> float:
    if team.size == 0:
        return 1.0
    diff = abs(team.average_skill() - candidate.skill_level)
    return max(0.0, 1.0 - diff * SKILL_FIT_PENALTY)


def team_compatibility(team: Team, candidate: Participant, compat: CompatibilityMap) -> float:
    """Mean cached compatibility between *candidate* and current members."""
    members = team.members
    if not members:
        return 1.0
    return sum(lookup(compat, m, candidate) for m in members) / len(members)


def score_candidate(team: Team, candidate: Participant, compat: CompatibilityMap) -> float:
    activity_score = 0.3 if team.has_activity(candidate.preferred_activity) else 1.0
    role_score = 0.4 if team.has_role(candidate.preferred_role) else 1.0
    return (
        activity_score * ACTIVITY_NOVELTY_WEIGHT
        + role_score * ROLE_NOVELTY_WEIGHT
        + personality_fit(team, candidate) * PERSONALITY_FIT_WEIGHT
        + skill_fit(team, candidate) * SKILL_FIT_WEIGHT
        + team_compatibility(team, candidate, compat) * COMPATIBILITY_WEIGHT
    )


def select_best_candidate(
    team: Team,
    available: Sequence[Participant],
    compat: CompatibilityMap,
) -> Participant | None:
    """Highest-scoring candidate that passes the constraints.

    Only a strictly greater score replaces the current best, so the first
    candidate encountered wins ties.
    """
    best: Participant | None = None
    best_score = float("-inf")
    for candidate in available:
        if not meets_team_constraints(team, candidate):
            continue
        score = score_candidate(team, candidate, compat)
        if score > best_score:
            best, best_score = candidate, score
    return best


# ---------------------------------------------------------------------------
# Per-team formation
# ---------------------------------------------------------------------------
def release_team(team: Team, pool: ParticipantPool) -> list[Participant]:
    """Unassign every member of *team* and put them back into *pool*."""
    placed = team.members
    for member in placed:
        team.remove_member(member)
    pool.restore(placed)
    return placed


def _raise_if_cancelled(cancel: threading.Event | None, team_number: int) -> None:
    if cancel is None or not cancel.is_set():
        return
    logger.warning("Formation of team %d cancelled before commit", team_number)
    raise FormationCancelled(f"Formation of team {team_number} was cancelled")


def draft_team(
    available: Sequence[Participant],
    team_size: int,
    team_number: int,
    compat: CompatibilityMap,
    cancel: threading.Event | None = None,
) -> Team:
    """Seed with the best leader in *available*, then fill greedily.

    The result is a draft: members keep their current ``assigned_team`` and
    nothing is removed from any pool. It may hold fewer than ``team_size``
    members when no candidate satisfies the constraints.
    """
    draft = Team(team_id(team_number), team_name(team_number), team_size, assign_members=False)
    _raise_if_cancelled(cancel, team_number)

    if len(available) < team_size:
        logger.warning(
            "Cannot form team %d - only %d participants left", team_number, len(available)
        )
        return draft

    leader = select_leader(available)
    if leader is None:
        logger.warning("Cannot form team %d - no leader available", team_number)
        return draft
    draft.add_member(leader)
    remaining = [p for p in available if p.id != leader.id]

    while not draft.is_full and remaining:
        _raise_if_cancelled(cancel, team_number)
        candidate = select_best_candidate(draft, remaining, compat)
        if candidate is None:
            logger.debug("Team %d: no candidate meets the constraints", team_number)
            break
        if not draft.add_member(candidate):
            break
        remaining = [p for p in remaining if p.id != candidate.id]

    return draft


def form_single_team(
    pool: ParticipantPool,
    team_size: int,
    team_number: int,
    compat: CompatibilityMap,
    *,
    lock_scope: LockScope = "team",
    cancel: threading.Event | None = None,
) -> Team:
    """Draft a team from the pool and claim its members in one step.

    With ``lock_scope="team"`` the pool guard is held for the whole
    formation. With ``"pick"`` drafting runs unguarded on a snapshot and only
    the claim is guarded; a claim against a pool that changed meanwhile is
    refused and the team is redrafted. Either way every committed team is
    the one the sequential algorithm would form from the pool at that moment.

    A draft below the minimum team size claims nobody and an empty team is
    returned.

    Raises:
        FormationCancelled: *cancel* was set before the claim; nothing was
            taken from the pool.
    """
    region = pool.guard() if lock_scope == "team" else nullcontext()

    with region:
        while True:
            version, available = pool.versioned_snapshot()
            draft = draft_team(available, team_size, team_number, compat, cancel)
            keep = draft.members if draft.size >= MIN_TEAM_SIZE else []
            if pool.claim(keep, version):
                break
            logger.debug("Team %d: pool changed while drafting; redrafting", team_number)

    if draft.size and not keep:
        logger.info(
            "Team %d drafted only %d members (minimum %d); leaving them in the pool",
            team_number, draft.size, MIN_TEAM_SIZE,
        )

    team = Team(draft.id, draft.name, team_size)
    for member in keep:
        team.add_member(member)
    if team.size:
        logger.debug(
            "Team %d claimed %s", team_number, ", ".join(m.id for m in team.members)
        )
    return team
