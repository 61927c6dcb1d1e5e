"""Team diversity and balance scoring.

All functions are *pure*; ``Team`` calls ``calculate_team_metrics`` after
every membership change and always passes the full member set.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
import math

import numpy as np
from pydantic import BaseModel, Field

from teamforge.participant_models import ACTIVITIES, PLAYING_ROLES, Participant
from teamforge.personality_classifier import HIGHEST_TIER, PERSONALITY_TIERS


# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------
ACTIVITY_DIVERSITY_WEIGHT = 0.30
ROLE_DIVERSITY_WEIGHT = 0.40
TIER_DIVERSITY_WEIGHT = 0.30

SKILL_BALANCE_WEIGHT = 0.40
TIER_BALANCE_WEIGHT = 0.40
LEADER_PRESENCE_WEIGHT = 0.20

SKILL_VARIANCE_SCALE = 25.0


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------
class TeamMetrics(BaseModel):
    """Diversity and balance for one member set."""

    diversity: float = Field(ge=0.0, le=1.0, default=0.0)
    balance: float = Field(ge=0.0, le=1.0, default=0.0)

    @property
    def overall(self) -> float:
        return (self.diversity + self.balance) / 2.0


# ---------------------------------------------------------------------------
# Diversity
# ---------------------------------------------------------------------------
def _distinct_fraction(values: list[str], kinds: int) -> float:
    """Distinct values relative to ``min(len(values), kinds)``."""
    max_possible = min(len(values), kinds)
    if max_possible == 0:
        return 0.0
    return len(set(values)) / max_possible


def activity_diversity(members: Sequence[Participant]) -> float:
    return _distinct_fraction([m.preferred_activity for m in members], len(ACTIVITIES))


def role_diversity(members: Sequence[Participant]) -> float:
    return _distinct_fraction([m.preferred_role for m in members], len(PLAYING_ROLES))


def tier_diversity(members: Sequence[Participant]) -> float:
    return _distinct_fraction([m.personality_type for m in members], len(PERSONALITY_TIERS))


def calculate_diversity(members: Sequence[Participant]) -> float:
    if len(members) < 2:
        return 0.0
    return (
        activity_diversity(members) * ACTIVITY_DIVERSITY_WEIGHT
        + role_diversity(members) * ROLE_DIVERSITY_WEIGHT
        + tier_diversity(members) * TIER_DIVERSITY_WEIGHT
    )


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------
def skill_balance(members: Sequence[Participant]) -> float:
    """``max(0, 1 - variance / 25)`` over population skill variance."""
    if len(members) < 2:
        return 0.0
    variance = float(np.var([m.skill_level for m in members]))
    return max(0.0, 1.0 - variance / SKILL_VARIANCE_SCALE)


def tier_balance(members: Sequence[Participant]) -> float:
    """1.0 unless one tier holds more than half (rounded up) of the team."""
    if not members:
        return 0.0
    counts = Counter(m.personality_type for m in members)
    max_allowed = math.ceil(len(members) / 2)
    max_count = max(counts.values())
    if max_count <= max_allowed:
        return 1.0
    return max_allowed / max_count


def leader_presence(members: Sequence[Participant]) -> float:
    return 1.0 if any(m.personality_type == HIGHEST_TIER for m in members) else 0.0


def calculate_balance(members: Sequence[Participant]) -> float:
    if len(members) < 2:
        return 0.0
    return (
        skill_balance(members) * SKILL_BALANCE_WEIGHT
        + tier_balance(members) * TIER_BALANCE_WEIGHT
        + leader_presence(members) * LEADER_PRESENCE_WEIGHT
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def calculate_team_metrics(members: Sequence[Participant]) -> TeamMetrics:
    """Recompute diversity and balance from scratch for *members*."""
    if len(members) < 2:
        return TeamMetrics()
    # Clamp float noise at the upper bound (e.g. 0.3 + 0.4 + 0.3).
    return TeamMetrics(
        diversity=min(1.0, calculate_diversity(members)),
        balance=min(1.0, calculate_balance(members)),
    )
