"""Pairwise compatibility scoring between participants.

All functions are *pure*: no side-effects, no I/O.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType

from pydantic import BaseModel, Field

from teamforge.participant_models import Participant
from teamforge.personality_classifier import PersonalityTier, tier_rank


CompatibilityMap = Mapping[str, float]

DEFAULT_PAIR_SCORE = 0.5

PERSONALITY_WEIGHT = 0.40
ROLE_WEIGHT = 0.30
SKILL_WEIGHT = 0.30


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------
class PairCompatibility(BaseModel):
    """Score for a single participant pair."""

    member_a_id: str
    member_b_id: str
    score: float = Field(ge=0.0, le=1.0)
    detail: str = ""


# ---------------------------------------------------------------------------
# Scoring tables
# ---------------------------------------------------------------------------
# Tier distance → score. Same tier is redundant; maximum contrast scores best.
_PERSONALITY_DISTANCE_SCORE: dict[int, float] = {0: 0.5, 1: 0.8, 2: 1.0}

# (max skill difference, score), checked in order.
_SKILL_STEPS: tuple[tuple[int, float], ...] = ((1, 1.0), (2, 0.8), (3, 0.6), (4, 0.4))
_SKILL_FLOOR = 0.2


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------
def personality_component(a: PersonalityTier, b: PersonalityTier) -> float:
    distance = abs(tier_rank(a) - tier_rank(b))
    return _PERSONALITY_DISTANCE_SCORE[distance]


def role_component(a: Participant, b: Participant) -> float:
    return 1.0 if a.preferred_role != b.preferred_role else 0.5


def skill_component(a: Participant, b: Participant) -> float:
    diff = abs(a.skill_level - b.skill_level)
    for max_diff, score in _SKILL_STEPS:
        if diff <= max_diff:
            return score
    return _SKILL_FLOOR


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def pair_key(a_id: str, b_id: str) -> str:
    """Order-independent key for a pair: smaller id first."""
    return f"{a_id}-{b_id}" if a_id < b_id else f"{b_id}-{a_id}"


def calculate_pair_compatibility(a: Participant, b: Participant) -> float:
    """Return symmetric compatibility (0-1) for two participants."""
    return (
        personality_component(a.personality_type, b.personality_type) * PERSONALITY_WEIGHT
        + role_component(a, b) * ROLE_WEIGHT
        + skill_component(a, b) * SKILL_WEIGHT
    )


def iter_pairs(participants: Sequence[Participant]):
    """Yield every unordered pair once (upper triangle)."""
    for i, a in enumerate(participants):
        for b in participants[i + 1:]:
            yield a, b


def score_pairs(pairs: Sequence[tuple[Participant, Participant]]) -> dict[str, float]:
    """Score a batch of pairs into a plain ``{pair_key: score}`` dict."""
    return {pair_key(a.id, b.id): calculate_pair_compatibility(a, b) for a, b in pairs}


def freeze(scores: dict[str, float]) -> CompatibilityMap:
    """Wrap a score dict in a read-only view."""
    return MappingProxyType(dict(scores))


def build_compatibility_map(participants: Sequence[Participant]) -> CompatibilityMap:
    """Sequentially score all unordered pairs into a read-only map."""
    return freeze(score_pairs(list(iter_pairs(list(participants)))))


def lookup(
    compat: CompatibilityMap,
    a: Participant,
    b: Participant,
    default: float = DEFAULT_PAIR_SCORE,
) -> float:
    return compat.get(pair_key(a.id, b.id), default)


# ---------------------------------------------------------------------------
# Reporting helpers
# ---------------------------------------------------------------------------
def pair_compatibility_matrix(participants: Sequence[Participant]) -> list[PairCompatibility]:
    """Compute NxN pair compatibility (upper-triangle only)."""
    results: list[PairCompatibility] = []
    for a, b in iter_pairs(list(participants)):
        score = calculate_pair_compatibility(a, b)
        results.append(PairCompatibility(
            member_a_id=a.id,
            member_b_id=b.id,
            score=score,
            detail=_pair_detail(score),
        ))
    return results


def _pair_detail(score: float) -> str:
    if score >= 0.85:
        return "Strongly complementary, smooth collaboration"
    if score >= 0.7:
        return "Compatible, occasional differences"
    if score >= 0.55:
        return "Some friction, watch communication"
    return "Very similar or far apart in skill, needs extra attention"
