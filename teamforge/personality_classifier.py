"""Personality tier definitions and score classification.

A five-question survey (each answer 1-5) is scaled x4 onto a 20-100 score,
which maps onto three ordered tiers:

- thinker:  50-69 (and the 20-49 remainder of the valid range)
- balanced: 70-89
- leader:   90-100

All functions are *pure*.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Literal

from pydantic import BaseModel, Field

from teamforge.errors import InvalidResponsesError, OutOfRangeScoreError


# ---------------------------------------------------------------------------
# Tier enum
# ---------------------------------------------------------------------------
PersonalityTier = Literal["thinker", "balanced", "leader"]

MIN_SCORE = 20  # 5 questions x 1 x 4
MAX_SCORE = 100  # 5 questions x 5 x 4
RESPONSE_COUNT = 5
RESPONSE_MIN = 1
RESPONSE_MAX = 5
RESPONSE_SCALE = 4


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
class TierDefinition(BaseModel):
    """A single personality tier and its inclusive score band."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=30)
    rank: int = Field(..., ge=0)
    min_score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    max_score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    description: str = Field(..., min_length=5)
    role_recommendation: str = Field(..., min_length=5)

    def matches(self, score: int) -> bool:
        return self.min_score <= score <= self.max_score


# ---------------------------------------------------------------------------
# Pre-defined tiers, ascending by rank
# ---------------------------------------------------------------------------
PERSONALITY_TIERS: dict[str, TierDefinition] = {
    "thinker": TierDefinition(
        id="thinker",
        name="Thinker",
        rank=0,
        min_score=50,
        max_score=69,
        description="Observant and analytical, prefers planning before action",
        role_recommendation=(
            "Recommended for: Strategist, Analyst, Planner. Best suited for developing "
            "tactics, analyzing opponents, and identifying optimal strategies."
        ),
    ),
    "balanced": TierDefinition(
        id="balanced",
        name="Balanced",
        rank=1,
        min_score=70,
        max_score=89,
        description="Adaptive and communicative team-oriented player",
        role_recommendation=(
            "Recommended for: Flex Player, Adaptable Roles. Excellent at filling gaps "
            "in team composition and mediating between team members."
        ),
    ),
    "leader": TierDefinition(
        id="leader",
        name="Leader",
        rank=2,
        min_score=90,
        max_score=100,
        description="Confident decision-maker who naturally takes charge",
        role_recommendation=(
            "Recommended for: Team Captain, Shot Caller, Strategic Decision Maker. "
            "Best suited to coordinate team actions and maintain morale."
        ),
    ),
}

LOWEST_TIER: PersonalityTier = "thinker"
HIGHEST_TIER: PersonalityTier = "leader"


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------
def is_valid_score(score: int) -> bool:
    """Return True when *score* lies in ``[MIN_SCORE, MAX_SCORE]``."""
    return MIN_SCORE <= score <= MAX_SCORE


def is_valid_response(response: int) -> bool:
    """Return True for a single survey answer in 1-5."""
    return RESPONSE_MIN <= response <= RESPONSE_MAX


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def classify(score: int) -> PersonalityTier:
    """Map a personality score onto its tier.

    Args:
        score: Personality score, 20-100 inclusive.

    Returns:
        The tier whose band contains *score*; scores below every band fall
        back to the lowest tier.

    Raises:
        OutOfRangeScoreError: If *score* lies outside ``[MIN_SCORE, MAX_SCORE]``.
    """
    if not is_valid_score(score):
        raise OutOfRangeScoreError(score, MIN_SCORE, MAX_SCORE)
    for tier_id, tier in PERSONALITY_TIERS.items():
        if tier.matches(score):
            return tier_id  # type: ignore[return-value]
    return LOWEST_TIER


def score_from_responses(responses: Sequence[int]) -> int:
    """Scale five 1-5 survey answers onto the 20-100 score range.

    Raises:
        InvalidResponsesError: Wrong number of answers, or an answer that is
            not an integer in 1-5.
    """
    if responses is None or len(responses) != RESPONSE_COUNT:
        received = "None" if responses is None else str(len(responses))
        raise InvalidResponsesError(
            f"Exactly {RESPONSE_COUNT} personality responses required. Received: {received}"
        )

    total = 0
    for i, response in enumerate(responses, start=1):
        if isinstance(response, bool) or not isinstance(response, int) or not is_valid_response(response):
            raise InvalidResponsesError(
                f"Response {i} is invalid: {response!r} (must be {RESPONSE_MIN}-{RESPONSE_MAX})"
            )
        total += response
    return total * RESPONSE_SCALE


def tier_rank(tier: PersonalityTier) -> int:
    return PERSONALITY_TIERS[tier].rank


def next_tier(score: int) -> PersonalityTier | None:
    """Return the tier above the one *score* falls in, or None at the top."""
    current = classify(score)
    rank = tier_rank(current)
    for tier_id, tier in PERSONALITY_TIERS.items():
        if tier.rank == rank + 1:
            return tier_id  # type: ignore[return-value]
    return None


def points_to_next_tier(score: int) -> int:
    """Points needed to reach the next tier; 0 when already at the top."""
    upcoming = next_tier(score)
    if upcoming is None:
        return 0
    return PERSONALITY_TIERS[upcoming].min_score - score


# ---------------------------------------------------------------------------
# Descriptive text
# ---------------------------------------------------------------------------
def describe(score: int) -> str:
    """Human-readable description, e.g. ``"Leader (95 points): ..."``."""
    if not is_valid_score(score):
        return "Invalid score - cannot determine personality type"
    tier = PERSONALITY_TIERS[classify(score)]
    return f"{tier.name} ({score} points): {tier.description}"


def role_recommendation(tier: PersonalityTier) -> str:
    return PERSONALITY_TIERS[tier].role_recommendation


def compatibility_analysis(a: PersonalityTier, b: PersonalityTier) -> str:
    """Describe how well two tiers complement each other."""
    # Imported here: the engine package depends on this module.
    from teamforge.engine.compatibility import personality_component

    name_a = PERSONALITY_TIERS[a].name
    name_b = PERSONALITY_TIERS[b].name
    score = personality_component(a, b)
    if score >= 0.9:
        return f"{name_a} + {name_b} = Excellent complement! These personalities balance each other well."
    if score >= 0.7:
        return f"{name_a} + {name_b} = Good synergy. These types work well together."
    return f"{name_a} + {name_b} = Similar types. Team may benefit from more diversity."


def distribution_summary(scores: Iterable[int]) -> str:
    """Summarize how many scores land in each tier."""
    scores = list(scores)
    if not scores:
        return "No scores to analyze."

    counts = {tier_id: 0 for tier_id in PERSONALITY_TIERS}
    invalid = 0
    for score in scores:
        if not is_valid_score(score):
            invalid += 1
            continue
        counts[classify(score)] += 1

    n = len(scores)
    lines = [f"Personality Distribution (n={n}):"]
    for tier_id in sorted(PERSONALITY_TIERS, key=lambda t: -PERSONALITY_TIERS[t].rank):
        label = f"{PERSONALITY_TIERS[tier_id].name}:"
        lines.append(f"   {label:<10}{counts[tier_id]} ({counts[tier_id] * 100.0 / n:.1f}%)")
    if invalid:
        lines.append(f"   {'Invalid:':<10}{invalid}")
    return "\n".join(lines)
