"""Deterministic sample participant pools for demos and tests."""

from __future__ import annotations

import random

from teamforge.participant_models import ACTIVITIES, PLAYING_ROLES, Participant


_FIRST_NAMES: list[str] = [
    "Alex", "Blake", "Casey", "Dana", "Eli",
    "Finley", "Gray", "Harper", "Indy", "Jordan",
    "Kai", "Logan", "Morgan", "Noel", "Oakley",
    "Parker", "Quinn", "Reese", "Sage", "Taylor",
]
_LAST_NAMES: list[str] = [
    "Reed", "Stone", "Hale", "Brooks", "Lane",
    "Frost", "Wells", "Marsh", "Cole", "Shaw",
]


def _score_for_band(rng: random.Random, band: str) -> int:
    if band == "leader":
        return rng.randint(90, 100)
    if band == "balanced":
        return rng.randint(70, 89)
    return rng.randint(50, 69)


def generate_participants(
    count: int,
    seed: int | None = 42,
    leader_share: float = 0.2,
) -> list[Participant]:
    """Generate *count* valid participants spread across tiers, activities and roles.

    Args:
        count: Number of participants (ids ``P001``...).
        seed: Random seed for reproducibility.
        leader_share: Fraction of participants placed in the leader tier.

    Returns:
        Participants in id order.
    """
    if count < 0:
        raise ValueError("count must be non-negative")
    if not 0.0 <= leader_share <= 1.0:
        raise ValueError("leader_share must be between 0 and 1")

    rng = random.Random(seed)
    activities = list(ACTIVITIES)
    roles = list(PLAYING_ROLES)
    leaders = round(count * leader_share)

    bands = ["leader"] * leaders
    rest = count - leaders
    bands += ["balanced"] * (rest // 2) + ["thinker"] * (rest - rest // 2)
    rng.shuffle(bands)

    participants: list[Participant] = []
    for i, band in enumerate(bands):
        first = _FIRST_NAMES[i % len(_FIRST_NAMES)]
        last = _LAST_NAMES[(i // len(_FIRST_NAMES)) % len(_LAST_NAMES)]
        participants.append(Participant(
            id=f"P{i + 1:03d}",
            name=f"{first} {last}",
            email=f"{first}.{last}{i + 1}@example.com".lower(),
            age=rng.randint(18, 35),
            personality_score=_score_for_band(rng, band),
            preferred_activity=activities[i % len(activities)],  # type: ignore[arg-type]
            skill_level=rng.randint(1, 10),
            preferred_role=roles[rng.randrange(len(roles))],  # type: ignore[arg-type]
        ))
    return participants
