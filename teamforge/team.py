"""Mutable team roster with derived diversity / balance scores."""

from __future__ import annotations

from collections import Counter

from teamforge.engine.team_metrics import TeamMetrics, calculate_team_metrics
from teamforge.participant_models import (
    ACTIVITIES,
    PLAYING_ROLES,
    UNASSIGNED,
    Activity,
    Participant,
    PlayingRole,
)
from teamforge.personality_classifier import HIGHEST_TIER, PERSONALITY_TIERS, PersonalityTier


MIN_TEAM_SIZE = 3
MAX_LEADERS_PER_TEAM = 2
MIN_LEADERS_PER_TEAM = 1

_RULE = "=" * 64


class Team:
    """A team of participants.

    Members keep insertion order. Scores are recomputed from the full member
    set after every successful add / remove and are never set directly.
    With ``assign_members=False`` the team is a draft and leaves each
    member's ``assigned_team`` untouched.
    """

    def __init__(
        self,
        team_id: str,
        name: str,
        target_size: int,
        *,
        assign_members: bool = True,
    ) -> None:
        if not team_id or not team_id.strip():
            raise ValueError("Team ID cannot be empty")
        if not name or not name.strip():
            raise ValueError("Team name cannot be empty")
        if target_size < MIN_TEAM_SIZE:
            raise ValueError(f"Team size must be at least {MIN_TEAM_SIZE}")

        self.id = team_id.strip()
        self.name = name.strip()
        self.target_size = target_size
        self.assign_members = assign_members
        self._members: list[Participant] = []
        self._metrics = TeamMetrics()

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------
    def add_member(self, participant: Participant) -> bool:
        """Add *participant*; returns False when full, duplicate, or over the leader cap."""
        if participant is None or self.is_full or self.contains(participant):
            return False
        if (
            participant.personality_type == HIGHEST_TIER
            and self.tier_count(HIGHEST_TIER) >= MAX_LEADERS_PER_TEAM
        ):
            return False

        self._members.append(participant)
        if self.assign_members:
            participant.assigned_team = self.name
        self._recalculate()
        return True

    def remove_member(self, participant: Participant) -> bool:
        """Remove *participant*; returns False when not a member."""
        if participant is None:
            return False
        for i, member in enumerate(self._members):
            if member.id == participant.id:
                del self._members[i]
                if self.assign_members:
                    member.assigned_team = UNASSIGNED
                self._recalculate()
                return True
        return False

    def contains(self, participant: Participant) -> bool:
        return any(m.id == participant.id for m in self._members)

    def _recalculate(self) -> None:
        self._metrics = calculate_team_metrics(self._members)

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------
    @property
    def diversity_score(self) -> float:
        return self._metrics.diversity

    @property
    def balance_score(self) -> float:
        return self._metrics.balance

    @property
    def overall_score(self) -> float:
        return self._metrics.overall

    @property
    def metrics(self) -> TeamMetrics:
        return self._metrics

    # ------------------------------------------------------------------
    # Size & validity
    # ------------------------------------------------------------------
    @property
    def members(self) -> list[Participant]:
        return list(self._members)

    @property
    def size(self) -> int:
        return len(self._members)

    def __len__(self) -> int:
        return len(self._members)

    @property
    def is_full(self) -> bool:
        return len(self._members) >= self.target_size

    @property
    def remaining_spots(self) -> int:
        return max(0, self.target_size - len(self._members))

    @property
    def is_complete(self) -> bool:
        """At least the minimum size and at least one leader."""
        return len(self._members) >= MIN_TEAM_SIZE and self.has_tier(HIGHEST_TIER)

    @property
    def is_valid(self) -> bool:
        """Minimum size and between 1 and 2 leaders."""
        leaders = self.tier_count(HIGHEST_TIER)
        return (
            len(self._members) >= MIN_TEAM_SIZE
            and MIN_LEADERS_PER_TEAM <= leaders <= MAX_LEADERS_PER_TEAM
        )

    # ------------------------------------------------------------------
    # Composition queries
    # ------------------------------------------------------------------
    def has_tier(self, tier: PersonalityTier) -> bool:
        return any(m.personality_type == tier for m in self._members)

    def tier_count(self, tier: PersonalityTier) -> int:
        return sum(1 for m in self._members if m.personality_type == tier)

    def has_role(self, role: PlayingRole) -> bool:
        return any(m.preferred_role == role for m in self._members)

    def role_count(self, role: PlayingRole) -> int:
        return sum(1 for m in self._members if m.preferred_role == role)

    def has_activity(self, activity: Activity) -> bool:
        return any(m.preferred_activity == activity for m in self._members)

    def activity_count(self, activity: Activity) -> int:
        return sum(1 for m in self._members if m.preferred_activity == activity)

    def unique_activities(self) -> set[str]:
        return {m.preferred_activity for m in self._members}

    def unique_roles(self) -> set[str]:
        return {m.preferred_role for m in self._members}

    def unique_tiers(self) -> set[str]:
        return {m.personality_type for m in self._members}

    def average_skill(self) -> float:
        if not self._members:
            return 0.0
        return sum(m.skill_level for m in self._members) / len(self._members)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def __repr__(self) -> str:
        return (
            f"Team[{self.id} - {self.name}] Size: {self.size}/{self.target_size}, "
            f"Diversity: {self.diversity_score * 100:.2f}%, Balance: {self.balance_score * 100:.2f}%"
        )

    def detailed_summary(self) -> str:
        tier_counts = Counter(m.personality_type for m in self._members)
        lines = [
            _RULE,
            f" TEAM: {self.name:<20} ID: {self.id:<10}",
            _RULE,
            (
                f" Members: {self.size}/{self.target_size}        "
                f"Diversity: {self.diversity_score * 100:.1f}%        "
                f"Balance: {self.balance_score * 100:.1f}%"
            ),
            _RULE,
            " TEAM MEMBERS:",
        ]
        lines.extend(
            f"  - {m.name} ({PERSONALITY_TIERS[m.personality_type].name}) - "
            f"{PLAYING_ROLES[m.preferred_role].name}, "
            f"{ACTIVITIES[m.preferred_activity].name}, Skill:{m.skill_level}"
            for m in self._members
        )
        lines += [
            _RULE,
            f" Activities: {', '.join(sorted(ACTIVITIES[a].name for a in self.unique_activities()))}",
            f" Roles: {', '.join(sorted(PLAYING_ROLES[r].name for r in self.unique_roles()))}",
            " Personalities: "
            + ", ".join(f"{PERSONALITY_TIERS[t].name}={c}" for t, c in sorted(tier_counts.items())),
            f" Leaders: {tier_counts.get(HIGHEST_TIER, 0)} "
            f"(Min:{MIN_LEADERS_PER_TEAM}, Max:{MAX_LEADERS_PER_TEAM})",
            _RULE,
        ]
        return "\n".join(lines)
