"""Participant model and the closed activity / role sets.

Defines 6 activities (sport and e-sport), 5 general playing roles and the
``Participant`` record consumed by the formation engine.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from teamforge.personality_classifier import (
    HIGHEST_TIER,
    MAX_SCORE,
    MIN_SCORE,
    PERSONALITY_TIERS,
    PersonalityTier,
    classify,
)


# ---------------------------------------------------------------------------
# Closed enums
# ---------------------------------------------------------------------------
Activity = Literal["chess", "fifa", "basketball", "csgo", "dota", "valorant"]
ActivityCategory = Literal["sport", "esport"]
PlayingRole = Literal["strategist", "attacker", "defender", "supporter", "coordinator"]

UNASSIGNED = "Unassigned"

PARTICIPANT_ID_PATTERN = r"^P\d{3,}$"
EMAIL_PATTERN = r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"

MIN_AGE = 16
MAX_AGE = 80
DEFAULT_AGE = 20
MIN_SKILL = 1
MAX_SKILL = 10


# ---------------------------------------------------------------------------
# Registry models
# ---------------------------------------------------------------------------
class ActivityDefinition(BaseModel):
    """A preferred activity (game or sport)."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=30)
    category: ActivityCategory
    recommended_team_size: int = Field(..., ge=1)


class RoleDefinition(BaseModel):
    """A general playing role applicable across activities."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=30)
    description: str = Field(..., min_length=5)


ACTIVITIES: dict[str, ActivityDefinition] = {
    "chess": ActivityDefinition(id="chess", name="Chess", category="sport", recommended_team_size=2),
    "fifa": ActivityDefinition(id="fifa", name="FIFA", category="esport", recommended_team_size=2),
    "basketball": ActivityDefinition(id="basketball", name="Basketball", category="sport", recommended_team_size=5),
    "csgo": ActivityDefinition(id="csgo", name="CS:GO", category="esport", recommended_team_size=5),
    "dota": ActivityDefinition(id="dota", name="DOTA 2", category="esport", recommended_team_size=5),
    "valorant": ActivityDefinition(id="valorant", name="Valorant", category="esport", recommended_team_size=5),
}

PLAYING_ROLES: dict[str, RoleDefinition] = {
    "strategist": RoleDefinition(id="strategist", name="Strategist", description="Focuses on tactics and planning"),
    "attacker": RoleDefinition(id="attacker", name="Attacker", description="Frontline player with offensive focus"),
    "defender": RoleDefinition(id="defender", name="Defender", description="Protective player focused on defense"),
    "supporter": RoleDefinition(
        id="supporter", name="Supporter", description="Jack-of-all-trades adapting to team needs"
    ),
    "coordinator": RoleDefinition(
        id="coordinator", name="Coordinator", description="Communication lead keeping team organized"
    ),
}


# ---------------------------------------------------------------------------
# Participant
# ---------------------------------------------------------------------------
class Participant(BaseModel):
    """A validated club participant.

    Identity, survey and preference fields are frozen once constructed.
    ``personality_type`` is always re-derived from ``personality_score``;
    only ``assigned_team`` changes, and only through ``Team.add_member`` /
    ``Team.remove_member``.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., pattern=PARTICIPANT_ID_PATTERN, frozen=True)
    name: str = Field(..., min_length=2, max_length=100, frozen=True)
    email: str = Field(..., pattern=EMAIL_PATTERN, frozen=True)
    age: int = Field(default=DEFAULT_AGE, ge=MIN_AGE, le=MAX_AGE, frozen=True)
    personality_score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE, frozen=True)
    preferred_activity: Activity = Field(..., frozen=True)
    skill_level: int = Field(..., ge=MIN_SKILL, le=MAX_SKILL, frozen=True)
    preferred_role: PlayingRole = Field(..., frozen=True)
    assigned_team: str = UNASSIGNED

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def personality_type(self) -> PersonalityTier:
        return classify(self.personality_score)

    @property
    def is_leader(self) -> bool:
        return self.personality_type == HIGHEST_TIER

    @property
    def is_assigned(self) -> bool:
        return self.assigned_team != UNASSIGNED

    def summary(self) -> str:
        """One-line table row for reports."""
        return (
            f"{self.id:<6} | {self.name:<18} | "
            f"{PERSONALITY_TIERS[self.personality_type].name:<8} | "
            f"{ACTIVITIES[self.preferred_activity].name:<12} | "
            f"Skill:{self.skill_level:<2} | "
            f"{PLAYING_ROLES[self.preferred_role].name:<12}"
        )


def get_activity(activity_id: str) -> ActivityDefinition | None:
    """Look up an activity by ID."""
    return ACTIVITIES.get(activity_id)


def get_role(role_id: str) -> RoleDefinition | None:
    """Look up a playing role by ID."""
    return PLAYING_ROLES.get(role_id)
