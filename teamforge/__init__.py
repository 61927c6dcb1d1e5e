"""Balanced team formation for gaming and sports clubs."""

from .config import EngineSettings
from .engine.statistics import FormationStatistics
from .errors import (
    ClassificationError,
    ConcurrencyFailure,
    DataLoadError,
    FormationError,
    TeamForgeError,
)
from .participant_models import Participant
from .personality_classifier import classify, score_from_responses
from .team import Team
from .team_builder import TeamBuilder, form_teams, form_teams_sequential, precompute_compatibility

__all__ = [
    "ClassificationError",
    "ConcurrencyFailure",
    "DataLoadError",
    "EngineSettings",
    "FormationError",
    "FormationStatistics",
    "Participant",
    "Team",
    "TeamBuilder",
    "TeamForgeError",
    "classify",
    "form_teams",
    "form_teams_sequential",
    "precompute_compatibility",
    "score_from_responses",
]
