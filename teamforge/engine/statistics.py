"""Aggregate scores across the teams of one formation run.

All functions are *pure*.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from pydantic import BaseModel, Field

from teamforge.team import Team


class FormationStatistics(BaseModel):
    """Summary of a formation run (all scores 0-1)."""

    total_teams: int = Field(default=0, ge=0)
    total_participants: int = Field(default=0, ge=0)
    avg_diversity: float = Field(default=0.0, ge=0.0, le=1.0)
    avg_balance: float = Field(default=0.0, ge=0.0, le=1.0)
    avg_overall: float = Field(default=0.0, ge=0.0, le=1.0)
    max_overall: float = Field(default=0.0, ge=0.0, le=1.0)
    min_overall: float = Field(default=0.0, ge=0.0, le=1.0)

    @classmethod
    def from_teams(cls, teams: Sequence[Team] | None) -> FormationStatistics:
        if not teams:
            return cls()
        diversity = np.array([t.diversity_score for t in teams], dtype=float)
        balance = np.array([t.balance_score for t in teams], dtype=float)
        overall = np.array([t.overall_score for t in teams], dtype=float)
        return cls(
            total_teams=len(teams),
            total_participants=sum(t.size for t in teams),
            avg_diversity=float(np.mean(diversity)),
            avg_balance=float(np.mean(balance)),
            avg_overall=float(np.mean(overall)),
            max_overall=float(np.max(overall)),
            min_overall=float(np.min(overall)),
        )

    def summary(self) -> str:
        rule = "=" * 48
        rows = [
            ("Total Teams:", f"{self.total_teams}"),
            ("Total Participants:", f"{self.total_participants}"),
            ("Avg Diversity:", f"{self.avg_diversity * 100:.1f}%"),
            ("Avg Balance:", f"{self.avg_balance * 100:.1f}%"),
            ("Avg Overall Score:", f"{self.avg_overall * 100:.1f}%"),
            ("Best Team Score:", f"{self.max_overall * 100:.1f}%"),
            ("Lowest Team Score:", f"{self.min_overall * 100:.1f}%"),
        ]
        lines = [rule, "         TEAM FORMATION STATISTICS", rule]
        lines.extend(f"{label:<20}{value}" for label, value in rows)
        lines.append(rule)
        return "\n".join(lines)
