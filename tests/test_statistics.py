"""Tests for teamforge/engine/statistics.py."""

import pytest

from teamforge.engine.statistics import FormationStatistics
from teamforge.participant_models import Participant
from teamforge.team import Team


def _p(pid, score, activity="chess", role="strategist", skill=5):
    return Participant(
        id=pid,
        name=f"Player {pid}",
        email=f"{pid.lower()}@club.org",
        personality_score=score,
        preferred_activity=activity,
        skill_level=skill,
        preferred_role=role,
    )


def _team(number, members):
    team = Team(f"TEAM-{number:03d}", f"Team {number}", 4)
    for m in members:
        team.add_member(m)
    return team


class TestFormationStatistics:
    def test_none_and_empty(self):
        assert FormationStatistics.from_teams(None) == FormationStatistics()
        assert FormationStatistics.from_teams([]).total_teams == 0

    def test_aggregates(self):
        diverse = _team(1, [
            _p("P001", 95, "chess", "strategist"),
            _p("P002", 75, "fifa", "attacker"),
            _p("P003", 55, "csgo", "defender"),
        ])
        uniform = _team(2, [
            _p("P004", 92, "dota", "supporter", 2),
            _p("P005", 91, "dota", "supporter", 9),
            _p("P006", 60, "chess", "supporter", 5),
            _p("P007", 62, "fifa", "supporter", 5),
        ])
        stats = FormationStatistics.from_teams([diverse, uniform])
        assert stats.total_teams == 2
        assert stats.total_participants == 7
        assert stats.avg_diversity == pytest.approx((diverse.diversity_score + uniform.diversity_score) / 2)
        assert stats.avg_balance == pytest.approx((diverse.balance_score + uniform.balance_score) / 2)
        assert stats.max_overall == pytest.approx(diverse.overall_score)
        assert stats.min_overall == pytest.approx(uniform.overall_score)

    def test_summary(self):
        stats = FormationStatistics(
            total_teams=3,
            total_participants=12,
            avg_diversity=0.8,
            avg_balance=0.6,
            avg_overall=0.7,
            max_overall=0.9,
            min_overall=0.5,
        )
        text = stats.summary()
        assert "TEAM FORMATION STATISTICS" in text
        assert "Total Teams:" in text
        assert "Total Participants: 12" in text
        assert "80.0%" in text
        assert "Lowest Team Score:  50.0%" in text
