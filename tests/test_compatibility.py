"""Tests for teamforge/engine/compatibility.py."""

import pytest

from teamforge.engine.compatibility import (
    DEFAULT_PAIR_SCORE,
    build_compatibility_map,
    calculate_pair_compatibility,
    iter_pairs,
    lookup,
    pair_compatibility_matrix,
    pair_key,
    personality_component,
    role_component,
    score_pairs,
    skill_component,
)
from teamforge.participant_models import Participant


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


class TestComponents:
    def test_personality_same_tier(self):
        assert personality_component("leader", "leader") == 0.5

    def test_personality_one_band_apart(self):
        assert personality_component("leader", "balanced") == 0.8
        assert personality_component("thinker", "balanced") == 0.8

    def test_personality_two_bands_apart(self):
        assert personality_component("thinker", "leader") == 1.0

    def test_role(self):
        a = _p("P001", 95, role="strategist")
        assert role_component(a, _p("P002", 95, role="attacker")) == 1.0
        assert role_component(a, _p("P003", 95, role="strategist")) == 0.5

    @pytest.mark.parametrize("skill_b,expected", [
        (5, 1.0), (6, 1.0), (7, 0.8), (8, 0.6), (9, 0.4), (10, 0.2), (1, 0.4),
    ])
    def test_skill_steps(self, skill_b, expected):
        assert skill_component(_p("P001", 60, skill=5), _p("P002", 60, skill=skill_b)) == expected


class TestPairCompatibility:
    def test_ideal_pair(self):
        """Opposite tiers, different roles, equal skill."""
        a = _p("P001", 95, role="strategist", skill=5)
        b = _p("P002", 55, role="attacker", skill=5)
        assert calculate_pair_compatibility(a, b) == pytest.approx(1.0)

    def test_weighted_components(self):
        a = _p("P001", 95, role="strategist", skill=2)
        b = _p("P002", 92, role="strategist", skill=8)
        # 0.5 * 0.4 + 0.5 * 0.3 + 0.2 * 0.3
        assert calculate_pair_compatibility(a, b) == pytest.approx(0.41)

    def test_symmetric(self):
        a = _p("P001", 95, role="defender", skill=3)
        b = _p("P002", 72, role="attacker", skill=6)
        assert calculate_pair_compatibility(a, b) == calculate_pair_compatibility(b, a)

    def test_in_unit_range(self):
        people = [_p(f"P00{i}", s, skill=k) for i, (s, k) in enumerate([(95, 1), (75, 10), (20, 5)], start=1)]
        for a, b in iter_pairs(people):
            assert 0.0 <= calculate_pair_compatibility(a, b) <= 1.0


class TestCompatibilityMap:
    def test_pair_key_order_independent(self):
        assert pair_key("P002", "P001") == "P001-P002"
        assert pair_key("P001", "P002") == "P001-P002"

    def test_iter_pairs_upper_triangle(self):
        people = [_p(f"P00{i}", 60) for i in range(1, 5)]
        pairs = list(iter_pairs(people))
        assert len(pairs) == 6
        assert all(a.id < b.id for a, b in pairs)

    def test_build_map(self):
        people = [_p("P001", 95), _p("P002", 75, role="attacker"), _p("P003", 55)]
        compat = build_compatibility_map(people)
        assert set(compat) == {"P001-P002", "P001-P003", "P002-P003"}

    def test_map_is_read_only(self):
        compat = build_compatibility_map([_p("P001", 95), _p("P002", 75)])
        with pytest.raises(TypeError):
            compat["P001-P002"] = 0.0

    def test_build_map_is_deterministic(self):
        people = [_p("P001", 95), _p("P002", 75, role="attacker", skill=9), _p("P003", 55)]
        assert dict(build_compatibility_map(people)) == dict(build_compatibility_map(people))

    def test_score_pairs_matches_map(self):
        people = [_p("P001", 95), _p("P002", 75, skill=8)]
        assert score_pairs(list(iter_pairs(people))) == dict(build_compatibility_map(people))

    def test_lookup_either_order(self):
        a, b = _p("P001", 95), _p("P002", 55, role="attacker")
        compat = build_compatibility_map([a, b])
        assert lookup(compat, a, b) == lookup(compat, b, a) == pytest.approx(1.0)

    def test_lookup_default(self):
        a, b = _p("P001", 95), _p("P002", 55)
        assert lookup({}, a, b) == DEFAULT_PAIR_SCORE
        assert lookup({}, a, b, default=0.0) == 0.0

    def test_empty_and_single(self):
        assert len(build_compatibility_map([])) == 0
        assert len(build_compatibility_map([_p("P001", 95)])) == 0


class TestMatrix:
    def test_matrix_details(self):
        people = [_p("P001", 95), _p("P002", 55, role="attacker"), _p("P003", 95, skill=10)]
        matrix = pair_compatibility_matrix(people)
        assert len(matrix) == 3
        best = next(m for m in matrix if m.member_b_id == "P002")
        assert best.score == pytest.approx(1.0)
        assert best.detail.startswith("Strongly complementary")
