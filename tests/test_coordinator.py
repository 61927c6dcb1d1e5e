"""Tests for teamforge/engine/coordinator.py."""

import logging
import threading
import time
from unittest.mock import patch

import pytest

from teamforge.config import EngineSettings
from teamforge.engine import formation
from teamforge.engine.compatibility import build_compatibility_map, freeze
from teamforge.engine.coordinator import ConcurrencyCoordinator, FormationRun
from teamforge.engine.pool import ParticipantPool
from teamforge.errors import ConcurrencyFailure, FormationCancelled
from teamforge.participant_models import UNASSIGNED
from teamforge.sample_data import generate_participants


def _wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def participants():
    return generate_participants(20, seed=7)


class TestFormationRun:
    def test_succeeded(self):
        assert FormationRun().succeeded


class TestPrecompute:
    def test_matches_sequential_map(self, participants):
        settings = EngineSettings(max_workers=4, pair_batch_size=16)
        with ConcurrencyCoordinator(settings) as coordinator:
            compat = coordinator.precompute_compatibility(participants)
        assert dict(compat) == dict(build_compatibility_map(participants))
        assert len(compat) == 20 * 19 // 2

    def test_idempotent(self, participants):
        with ConcurrencyCoordinator(EngineSettings(max_workers=3, pair_batch_size=7)) as coordinator:
            first = coordinator.precompute_compatibility(participants)
            second = coordinator.precompute_compatibility(participants)
        assert dict(first) == dict(second)

    def test_read_only(self, participants):
        with ConcurrencyCoordinator(EngineSettings(max_workers=2)) as coordinator:
            compat = coordinator.precompute_compatibility(participants)
        with pytest.raises(TypeError):
            compat["P001-P002"] = 0.0

    def test_fewer_than_two_participants(self, participants):
        with ConcurrencyCoordinator(EngineSettings(max_workers=2)) as coordinator:
            assert len(coordinator.precompute_compatibility(participants[:1])) == 0

    def test_batch_error_raises(self, participants, monkeypatch):
        def broken(pairs):
            raise RuntimeError("boom")

        monkeypatch.setattr("teamforge.engine.coordinator.score_pairs", broken)
        with ConcurrencyCoordinator(EngineSettings(max_workers=2)) as coordinator:
            with pytest.raises(ConcurrencyFailure, match="precomputation") as exc_info:
                coordinator.precompute_compatibility(participants)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_timeout_raises(self, participants, monkeypatch):
        release = threading.Event()

        def slow(pairs):
            release.wait(5)
            return {}

        monkeypatch.setattr("teamforge.engine.coordinator.score_pairs", slow)
        settings = EngineSettings(max_workers=2, precompute_timeout_seconds=0.05)
        coordinator = ConcurrencyCoordinator(settings)
        try:
            with pytest.raises(ConcurrencyFailure, match="timed out") as exc_info:
                coordinator.precompute_compatibility(participants)
            assert "batches unfinished" in str(exc_info.value)
        finally:
            release.set()
            coordinator.shutdown()


class TestRunFormation:
    def test_all_teams_formed(self, participants):
        compat = build_compatibility_map(participants)
        pool = ParticipantPool(participants)
        with ConcurrencyCoordinator(EngineSettings(max_workers=4)) as coordinator:
            run = coordinator.run_formation(pool, 4, 4, compat)
        assert run.succeeded
        assert [t.id for t in run.teams] == sorted(t.id for t in run.teams)
        ids = [m.id for t in run.teams for m in t.members]
        assert len(ids) == len(set(ids))

    def test_pick_scope(self, participants):
        compat = build_compatibility_map(participants)
        pool = ParticipantPool(participants)
        settings = EngineSettings(max_workers=4, lock_scope="pick")
        with ConcurrencyCoordinator(settings) as coordinator:
            run = coordinator.run_formation(pool, 4, 4, compat)
        assert run.succeeded
        ids = [m.id for t in run.teams for m in t.members]
        assert len(ids) == len(set(ids))
        assert len(ids) + len(pool) == len(participants)

    def test_task_error_discarded(self, participants, monkeypatch):
        real = formation.form_single_team

        def flaky(pool, team_size, team_number, compat, **kwargs):
            if team_number == 2:
                raise RuntimeError("boom")
            return real(pool, team_size, team_number, compat, **kwargs)

        monkeypatch.setattr("teamforge.engine.coordinator.form_single_team", flaky)
        pool = ParticipantPool(participants)
        with ConcurrencyCoordinator(EngineSettings(max_workers=2)) as coordinator:
            run = coordinator.run_formation(pool, 4, 3, freeze({}))
        assert not run.succeeded
        assert [(f.team_number, f.reason) for f in run.failures] == [(2, "error")]
        assert "TEAM-002" not in {t.id for t in run.teams}

    def test_cancelled_task_recorded(self, participants, monkeypatch):
        def cancelled(pool, team_size, team_number, compat, **kwargs):
            raise FormationCancelled("stop")

        monkeypatch.setattr("teamforge.engine.coordinator.form_single_team", cancelled)
        with ConcurrencyCoordinator(EngineSettings(max_workers=2)) as coordinator:
            run = coordinator.run_formation(ParticipantPool(participants), 4, 2, freeze({}))
        assert [f.reason for f in run.failures] == ["cancelled", "cancelled"]

    def test_timeout_sets_token(self, participants, monkeypatch, caplog):
        tokens = []

        def slow(pool, team_size, team_number, compat, *, lock_scope, cancel):
            tokens.append(cancel)
            cancel.wait(5)
            raise FormationCancelled(f"team {team_number}")

        monkeypatch.setattr("teamforge.engine.coordinator.form_single_team", slow)
        settings = EngineSettings(max_workers=2, task_timeout_seconds=0.05)
        with caplog.at_level(logging.WARNING, logger="teamforge.engine.coordinator"):
            with ConcurrencyCoordinator(settings) as coordinator:
                run = coordinator.run_formation(ParticipantPool(participants), 4, 2, freeze({}))
        assert [f.reason for f in run.failures] == ["timeout", "timeout"]
        assert run.teams == []
        assert all(t.is_set() for t in tokens)
        assert "timed out" in caplog.text

    def test_queued_task_interrupted_by_forced_shutdown(self, participants, monkeypatch):
        coordinator = ConcurrencyCoordinator(EngineSettings(max_workers=1))

        def first_forces_shutdown(pool, team_size, team_number, compat, *, lock_scope, cancel):
            assert _wait_until(lambda: coordinator.in_flight == 2)
            coordinator.shutdown(grace_seconds=0)
            assert cancel.is_set()
            raise FormationCancelled(f"team {team_number}")

        monkeypatch.setattr("teamforge.engine.coordinator.form_single_team", first_forces_shutdown)
        run = coordinator.run_formation(ParticipantPool(participants), 4, 2, freeze({}))
        assert [(f.team_number, f.reason) for f in run.failures] == [(1, "cancelled"), (2, "interrupted")]
        assert coordinator.closed

    def test_late_team_rolled_back(self, participants, monkeypatch):
        real = formation.form_single_team

        def late(pool, team_size, team_number, compat, *, lock_scope, cancel):
            team = real(pool, team_size, team_number, compat, lock_scope=lock_scope)
            cancel.wait(5)
            return team

        monkeypatch.setattr("teamforge.engine.coordinator.form_single_team", late)
        pool = ParticipantPool(participants)
        settings = EngineSettings(max_workers=1, task_timeout_seconds=0.1)
        with ConcurrencyCoordinator(settings) as coordinator:
            run = coordinator.run_formation(pool, 4, 1, freeze({}))
        assert [f.reason for f in run.failures] == ["timeout"]
        assert _wait_until(lambda: len(pool) == len(participants))
        assert _wait_until(lambda: all(p.assigned_team == UNASSIGNED for p in participants))


class TestShutdown:
    def test_closed_rejects_work(self, participants):
        coordinator = ConcurrencyCoordinator(EngineSettings(max_workers=2))
        coordinator.shutdown()
        assert coordinator.closed
        with pytest.raises(ConcurrencyFailure, match="shut down"):
            coordinator.precompute_compatibility(participants)
        with pytest.raises(ConcurrencyFailure):
            coordinator.run_formation(ParticipantPool(participants), 4, 1, freeze({}))

    def test_idempotent(self):
        coordinator = ConcurrencyCoordinator(EngineSettings(max_workers=1))
        coordinator.shutdown()
        coordinator.shutdown()
        assert coordinator.in_flight == 0

    def test_graceful_joins_workers(self, participants):
        coordinator = ConcurrencyCoordinator(EngineSettings(max_workers=2))
        coordinator.precompute_compatibility(participants)
        executor = coordinator._executor
        with patch.object(executor, "shutdown", wraps=executor.shutdown) as shutdown:
            coordinator.shutdown(grace_seconds=1)
        assert shutdown.call_args_list[-1].kwargs == {"wait": True}
        assert coordinator.in_flight == 0

    def test_forced_after_grace(self, participants, monkeypatch, caplog):
        release = threading.Event()
        tokens = []

        def stubborn(pool, team_size, team_number, compat, *, lock_scope, cancel):
            tokens.append(cancel)
            release.wait(5)
            return formation.Team(formation.team_id(team_number), "Stubborn", team_size)

        monkeypatch.setattr("teamforge.engine.coordinator.form_single_team", stubborn)
        settings = EngineSettings(max_workers=1, task_timeout_seconds=0.05)
        coordinator = ConcurrencyCoordinator(settings)
        try:
            run = coordinator.run_formation(ParticipantPool(participants), 4, 2, freeze({}))
            assert [f.reason for f in run.failures] == ["timeout", "timeout"]
            assert coordinator.in_flight >= 1
            with caplog.at_level(logging.WARNING, logger="teamforge.engine.coordinator"):
                coordinator.shutdown(grace_seconds=0.05)
            assert "forcing shutdown" in caplog.text
            assert coordinator.closed
        finally:
            release.set()
        assert _wait_until(lambda: coordinator.in_flight == 0)
