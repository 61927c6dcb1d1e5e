"""Tests for teamforge/engine/pool.py."""

from concurrent.futures import ThreadPoolExecutor

from teamforge.engine.pool import ParticipantPool
from teamforge.participant_models import Participant


def _p(pid, score=60):
    return Participant(
        id=pid,
        name=f"Player {pid}",
        email=f"{pid.lower()}@club.org",
        personality_score=score,
        preferred_activity="chess",
        skill_level=5,
        preferred_role="strategist",
    )


class TestParticipantPool:
    def test_claim_removes(self):
        a, b = _p("P001"), _p("P002")
        pool = ParticipantPool([a, b])
        assert pool.claim([a])
        assert [p.id for p in pool.snapshot()] == ["P002"]

    def test_claim_nothing(self):
        pool = ParticipantPool([_p("P001")])
        assert pool.claim([])
        assert len(pool) == 1
        assert pool.version == 0

    def test_claim_all_or_nothing(self):
        a, b = _p("P001"), _p("P002")
        pool = ParticipantPool([a])
        assert not pool.claim([a, b])
        assert len(pool) == 1

    def test_claim_rejects_repeated_participant(self):
        a = _p("P001")
        pool = ParticipantPool([a, _p("P002")])
        assert not pool.claim([a, a])
        assert len(pool) == 2

    def test_stale_version_refused(self):
        a, b = _p("P001"), _p("P002")
        pool = ParticipantPool([a, b])
        version, available = pool.versioned_snapshot()
        assert [p.id for p in available] == ["P001", "P002"]
        assert pool.claim([b], version)
        assert not pool.claim([a], version)
        assert pool.claim([a], pool.version)
        assert len(pool) == 0

    def test_snapshot_is_copy(self):
        pool = ParticipantPool([_p("P001")])
        pool.snapshot().clear()
        assert len(pool) == 1

    def test_restore_skips_present(self):
        a, b = _p("P001"), _p("P002")
        pool = ParticipantPool([a])
        pool.restore([a, b, b])
        assert [p.id for p in pool.snapshot()] == ["P001", "P002"]
        assert pool.version == 1
        pool.restore([a])
        assert pool.version == 1

    def test_guard_is_reentrant(self):
        a = _p("P001")
        pool = ParticipantPool([a])
        with pool.guard():
            assert pool.claim([a], pool.version)
        assert len(pool) == 0

    def test_concurrent_claims_hand_out_each_once(self):
        people = [_p(f"P{i:03d}") for i in range(1, 201)]
        pool = ParticipantPool(people)

        def drain():
            got = []
            while True:
                version, available = pool.versioned_snapshot()
                if not available:
                    return got
                if pool.claim(available[:1], version):
                    got.append(available[0].id)

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = [f.result() for f in [executor.submit(drain) for _ in range(4)]]

        taken = [pid for chunk in results for pid in chunk]
        assert len(taken) == 200
        assert len(set(taken)) == 200
        assert len(pool) == 0
