"""Unit tests for StatusSimulator: transition table and tick application.

Tests cover:
- Deterministic transitions (Initiating, terminal states)
- Probabilistic branches driven by a scripted random source
- Long-run branch frequencies with a seeded generator
- apply_tick against a mock store (changed-only writes, skipped ids,
  failed writes that do not abort the tick)
"""

import random
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from archshift.core.errors import StoreError
from archshift.core.migration.models import MigrationJob, MigrationStatus
from archshift.core.migration.simulator import StatusSimulator


FIXED_TIME = datetime(2026, 5, 1, tzinfo=timezone.utc)


# ── Fixtures ──────────────────────────────────────────────────────────────


def _scripted_rng(*values):
    rng = MagicMock()
    rng.random.side_effect = list(values)
    return rng


def _make_job(job_id: str, status: MigrationStatus) -> MigrationJob:
    return MigrationJob(
        id=job_id,
        source_component_id=1,
        source_component_name="web",
        target_component_name="EC2 Instance-3",
        target_region="us-east-1",
        job_ref="MGN-TEST",
        requested_at=FIXED_TIME,
        status=status,
    )


def _mock_store(jobs, remaining=0, missing=()):
    store = MagicMock()
    store.list_active_jobs.return_value = jobs
    store.update_job_status.side_effect = lambda job_id, status: job_id not in missing
    store.count_active_jobs.return_value = remaining
    return store


# ── Tests: Transition table ──────────────────────────────────────────────


class TestNextStatus:

    def test_initiating_always_replicates(self):
        rng = _scripted_rng()
        sim = StatusSimulator(rng=rng)
        assert sim.next_status(MigrationStatus.INITIATING) == MigrationStatus.REPLICATING
        rng.random.assert_not_called()

    @pytest.mark.parametrize("draw,expected", [
        (0.0, MigrationStatus.REPLICATING),
        (0.69, MigrationStatus.REPLICATING),
        (0.7, MigrationStatus.CUTOVER_PENDING),
        (0.99, MigrationStatus.CUTOVER_PENDING),
    ])
    def test_replicating_branch(self, draw, expected):
        sim = StatusSimulator(rng=_scripted_rng(draw))
        assert sim.next_status(MigrationStatus.REPLICATING) == expected

    @pytest.mark.parametrize("draw,expected", [
        (0.5, MigrationStatus.COMPLETED),
        (0.9, MigrationStatus.FAILED),
    ])
    def test_cutover_branch(self, draw, expected):
        sim = StatusSimulator(rng=_scripted_rng(draw))
        assert sim.next_status(MigrationStatus.CUTOVER_PENDING) == expected

    @pytest.mark.parametrize("status", [MigrationStatus.COMPLETED, MigrationStatus.FAILED])
    def test_terminal_states_are_fixed(self, status):
        rng = _scripted_rng()
        sim = StatusSimulator(rng=rng)
        assert sim.next_status(status) == status
        rng.random.assert_not_called()

    def test_branch_frequencies(self):
        sim = StatusSimulator(rng=random.Random(2024))
        trials = 10_000
        cutovers = sum(
            sim.next_status(MigrationStatus.REPLICATING) == MigrationStatus.CUTOVER_PENDING
            for _ in range(trials)
        )
        completions = sum(
            sim.next_status(MigrationStatus.CUTOVER_PENDING) == MigrationStatus.COMPLETED
            for _ in range(trials)
        )
        assert 0.27 < cutovers / trials < 0.33
        assert 0.88 < completions / trials < 0.92

    def test_seeded_simulators_agree(self):
        a = StatusSimulator(rng=random.Random(11))
        b = StatusSimulator(rng=random.Random(11))
        seq_a = [a.next_status(MigrationStatus.REPLICATING) for _ in range(25)]
        seq_b = [b.next_status(MigrationStatus.REPLICATING) for _ in range(25)]
        assert seq_a == seq_b


# ── Tests: Ticks ─────────────────────────────────────────────────────────


class TestApplyTick:

    def test_only_changed_jobs_are_written(self):
        jobs = [
            _make_job("a", MigrationStatus.INITIATING),
            _make_job("b", MigrationStatus.REPLICATING),
            _make_job("c", MigrationStatus.CUTOVER_PENDING),
        ]
        # b stays replicating, c completes
        sim = StatusSimulator(rng=_scripted_rng(0.1, 0.1), clock=lambda: FIXED_TIME)
        store = _mock_store(jobs, remaining=2)

        report = sim.apply_tick(store)

        written = [c.args for c in store.update_job_status.call_args_list]
        assert written == [
            ("a", MigrationStatus.REPLICATING),
            ("c", MigrationStatus.COMPLETED),
        ]
        assert report.evaluated == 3
        assert [t.job_id for t in report.changed] == ["a", "c"]
        assert report.remaining_active == 2
        assert report.ticked_at == FIXED_TIME

    def test_removed_job_is_skipped_not_fatal(self):
        jobs = [
            _make_job("gone", MigrationStatus.INITIATING),
            _make_job("kept", MigrationStatus.INITIATING),
        ]
        store = _mock_store(jobs, remaining=1, missing={"gone"})

        report = StatusSimulator(rng=_scripted_rng()).apply_tick(store)

        assert report.skipped == ["gone"]
        assert [t.job_id for t in report.changed] == ["kept"]

    def test_terminal_jobs_in_snapshot_are_ignored(self):
        store = _mock_store([_make_job("done", MigrationStatus.COMPLETED)])
        report = StatusSimulator(rng=_scripted_rng()).apply_tick(store)
        store.update_job_status.assert_not_called()
        assert report.changed == []

    def test_report_to_dict(self):
        store = _mock_store([_make_job("a", MigrationStatus.INITIATING)], remaining=1)
        report = StatusSimulator(clock=lambda: FIXED_TIME).apply_tick(store)
        data = report.to_dict()
        assert data["changed"] == [{"job_id": "a", "from": "Initiating", "to": "Replicating"}]
        assert data["ticked_at"] == FIXED_TIME.isoformat()
        assert data["failed"] == []

    def test_failed_write_does_not_abort_tick(self):
        jobs = [
            _make_job("a", MigrationStatus.INITIATING),
            _make_job("b", MigrationStatus.INITIATING),
            _make_job("c", MigrationStatus.INITIATING),
        ]
        store = _mock_store(jobs, remaining=3)

        def update(job_id, status):
            if job_id == "b":
                raise StoreError("disk full")
            return True

        store.update_job_status.side_effect = update

        report = StatusSimulator(rng=_scripted_rng()).apply_tick(store)

        written = [c.args[0] for c in store.update_job_status.call_args_list]
        assert written == ["a", "b", "c"]
        assert [t.job_id for t in report.changed] == ["a", "c"]
        assert report.failed == ["b"]
        assert report.remaining_active == 3

    def test_count_failure_estimates_remaining(self):
        jobs = [
            _make_job("a", MigrationStatus.INITIATING),
            _make_job("b", MigrationStatus.CUTOVER_PENDING),
        ]
        store = _mock_store(jobs)
        store.count_active_jobs.side_effect = StoreError("connection lost")

        # b completes
        report = StatusSimulator(rng=_scripted_rng(0.1)).apply_tick(store)

        assert len(report.changed) == 2
        assert report.remaining_active == 1
