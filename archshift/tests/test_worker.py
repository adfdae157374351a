"""Unit tests for SimulationWorker lifecycle.

Tests cover:
- start/stop and double start
- Synchronous run_once
- Going idle once no active jobs remain
- Surviving a failing tick
"""

import threading
from unittest.mock import MagicMock, patch

from archshift.core.migration.simulator import TickReport
from archshift.core.migration.worker import SimulationWorker


# ── Fixtures ──────────────────────────────────────────────────────────────


def _make_worker(remaining_active=1, interval=0.01):
    simulator = MagicMock()
    simulator.apply_tick.return_value = TickReport(remaining_active=remaining_active)
    store = MagicMock()
    store.count_active_jobs.return_value = remaining_active
    return SimulationWorker(simulator, store, interval=interval), simulator, store


# ── Tests: Lifecycle ─────────────────────────────────────────────────────


class TestWorkerLifecycle:

    def test_initial_state(self):
        worker, _, _ = _make_worker()
        assert worker.is_running is False
        assert worker._thread is None
        assert worker.worker_id.startswith("simulator-")

    def test_start_sets_running(self):
        worker, _, _ = _make_worker()
        with patch.object(worker, "_run_loop"):
            worker.start()
        assert worker.is_running is True
        assert worker._thread.daemon is True
        worker.stop()
        assert worker.is_running is False

    def test_double_start_is_safe(self):
        worker, _, _ = _make_worker()
        with patch.object(worker, "_run_loop"):
            worker.start()
            first = worker._thread
            worker.start()
        assert worker._thread is first
        worker.stop()

    def test_stop_without_start(self):
        worker, _, _ = _make_worker()
        worker.stop()
        assert worker.is_running is False


class TestTicks:

    def test_run_once_counts_ticks(self):
        worker, simulator, store = _make_worker()
        report = worker.run_once()
        simulator.apply_tick.assert_called_once_with(store)
        assert report.remaining_active == 1
        assert worker.ticks == 1

    def test_goes_idle_when_no_active_jobs(self):
        worker, simulator, _ = _make_worker(remaining_active=0)
        worker.start()
        worker._thread.join(timeout=2.0)

        assert not worker._thread.is_alive()
        assert worker.is_running is False
        assert simulator.apply_tick.call_count == 1

    def test_keeps_running_while_jobs_remain(self):
        worker, simulator, _ = _make_worker(remaining_active=3)
        ticked = threading.Event()
        simulator.apply_tick.side_effect = lambda store: (ticked.set(), TickReport(remaining_active=3))[1]

        worker.start()
        assert ticked.wait(timeout=2.0)
        assert worker.is_running is True
        worker.stop()
        assert not worker._thread.is_alive()

    def test_failed_tick_does_not_stop_worker(self):
        worker, simulator, _ = _make_worker()
        calls = []

        def tick(store):
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("database went away")
            return TickReport(remaining_active=0)

        simulator.apply_tick.side_effect = tick
        worker._store.count_active_jobs.return_value = 0
        worker.start()
        worker._thread.join(timeout=2.0)

        assert len(calls) == 2
        assert worker.is_running is False
