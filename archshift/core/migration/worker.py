"""Background worker that ticks the status simulator.

One global timer for all jobs, not one per job:
- Daemon thread sleeping ``interval`` seconds between ticks
- Each tick snapshots active jobs from the store and writes back changes
- Goes idle once no non-terminal job remains; ``start()`` wakes it again
- ``stop()`` lets an in-flight tick finish before the thread exits
"""

import logging
import threading
from typing import Optional
from uuid import uuid4

from ..constants import DEFAULT_TICK_INTERVAL
from .simulator import StatusSimulator, TickReport

logger = logging.getLogger(__name__)


class SimulationWorker:
    """Periodic driver for StatusSimulator.

    Lifecycle:
    1. start() spawns the daemon thread
    2. _run_loop() calls run_once() every interval
    3. the loop exits when the store reports no active jobs, or on stop()
    """

    def __init__(
        self,
        simulator: StatusSimulator,
        store,
        interval: float = DEFAULT_TICK_INTERVAL,
    ):
        self._simulator = simulator
        self._store = store
        self.interval = interval
        self.worker_id = f"simulator-{uuid4()}"

        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        # Guards the running flag so an idle exit cannot race a restart
        self._lock = threading.Lock()
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self):
        """Start the worker thread unless it is already running."""
        with self._lock:
            if self._running:
                logger.warning("Simulation worker already running")
                return
            self._running = True
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run_loop, daemon=True, name="migration-simulator"
            )
            self._thread.start()
        logger.info(f"Simulation worker started (interval={self.interval}s)")

    def stop(self, timeout: float = 5.0):
        """Stop the worker, waiting for an in-flight tick to complete."""
        with self._lock:
            self._running = False
            self._stop_event.set()
            thread = self._thread
        if thread and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        logger.info("Simulation worker stopped")

    def run_once(self) -> TickReport:
        """Run a single tick synchronously."""
        report = self._simulator.apply_tick(self._store)
        self.ticks += 1
        return report

    def _run_loop(self):
        while not self._stop_event.wait(self.interval):
            try:
                report = self.run_once()
            except Exception as e:
                logger.error(f"Simulation tick failed: {e}", exc_info=True)
                continue

            if report.remaining_active == 0:
                with self._lock:
                    # Re-check under the lock: a kickoff may have added jobs
                    # after the tick's snapshot.
                    if self._store_is_idle():
                        self._running = False
                        logger.info("No active migration jobs; simulation worker idle")
                        return

    def _store_is_idle(self) -> bool:
        try:
            return self._store.count_active_jobs() == 0
        except Exception as e:
            logger.error(f"Could not count active jobs: {e}")
            return False
