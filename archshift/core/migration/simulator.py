"""Statistical simulation of replication job progress.

Transition table, evaluated once per job per tick:

    Initiating       -> Replicating                      (always)
    Replicating      -> Replicating (0.7) | Cutover Pending (0.3)
    Cutover Pending  -> Completed (0.9)   | Failed (0.1)
    Completed, Failed: terminal

No external system is contacted. The random source and clock are
injectable so a seeded simulator replays exact sequences.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from ..constants import CUTOVER_SUCCESS_PROBABILITY, REPLICATING_STAY_PROBABILITY
from ..errors import StoreError
from .mapper import utc_now
from .models import MigrationJob, MigrationStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusTransition:
    job_id: str
    from_status: MigrationStatus
    to_status: MigrationStatus


@dataclass
class TickReport:
    evaluated: int = 0
    changed: List[StatusTransition] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # job ids gone mid-tick
    failed: List[str] = field(default_factory=list)  # job ids whose write failed
    remaining_active: int = 0
    ticked_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "evaluated": self.evaluated,
            "changed": [
                {"job_id": t.job_id, "from": t.from_status.value, "to": t.to_status.value}
                for t in self.changed
            ],
            "skipped": list(self.skipped),
            "failed": list(self.failed),
            "remaining_active": self.remaining_active,
            "ticked_at": self.ticked_at.isoformat() if self.ticked_at else None,
        }


class StatusSimulator:
    """Advance job statuses using the fixed probabilistic table."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        replicating_stay_probability: float = REPLICATING_STAY_PROBABILITY,
        cutover_success_probability: float = CUTOVER_SUCCESS_PROBABILITY,
    ):
        self._rng = rng or random.Random()
        self._clock = clock or utc_now
        self.replicating_stay_probability = replicating_stay_probability
        self.cutover_success_probability = cutover_success_probability

    def next_status(self, status: MigrationStatus) -> MigrationStatus:
        """One draw against the table. Terminal states are returned as-is
        without consuming randomness."""
        status = MigrationStatus(status)
        if status == MigrationStatus.INITIATING:
            return MigrationStatus.REPLICATING
        if status == MigrationStatus.REPLICATING:
            if self._rng.random() < self.replicating_stay_probability:
                return MigrationStatus.REPLICATING
            return MigrationStatus.CUTOVER_PENDING
        if status == MigrationStatus.CUTOVER_PENDING:
            if self._rng.random() < self.cutover_success_probability:
                return MigrationStatus.COMPLETED
            return MigrationStatus.FAILED
        return status

    def plan_tick(self, jobs: Iterable[MigrationJob]) -> List[StatusTransition]:
        """Decide transitions from a snapshot of jobs.

        Only jobs whose status actually changes are returned.
        """
        transitions = []
        for job in jobs:
            if job.status.is_terminal:
                continue
            new_status = self.next_status(job.status)
            if new_status != job.status:
                transitions.append(StatusTransition(job.id, job.status, new_status))
        return transitions

    def apply_tick(self, store) -> TickReport:
        """Run one tick against the store.

        Every planned transition is attempted; a job the store no longer
        knows about is recorded as skipped, and a job whose write fails is
        recorded as failed without stopping the rest of the tick. Failing
        to read the snapshot raises StoreError.
        """
        snapshot = store.list_active_jobs()
        report = TickReport(evaluated=len(snapshot), ticked_at=self._clock())

        for transition in self.plan_tick(snapshot):
            try:
                updated = store.update_job_status(transition.job_id, transition.to_status)
            except StoreError as e:
                logger.error(f"Status write for job {transition.job_id} failed: {e.message}")
                report.failed.append(transition.job_id)
                continue
            if updated:
                report.changed.append(transition)
            else:
                report.skipped.append(transition.job_id)

        try:
            report.remaining_active = store.count_active_jobs()
        except StoreError as e:
            # Estimate from the snapshot and what this tick finished
            finished = sum(1 for t in report.changed if t.to_status.is_terminal)
            report.remaining_active = len(snapshot) - finished - len(report.skipped)
            logger.warning(f"Could not count active jobs, estimating {report.remaining_active}: {e.message}")
        if report.changed:
            logger.debug(
                f"Tick advanced {len(report.changed)}/{report.evaluated} job(s), "
                f"{report.remaining_active} still active"
            )
        if report.skipped:
            logger.info(f"Tick skipped {len(report.skipped)} job(s) removed mid-tick")
        return report
