"""Derive migration jobs from a confirmed architecture.

Every detailed source component is mapped onto the first detailed compute
instance of the target diagram. Components that already have a job are
skipped, so repeated kickoffs never duplicate work.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from ..catalog import COMPUTE_INSTANCE_KIND
from ..constants import JOB_REF_ALPHABET, JOB_REF_LENGTH, JOB_REF_PREFIX
from .models import MigrationJob, MigrationScope, MigrationStatus

if TYPE_CHECKING:
    from ..graph.model import ArchitectureGraph, Node

logger = logging.getLogger(__name__)

CREATED = "created"
NOT_CONFIRMED = "not_confirmed"
NO_DETAILED_SOURCES = "no_detailed_sources"
NOTHING_TO_DO = "nothing_to_do"


@dataclass
class MappingResult:
    code: str
    message: str
    jobs: List[MigrationJob] = field(default_factory=list)

    @property
    def created(self) -> int:
        return len(self.jobs)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_job_ref(rng: random.Random) -> str:
    suffix = "".join(rng.choice(JOB_REF_ALPHABET) for _ in range(JOB_REF_LENGTH))
    return f"{JOB_REF_PREFIX}{suffix}"


def select_target(graph: "ArchitectureGraph") -> Optional["Node"]:
    """First detailed compute instance in target creation order."""
    for node in graph.target_nodes:
        if node.kind == COMPUTE_INSTANCE_KIND and node.is_detailed:
            return node
    return None


def derive_migrations(
    graph: "ArchitectureGraph",
    existing_jobs: Iterable[MigrationJob],
    scope: MigrationScope,
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> MappingResult:
    """Build new job records for a confirmed graph.

    Nothing is persisted here; the caller appends the returned jobs to the
    store.
    """
    rng = rng or random.Random()
    clock = clock or utc_now

    if not graph.source_confirmed:
        return MappingResult(
            NOT_CONFIRMED,
            "Source architecture must be confirmed before migration kickoff!",
        )

    detailed_sources = [n for n in graph.source_nodes if n.is_detailed]
    if not detailed_sources:
        return MappingResult(
            NO_DETAILED_SOURCES,
            "No detailed Source Components found to migrate. Fill out component details first.",
        )

    migrating = {job.source_component_id for job in existing_jobs}
    target = select_target(graph)
    jobs: List[MigrationJob] = []

    for node in detailed_sources:
        if node.id in migrating:
            continue
        if target is None:
            continue
        jobs.append(MigrationJob(
            app_name=scope.app_name,
            source_component_id=node.id,
            source_component_name=node.name,
            source_details=node.details,
            target_component_name=target.name,
            target_region=scope.target_region,
            status=MigrationStatus.INITIATING,
            job_ref=generate_job_ref(rng),
            requested_at=clock(),
        ))
        migrating.add(node.id)

    if not jobs:
        return MappingResult(
            NOTHING_TO_DO,
            "No new, detailed source-to-target mappings found to initiate migration.",
        )

    logger.info(
        f"Derived {len(jobs)} migration job(s) onto {target.name} in {scope.target_region}"
    )
    return MappingResult(CREATED, f"{len(jobs)} migration job(s) initiated.", jobs)
