"""Data contracts for migration scope and migration jobs.

Kept as dataclasses (not ORM models) for transport between the mapper,
the simulator, the store and the API.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from ..catalog import SourceEnvironment
from ..constants import DEFAULT_TARGET_REGION, TARGET_REGIONS


class MigrationStatus(str, Enum):
    """Lifecycle of a simulated replication job."""
    INITIATING = "Initiating"
    REPLICATING = "Replicating"
    CUTOVER_PENDING = "Cutover Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (MigrationStatus.COMPLETED, MigrationStatus.FAILED)

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    MigrationStatus.INITIATING: "Migration Requested",
    MigrationStatus.REPLICATING: "Data Replication In Progress",
    MigrationStatus.CUTOVER_PENDING: "Ready for Cutover",
    MigrationStatus.COMPLETED: "Migration Completed",
    MigrationStatus.FAILED: "Migration Failed",
}


@dataclass
class MigrationScope:
    """Application being migrated and where it is going."""
    app_name: str = ""
    source_env: SourceEnvironment = SourceEnvironment.ONPREM
    target_region: str = DEFAULT_TARGET_REGION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "app_name": self.app_name,
            "source_env": self.source_env.value,
            "target_region": self.target_region,
            "target_region_name": TARGET_REGIONS.get(self.target_region, self.target_region),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MigrationScope":
        """Lenient load: unknown values fall back to defaults."""
        data = data or {}
        try:
            source_env = SourceEnvironment(data.get("source_env") or SourceEnvironment.ONPREM)
        except ValueError:
            source_env = SourceEnvironment.ONPREM
        region = data.get("target_region") or DEFAULT_TARGET_REGION
        if region not in TARGET_REGIONS:
            region = DEFAULT_TARGET_REGION
        return cls(
            app_name=str(data.get("app_name") or ""),
            source_env=source_env,
            target_region=region,
        )


@dataclass
class MigrationJob:
    """One source component's simulated migration.

    Names and details are snapshots taken at kickoff; later edits to the
    graph never reach a submitted job.
    """
    source_component_id: int
    source_component_name: str
    target_component_name: str
    target_region: str
    job_ref: str
    requested_at: datetime
    status: MigrationStatus = MigrationStatus.INITIATING
    source_details: Dict[str, str] = field(default_factory=dict)
    app_name: str = ""
    id: Optional[str] = None  # assigned by the store

    def __post_init__(self):
        self.status = MigrationStatus(self.status)
        self.source_details = deepcopy(dict(self.source_details))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "app_name": self.app_name,
            "source_component_id": self.source_component_id,
            "source_component_name": self.source_component_name,
            "source_details": dict(self.source_details),
            "target_component_name": self.target_component_name,
            "target_region": self.target_region,
            "status": self.status.value,
            "status_label": self.status.label,
            "is_terminal": self.status.is_terminal,
            "job_ref": self.job_ref,
            "requested_at": self.requested_at.isoformat() if self.requested_at else None,
        }
