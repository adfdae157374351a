"""Workspace store: persistence for architecture documents and migration jobs.

Implements the store contract the engine relies on:
- load_document / load_graph / save_document: one document per user, saved
  whole (last write wins, no field-level merge)
- append_job / update_job_status / list_jobs / list_active_jobs: job records
- subscribe_jobs: in-process listeners called with the user's fresh job list
  after every append or status change
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError

from ..db import DatabaseManager
from ..db.models import MigrationJobRecord, Workspace
from ..errors import StoreError
from ..graph.model import ArchitectureGraph
from ..migration.models import MigrationJob, MigrationScope, MigrationStatus

logger = logging.getLogger(__name__)

JobListener = Callable[[List[MigrationJob]], None]

TERMINAL_STATUSES = [s.value for s in MigrationStatus if s.is_terminal]


@dataclass
class WorkspaceDocument:
    """Raw persisted document. The graph is not parsed here so a bad
    document can be reported by the caller instead of failing the load."""
    user_id: str
    scope: MigrationScope
    architecture: dict
    updated_at: Optional[datetime] = None


def _parse_job_id(job_id) -> Optional[UUID]:
    if isinstance(job_id, UUID):
        return job_id
    try:
        return UUID(str(job_id))
    except ValueError:
        return None


class WorkspaceStore:
    """Database-backed store for workspaces and migration jobs."""

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager
        self._listeners: Dict[str, List[JobListener]] = {}
        self._listeners_lock = threading.Lock()
        logger.info("WorkspaceStore initialized")

    # =========================================================================
    # Architecture documents
    # =========================================================================

    def load_document(self, user_id: str) -> Optional[WorkspaceDocument]:
        """Load a user's workspace, or None if they have not saved one."""
        try:
            with self.db.get_session() as session:
                row = session.get(Workspace, user_id)
                if row is None:
                    return None
                return WorkspaceDocument(
                    user_id=row.user_id,
                    scope=MigrationScope.from_dict(row.app_details),
                    architecture=dict(row.architecture or {}),
                    updated_at=row.updated_at,
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load workspace for {user_id}: {e}")
            raise StoreError("Failed to load saved configuration", e) from e

    def load_graph(self, user_id: str) -> Optional[ArchitectureGraph]:
        """Load and parse a user's graph.

        Raises:
            GraphDataError: If the stored document does not validate
        """
        document = self.load_document(user_id)
        if document is None:
            return None
        return ArchitectureGraph.from_dict(document.architecture)

    def save_document(self, user_id: str, scope: MigrationScope, graph: ArchitectureGraph) -> None:
        """Overwrite the user's whole document."""
        try:
            with self.db.get_session() as session:
                row = session.get(Workspace, user_id)
                if row is None:
                    row = Workspace(user_id=user_id)
                    session.add(row)
                row.app_details = scope.to_dict()
                row.architecture = graph.to_dict()
                row.updated_at = datetime.utcnow()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save workspace for {user_id}: {e}")
            raise StoreError("Failed to save configuration", e) from e

    # =========================================================================
    # Migration jobs
    # =========================================================================

    def append_job(self, user_id: str, job: MigrationJob) -> str:
        """Persist a new job and return its store-assigned id."""
        job_id = uuid4()
        try:
            with self.db.get_session() as session:
                session.add(MigrationJobRecord(
                    job_id=job_id,
                    user_id=user_id,
                    app_name=job.app_name,
                    source_component_id=job.source_component_id,
                    source_component_name=job.source_component_name,
                    source_details=dict(job.source_details),
                    target_component_name=job.target_component_name,
                    target_region=job.target_region,
                    status=job.status.value,
                    job_ref=job.job_ref,
                    requested_at=job.requested_at,
                ))
        except SQLAlchemyError as e:
            logger.error(f"Failed to append migration job for {user_id}: {e}")
            raise StoreError("Failed to initiate migration job", e) from e

        job.id = str(job_id)
        logger.info(f"Created migration job {job.job_ref} ({job.id}) for {job.source_component_name}")
        self._notify(user_id)
        return job.id

    def update_job_status(self, job_id: str, status: MigrationStatus) -> bool:
        """Write a new status. Returns False if the job does not exist."""
        jid = _parse_job_id(job_id)
        if jid is None:
            return False
        try:
            with self.db.get_session() as session:
                row = session.get(MigrationJobRecord, jid)
                if row is None:
                    return False
                row.status = MigrationStatus(status).value
                row.updated_at = datetime.utcnow()
                user_id = row.user_id
        except SQLAlchemyError as e:
            logger.error(f"Failed to update migration job {job_id}: {e}")
            raise StoreError("Failed to update migration job", e) from e

        self._notify(user_id)
        return True

    def delete_job(self, job_id: str) -> bool:
        jid = _parse_job_id(job_id)
        if jid is None:
            return False
        with self.db.get_session() as session:
            row = session.get(MigrationJobRecord, jid)
            if row is None:
                return False
            user_id = row.user_id
            session.delete(row)
        self._notify(user_id)
        return True

    def list_jobs(self, user_id: str) -> List[MigrationJob]:
        """A user's jobs, newest first."""
        try:
            with self.db.get_session() as session:
                rows = session.query(MigrationJobRecord).filter(
                    MigrationJobRecord.user_id == user_id
                ).order_by(MigrationJobRecord.requested_at.desc()).all()
                return [self._record_to_job(r) for r in rows]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list migration jobs for {user_id}: {e}")
            raise StoreError("Failed to load migration jobs", e) from e

    def list_active_jobs(self) -> List[MigrationJob]:
        """Every non-terminal job across all users."""
        try:
            with self.db.get_session() as session:
                rows = session.query(MigrationJobRecord).filter(
                    MigrationJobRecord.status.notin_(TERMINAL_STATUSES)
                ).order_by(MigrationJobRecord.requested_at).all()
                return [self._record_to_job(r) for r in rows]
        except SQLAlchemyError as e:
            raise StoreError("Failed to load active migration jobs", e) from e

    def count_active_jobs(self) -> int:
        try:
            with self.db.get_session() as session:
                return session.query(MigrationJobRecord).filter(
                    MigrationJobRecord.status.notin_(TERMINAL_STATUSES)
                ).count()
        except SQLAlchemyError as e:
            raise StoreError("Failed to count active migration jobs", e) from e

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe_jobs(self, user_id: str, callback: JobListener) -> Callable[[], None]:
        """Register ``callback`` for the user's job list.

        The callback is invoked immediately with the current list, then after
        every change. Returns a function that removes the subscription.
        """
        with self._listeners_lock:
            self._listeners.setdefault(user_id, []).append(callback)

        callback(self.list_jobs(user_id))

        def unsubscribe():
            with self._listeners_lock:
                listeners = self._listeners.get(user_id, [])
                if callback in listeners:
                    listeners.remove(callback)

        return unsubscribe

    def _notify(self, user_id: str) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners.get(user_id, []))
        if not listeners:
            return
        jobs = self.list_jobs(user_id)
        for listener in listeners:
            try:
                listener(jobs)
            except Exception as e:
                logger.error(f"Job listener for {user_id} failed: {e}", exc_info=True)

    @staticmethod
    def _record_to_job(row: MigrationJobRecord) -> MigrationJob:
        return MigrationJob(
            id=str(row.job_id),
            app_name=row.app_name or "",
            source_component_id=row.source_component_id,
            source_component_name=row.source_component_name,
            source_details=row.source_details or {},
            target_component_name=row.target_component_name,
            target_region=row.target_region,
            status=MigrationStatus(row.status),
            job_ref=row.job_ref,
            requested_at=row.requested_at,
        )
