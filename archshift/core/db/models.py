"""
SQLAlchemy ORM Models for archshift

- Workspace: one architecture document (scope + graph) per user identity
- MigrationJobRecord: simulated migration jobs derived at kickoff
"""

from sqlalchemy import (
    Column, String, Integer, TIMESTAMP, Index, TypeDecorator, JSON,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.dialects.postgresql import UUID as PostgreSQL_UUID, JSONB
import uuid
from datetime import datetime

Base = declarative_base()

# JSON column that becomes JSONB on PostgreSQL
JSONType = JSON().with_variant(JSONB(), "postgresql")


# UUID type that works with both PostgreSQL and SQLite
class UUID(TypeDecorator):
    """Platform-independent UUID type.

    Uses PostgreSQL's UUID type when available, otherwise stores as String(36).
    """
    impl = String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PostgreSQL_UUID(as_uuid=True))
        else:
            return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        elif dialect.name == 'postgresql':
            return value
        else:
            if isinstance(value, uuid.UUID):
                return str(value)
            else:
                return str(uuid.UUID(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        elif dialect.name == 'postgresql':
            return value
        else:
            if isinstance(value, uuid.UUID):
                return value
            else:
                return uuid.UUID(value)


# =============================================================================
# Workspace Document
# =============================================================================

class Workspace(Base):
    """The whole architecture document for one user.

    Saved as a unit; concurrent sessions overwrite each other (last write wins).
    """
    __tablename__ = "workspaces"

    user_id = Column(String(128), primary_key=True)
    app_details = Column(JSONType, nullable=False, default=dict)    # MigrationScope.to_dict()
    architecture = Column(JSONType, nullable=False, default=dict)   # ArchitectureGraph.to_dict()
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Workspace(user_id='{self.user_id}')>"


# =============================================================================
# Migration Jobs
# =============================================================================

class MigrationJobRecord(Base):
    """Simulated replication job for one source component."""
    __tablename__ = "migration_jobs"
    __table_args__ = (
        Index('idx_user_jobs', 'user_id', 'requested_at'),
        Index('idx_job_status', 'status'),
    )

    job_id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(128), nullable=False)
    app_name = Column(String(255), default="")
    source_component_id = Column(Integer, nullable=False)
    source_component_name = Column(String(255), nullable=False)
    source_details = Column(JSONType, default=dict)                 # checklist snapshot
    target_component_name = Column(String(255), nullable=False)
    target_region = Column(String(32), nullable=False)
    status = Column(String(20), default='Initiating', nullable=False)  # Initiating|Replicating|Cutover Pending|Completed|Failed
    job_ref = Column(String(16), nullable=False)
    requested_at = Column(TIMESTAMP(timezone=True), nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<MigrationJobRecord(job_id={self.job_id}, status='{self.status}')>"
