"""Tests for WorkspaceStore against an in-memory SQLite database.

Tests cover:
- Whole-document save/load and overwrite
- Load-time validation of stored graphs
- Job append, status update, ordering and active filtering
- Job subscriptions
- StoreError wrapping of database failures
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from archshift.core.db import DatabaseManager, Workspace
from archshift.core.errors import GraphDataError, StoreError
from archshift.core.graph.model import ArchitectureGraph, Phase
from archshift.core.migration.models import MigrationJob, MigrationScope, MigrationStatus
from archshift.core.store import WorkspaceStore


BASE_TIME = datetime(2026, 4, 1, 9, 0)


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def db():
    manager = DatabaseManager("sqlite://")
    manager.init_db()
    yield manager
    manager.dispose()


@pytest.fixture
def store(db):
    return WorkspaceStore(db)


def _make_job(source_id=1, minutes=0, status=MigrationStatus.INITIATING) -> MigrationJob:
    return MigrationJob(
        app_name="shop",
        source_component_id=source_id,
        source_component_name=f"src-{source_id}",
        source_details={"ServerName": f"src-{source_id}"},
        target_component_name="EC2 Instance-3",
        target_region="us-east-1",
        job_ref=f"MGN-000{source_id}",
        requested_at=BASE_TIME + timedelta(minutes=minutes),
        status=status,
    )


def _make_graph() -> ArchitectureGraph:
    graph = ArchitectureGraph()
    graph.place_node(Phase.SOURCE, "onprem-server", (1, 2))
    graph.place_node(Phase.SOURCE, "onprem-db")
    graph.add_connection(Phase.SOURCE, 1, 2)
    return graph


# ── Tests: Documents ─────────────────────────────────────────────────────


class TestDocuments:

    def test_unknown_user_has_no_document(self, store):
        assert store.load_document("nobody") is None
        assert store.load_graph("nobody") is None

    def test_save_and_load(self, store):
        scope = MigrationScope(app_name="shop", target_region="ap-south-1")
        graph = _make_graph()
        store.save_document("alice", scope, graph)

        document = store.load_document("alice")
        assert document.scope == scope
        assert document.architecture == graph.to_dict()
        assert store.load_graph("alice").to_dict() == graph.to_dict()

    def test_save_overwrites_whole_document(self, store):
        store.save_document("alice", MigrationScope(app_name="one"), _make_graph())
        store.save_document("alice", MigrationScope(app_name="two"), ArchitectureGraph())

        document = store.load_document("alice")
        assert document.scope.app_name == "two"
        assert document.architecture["source_nodes"] == []

    def test_invalid_stored_graph(self, store, db):
        doc = _make_graph().to_dict()
        doc["source_nodes"][0]["kind"] = "mainframe"
        with db.get_session() as session:
            session.add(Workspace(user_id="bob", app_details={}, architecture=doc))

        assert store.load_document("bob").scope == MigrationScope()
        with pytest.raises(GraphDataError):
            store.load_graph("bob")


# ── Tests: Jobs ──────────────────────────────────────────────────────────


class TestJobs:

    def test_append_assigns_id(self, store):
        job = _make_job()
        job_id = store.append_job("alice", job)
        assert job.id == job_id
        [stored] = store.list_jobs("alice")
        assert stored.id == job_id
        assert stored.source_details == {"ServerName": "src-1"}
        assert stored.status == MigrationStatus.INITIATING

    def test_list_is_newest_first_and_per_user(self, store):
        store.append_job("alice", _make_job(1, minutes=0))
        store.append_job("alice", _make_job(2, minutes=5))
        store.append_job("bob", _make_job(3, minutes=10))

        assert [j.source_component_id for j in store.list_jobs("alice")] == [2, 1]
        assert [j.source_component_id for j in store.list_jobs("bob")] == [3]

    def test_update_status(self, store):
        job_id = store.append_job("alice", _make_job())
        assert store.update_job_status(job_id, MigrationStatus.REPLICATING) is True
        assert store.list_jobs("alice")[0].status == MigrationStatus.REPLICATING

    def test_update_unknown_job(self, store):
        assert store.update_job_status(str(uuid4()), MigrationStatus.FAILED) is False
        assert store.update_job_status("not-a-uuid", MigrationStatus.FAILED) is False

    def test_active_jobs_exclude_terminal(self, store):
        store.append_job("alice", _make_job(1))
        store.append_job("alice", _make_job(2, status=MigrationStatus.COMPLETED))
        store.append_job("bob", _make_job(3, status=MigrationStatus.CUTOVER_PENDING))
        store.append_job("bob", _make_job(4, status=MigrationStatus.FAILED))

        active = store.list_active_jobs()
        assert sorted(j.source_component_id for j in active) == [1, 3]
        assert store.count_active_jobs() == 2

    def test_job_table_has_only_mapped_columns(self, db):
        columns = {c["name"] for c in inspect(db.engine).get_columns("migration_jobs")}
        assert columns == {
            "job_id", "user_id", "app_name", "source_component_id",
            "source_component_name", "source_details", "target_component_name",
            "target_region", "status", "job_ref", "requested_at", "updated_at",
        }

    def test_delete_job(self, store):
        job_id = store.append_job("alice", _make_job())
        assert store.delete_job(job_id) is True
        assert store.delete_job(job_id) is False
        assert store.list_jobs("alice") == []


class TestSubscriptions:

    def test_callback_receives_current_then_updates(self, store):
        received = []
        unsubscribe = store.subscribe_jobs("alice", received.append)
        assert received == [[]]

        job_id = store.append_job("alice", _make_job())
        store.update_job_status(job_id, MigrationStatus.REPLICATING)
        assert len(received) == 3
        assert received[-1][0].status == MigrationStatus.REPLICATING

        unsubscribe()
        store.append_job("alice", _make_job(2))
        assert len(received) == 3

    def test_other_users_do_not_notify(self, store):
        received = []
        store.subscribe_jobs("alice", received.append)
        store.append_job("bob", _make_job())
        assert received == [[]]

    def test_failing_listener_does_not_break_append(self, store):
        def listener(jobs):
            if jobs:
                raise RuntimeError("ui gone")

        store.subscribe_jobs("alice", listener)
        store.append_job("alice", _make_job())
        assert len(store.list_jobs("alice")) == 1


class TestStoreErrors:

    def _broken_store(self):
        db = MagicMock()
        db.get_session.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
        return WorkspaceStore(db)

    def test_load_failure(self):
        with pytest.raises(StoreError) as exc:
            self._broken_store().load_document("alice")
        assert exc.value.code == "store_error"
        assert isinstance(exc.value.cause, OperationalError)

    def test_save_failure(self):
        with pytest.raises(StoreError):
            self._broken_store().save_document("alice", MigrationScope(), ArchitectureGraph())

    def test_append_failure_leaves_job_unassigned(self):
        job = _make_job()
        with pytest.raises(StoreError):
            self._broken_store().append_job("alice", job)
        assert job.id is None
