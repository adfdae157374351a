"""Unit tests for derive_migrations."""

import random
import re
from datetime import datetime, timezone

from archshift.core import catalog
from archshift.core.graph.model import ArchitectureGraph, Phase
from archshift.core.migration.mapper import (
    CREATED,
    NO_DETAILED_SOURCES,
    NOT_CONFIRMED,
    NOTHING_TO_DO,
    derive_migrations,
    generate_job_ref,
    select_target,
)
from archshift.core.migration.models import MigrationJob, MigrationScope, MigrationStatus


FIXED_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _detail(graph, phase, node_id, name=None):
    node = graph.get_node(phase, node_id)
    details = {a: f"{a}-v" for a in catalog.lookup(node.kind).required_attributes}
    graph.update_node_details(phase, node_id, name or node.name, details)


def _make_graph(confirmed=True) -> ArchitectureGraph:
    """Sources 1 (detailed), 2 (detailed), 3 (pending); targets 4 vpc, 5 ec2, 6 ec2."""
    graph = ArchitectureGraph()
    for kind in ("onprem-server", "onprem-db", "onprem-lb"):
        graph.place_node(Phase.SOURCE, kind)
    for kind in ("aws-vpc", "aws-ec2", "aws-ec2"):
        graph.place_node(Phase.TARGET, kind)
    _detail(graph, Phase.SOURCE, 1, "web")
    _detail(graph, Phase.SOURCE, 2, "orders-db")
    for node_id in (4, 5, 6):
        _detail(graph, Phase.TARGET, node_id)
    graph.set_source_confirmed(confirmed)
    return graph


def _make_scope() -> MigrationScope:
    return MigrationScope(app_name="shop", target_region="eu-central-1")


def _make_job(source_id: int) -> MigrationJob:
    return MigrationJob(
        source_component_id=source_id,
        source_component_name="web",
        target_component_name="EC2 Instance-5",
        target_region="eu-central-1",
        job_ref="MGN-AAAA",
        requested_at=FIXED_TIME,
    )


class TestDeriveMigrations:

    def test_unconfirmed_graph(self):
        result = derive_migrations(_make_graph(confirmed=False), [], _make_scope())
        assert result.code == NOT_CONFIRMED
        assert result.created == 0

    def test_no_detailed_sources(self):
        graph = ArchitectureGraph(source_confirmed=True)
        graph.place_node(Phase.SOURCE, "onprem-server")
        result = derive_migrations(graph, [], _make_scope())
        assert result.code == NO_DETAILED_SOURCES

    def test_maps_detailed_sources_onto_first_ec2(self):
        result = derive_migrations(
            _make_graph(), [], _make_scope(), rng=random.Random(7), clock=lambda: FIXED_TIME
        )
        assert result.code == CREATED
        assert result.created == 2
        first = result.jobs[0]
        assert first.source_component_id == 1
        assert first.source_component_name == "web"
        assert first.target_component_name == "EC2 Instance-5"
        assert first.target_region == "eu-central-1"
        assert first.app_name == "shop"
        assert first.status == MigrationStatus.INITIATING
        assert first.requested_at == FIXED_TIME
        assert first.source_details["ServerName"] == "ServerName-v"

    def test_existing_jobs_are_skipped(self):
        result = derive_migrations(_make_graph(), [_make_job(1)], _make_scope())
        assert [j.source_component_id for j in result.jobs] == [2]

    def test_all_migrating_is_nothing_to_do(self):
        result = derive_migrations(_make_graph(), [_make_job(1), _make_job(2)], _make_scope())
        assert result.code == NOTHING_TO_DO
        assert result.jobs == []

    def test_no_detailed_ec2_is_nothing_to_do(self):
        graph = _make_graph()
        graph.delete_node(Phase.TARGET, 5)
        graph.delete_node(Phase.TARGET, 6)
        result = derive_migrations(graph, [], _make_scope())
        assert result.code == NOTHING_TO_DO

    def test_snapshot_is_independent_of_graph(self):
        graph = _make_graph()
        result = derive_migrations(graph, [], _make_scope())
        graph.update_node_details(Phase.SOURCE, 1, "renamed", {"ServerName": "changed"})
        assert result.jobs[0].source_component_name == "web"
        assert result.jobs[0].source_details["ServerName"] == "ServerName-v"


class TestHelpers:

    def test_select_target_skips_undetailed(self):
        graph = _make_graph()
        graph.update_node_details(Phase.TARGET, 5, "half", {"InstanceType": "t3.micro"})
        assert select_target(graph).id == 6

    def test_job_ref_format(self):
        rng = random.Random(42)
        refs = {generate_job_ref(rng) for _ in range(50)}
        assert all(re.fullmatch(r"MGN-[0-9A-Z]{4}", ref) for ref in refs)

    def test_job_ref_is_reproducible(self):
        assert generate_job_ref(random.Random(3)) == generate_job_ref(random.Random(3))
