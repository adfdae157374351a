"""Unit tests for the component catalog and palettes."""

import pytest

from archshift.core import catalog
from archshift.core.catalog import (
    AWS_PALETTE,
    COMPONENT_CATALOG,
    ComponentKind,
    ONPREM_PALETTE,
    SourceEnvironment,
)
from archshift.core.errors import InvalidKindError
from archshift.core.graph.model import Phase


class TestCatalogEntries:

    def test_every_kind_has_an_entry(self):
        assert set(COMPONENT_CATALOG) == set(ComponentKind)

    def test_primary_attribute_is_first_required(self):
        assert catalog.primary_attribute("onprem-server") == "ServerName"
        assert catalog.primary_attribute(ComponentKind.AWS_EC2) == "InstanceType"
        assert catalog.primary_attribute("aws-vpc") == "CIDR_Block"

    def test_lookup_display_name(self):
        assert catalog.lookup("onprem-db").display_name == "Database (VM)"
        assert catalog.lookup("aws-elb").display_name == "ELB (ALB/NLB)"

    def test_parse_unknown_kind_raises(self):
        with pytest.raises(InvalidKindError) as exc:
            catalog.parse_kind("gcp-vm")
        assert exc.value.code == "invalid_kind"
        assert exc.value.kind == "gcp-vm"


class TestIsDetailed:

    def test_all_attributes_filled(self):
        details = {"CIDR_Block": "10.0.0.0/16", "AvailabilityZone": "us-east-1a"}
        assert catalog.is_detailed("aws-vpc", details) is True

    def test_missing_attribute(self):
        assert catalog.is_detailed("aws-vpc", {"CIDR_Block": "10.0.0.0/16"}) is False

    def test_blank_attribute_counts_as_missing(self):
        details = {"CIDR_Block": "10.0.0.0/16", "AvailabilityZone": "   "}
        assert catalog.is_detailed("aws-vpc", details) is False

    def test_extra_keys_do_not_matter(self):
        details = {"CIDR_Block": "10.0.0.0/16", "AvailabilityZone": "a", "Owner": "ops"}
        assert catalog.is_detailed("aws-vpc", details) is True


class TestPalette:

    def test_target_palette_is_always_aws(self):
        assert catalog.list_for_palette(Phase.TARGET, SourceEnvironment.ONPREM) == AWS_PALETTE
        assert catalog.list_for_palette("target", "aws-to-aws") == AWS_PALETTE

    def test_onprem_source_palette(self):
        assert catalog.list_for_palette(Phase.SOURCE, SourceEnvironment.ONPREM) == ONPREM_PALETTE

    def test_aws_to_aws_source_palette(self):
        assert catalog.list_for_palette(Phase.SOURCE, "aws-to-aws") == AWS_PALETTE

    def test_palette_is_a_copy(self):
        palette = catalog.list_for_palette(Phase.SOURCE, SourceEnvironment.ONPREM)
        palette.clear()
        assert len(ONPREM_PALETTE) == 4
