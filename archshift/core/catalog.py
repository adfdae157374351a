"""Component catalog: the component kinds an operator can place and the
checklist of migration attributes each one requires.

The catalog is static configuration. Everything else in archshift treats
it as read-only.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Tuple, Union

from .errors import InvalidKindError


class ComponentKind(str, Enum):
    """Placeable component kinds. Values are the persisted wire strings."""
    ONPREM_SERVER = "onprem-server"
    ONPREM_DB = "onprem-db"
    ONPREM_LB = "onprem-lb"
    ONPREM_NETWORK = "onprem-network"
    AWS_EC2 = "aws-ec2"
    AWS_RDS = "aws-rds"
    AWS_ELB = "aws-elb"
    AWS_VPC = "aws-vpc"


class SourceEnvironment(str, Enum):
    """Where the workload being migrated currently runs."""
    ONPREM = "onprem"            # VMware, physical
    AWS_TO_AWS = "aws-to-aws"    # region to region


@dataclass(frozen=True)
class ComponentSpec:
    kind: ComponentKind
    display_name: str
    required_attributes: Tuple[str, ...]

    @property
    def primary_attribute(self) -> str:
        return self.required_attributes[0]


COMPONENT_CATALOG: Dict[ComponentKind, ComponentSpec] = {
    spec.kind: spec
    for spec in (
        # Source (on-premises) components
        ComponentSpec(ComponentKind.ONPREM_SERVER, "App Server (VM)",
                      ("ServerName", "OS", "CPU_Cores", "RAM_GB", "Storage_Disks", "IsClusterNode")),
        ComponentSpec(ComponentKind.ONPREM_DB, "Database (VM)",
                      ("DBEngine", "DBVersion", "LicenseType", "DataSize_GB", "BackupMethod")),
        ComponentSpec(ComponentKind.ONPREM_LB, "Load Balancer",
                      ("Model", "IPAddress", "ProtocolPorts")),
        ComponentSpec(ComponentKind.ONPREM_NETWORK, "Network Gateway",
                      ("VLAN_ID", "Subnet_CIDR", "FirewallRules")),
        # AWS components
        ComponentSpec(ComponentKind.AWS_EC2, "EC2 Instance",
                      ("InstanceType", "AMI_ID", "SecurityGroup_ID", "TargetSubnet")),
        ComponentSpec(ComponentKind.AWS_RDS, "RDS Instance",
                      ("DBEngine", "AllocatedStorage_GB", "MultiAZ_Enabled")),
        ComponentSpec(ComponentKind.AWS_ELB, "ELB (ALB/NLB)",
                      ("Type", "TargetGroup_ARN", "Listener_Ports")),
        ComponentSpec(ComponentKind.AWS_VPC, "VPC/Subnet",
                      ("CIDR_Block", "AvailabilityZone")),
    )
}

# Target kind every detailed source node is mapped onto at kickoff
COMPUTE_INSTANCE_KIND = ComponentKind.AWS_EC2

ONPREM_PALETTE: List[ComponentKind] = [
    ComponentKind.ONPREM_SERVER,
    ComponentKind.ONPREM_DB,
    ComponentKind.ONPREM_LB,
    ComponentKind.ONPREM_NETWORK,
]

AWS_PALETTE: List[ComponentKind] = [
    ComponentKind.AWS_EC2,
    ComponentKind.AWS_RDS,
    ComponentKind.AWS_ELB,
    ComponentKind.AWS_VPC,
]


def parse_kind(kind: Union[ComponentKind, str]) -> ComponentKind:
    """Coerce a kind or its wire string to ComponentKind.

    Raises:
        InvalidKindError: If the value names no catalog entry
    """
    if isinstance(kind, ComponentKind):
        return kind
    try:
        return ComponentKind(kind)
    except ValueError:
        raise InvalidKindError(kind) from None


def lookup(kind: Union[ComponentKind, str]) -> ComponentSpec:
    """Return the catalog entry for ``kind``."""
    return COMPONENT_CATALOG[parse_kind(kind)]


def list_for_palette(phase, source_env: Union[SourceEnvironment, str]) -> List[ComponentKind]:
    """Kinds offered in the palette for a phase.

    The target phase is always AWS. The source phase follows the scope's
    source environment.
    """
    phase_name = getattr(phase, "value", phase)
    if phase_name == "target":
        return list(AWS_PALETTE)
    if SourceEnvironment(source_env) == SourceEnvironment.ONPREM:
        return list(ONPREM_PALETTE)
    return list(AWS_PALETTE)


def primary_attribute(kind: Union[ComponentKind, str]) -> str:
    return lookup(kind).primary_attribute


def is_detailed(kind: Union[ComponentKind, str], details: Mapping[str, str]) -> bool:
    """True iff every required attribute has a non-blank value."""
    return all(
        str(details.get(attr) or "").strip() != ""
        for attr in lookup(kind).required_attributes
    )
