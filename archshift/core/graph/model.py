"""Architecture graph: the source and target diagrams of one migration scope.

Both diagrams share a single node-id counter and a single connection list;
each connection is tagged with the phase it belongs to. The whole graph is
persisted as one document (see ``to_dict`` / ``from_dict``).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from uuid import uuid4

from .. import catalog
from ..catalog import ComponentKind
from ..errors import (
    DuplicateConnectionError,
    GraphDataError,
    InvalidKindError,
    NodeNotFoundError,
    SelfLoopError,
)

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    """Which of the two diagrams is being edited."""
    SOURCE = "source"
    TARGET = "target"


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Node:
    """A placed component.

    ``is_detailed`` is derived from ``details``; only the graph recomputes it.
    """
    id: int
    kind: ComponentKind
    name: str
    position: Position = field(default_factory=Position)
    details: Dict[str, str] = field(default_factory=dict)
    is_detailed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "x": self.position.x,
            "y": self.position.y,
            "details": dict(self.details),
            "is_detailed": self.is_detailed,
        }


@dataclass
class Connection:
    """An undirected edge between two nodes of the same phase."""
    id: str
    source_id: int
    target_id: int
    phase: Phase

    def joins(self, a: int, b: int) -> bool:
        return {self.source_id, self.target_id} == {a, b}

    def touches(self, node_id: int) -> bool:
        return self.source_id == node_id or self.target_id == node_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source_id": self.source_id,
            "target_id": self.target_id,
            "phase": self.phase.value,
        }


PositionLike = Union[Position, Tuple[float, float], None]


def _as_position(position: PositionLike) -> Position:
    if position is None:
        return Position()
    if isinstance(position, Position):
        return position
    x, y = position
    return Position(float(x), float(y))


def _clean_details(kind: ComponentKind, details: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Keep only the kind's checklist keys, as strings."""
    required = catalog.lookup(kind).required_attributes
    details = details or {}
    return {
        key: "" if details[key] is None else str(details[key])
        for key in required
        if key in details
    }


@dataclass
class ArchitectureGraph:
    """Aggregate root for the source and target diagrams.

    Mutations either complete or raise a GraphError before touching state.
    """
    source_nodes: List[Node] = field(default_factory=list)
    target_nodes: List[Node] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)
    source_confirmed: bool = False
    next_node_id: int = 1

    # ── Queries ─────────────────────────────────────────────────────────

    def nodes(self, phase: Phase) -> List[Node]:
        return self.source_nodes if Phase(phase) == Phase.SOURCE else self.target_nodes

    def find_node(self, phase: Phase, node_id: int) -> Optional[Node]:
        for node in self.nodes(phase):
            if node.id == node_id:
                return node
        return None

    def get_node(self, phase: Phase, node_id: int) -> Node:
        node = self.find_node(phase, node_id)
        if node is None:
            raise NodeNotFoundError(phase, node_id)
        return node

    def connections_for(self, phase: Phase) -> List[Connection]:
        phase = Phase(phase)
        return [c for c in self.connections if c.phase == phase]

    def has_connection(self, phase: Phase, a: int, b: int) -> bool:
        return any(c.joins(a, b) for c in self.connections_for(phase))

    # ── Mutations ───────────────────────────────────────────────────────

    def place_node(self, phase: Phase, kind: Union[ComponentKind, str], position: PositionLike = None) -> Node:
        """Create a node in ``phase`` with the next id from the shared counter."""
        spec = catalog.lookup(kind)
        node_id = self.next_node_id
        node = Node(
            id=node_id,
            kind=spec.kind,
            name=f"{spec.display_name}-{node_id}",
            position=_as_position(position),
        )
        self.nodes(phase).append(node)
        self.next_node_id += 1
        logger.debug(f"Placed {spec.kind.value} node {node_id} in {Phase(phase).value}")
        return node

    def update_node_details(
        self,
        phase: Phase,
        node_id: int,
        new_name: str,
        new_details: Mapping[str, Any],
    ) -> Node:
        """Replace a node's name and checklist, recomputing ``is_detailed``."""
        node = self.get_node(phase, node_id)
        details = _clean_details(node.kind, new_details)
        node.name = new_name
        node.details = details
        node.is_detailed = catalog.is_detailed(node.kind, details)
        return node

    def move_node(self, phase: Phase, node_id: int, position: PositionLike) -> Node:
        node = self.get_node(phase, node_id)
        node.position = _as_position(position)
        return node

    def delete_node(self, phase: Phase, node_id: int) -> bool:
        """Remove a node and every connection touching it.

        Returns False (and changes nothing) if the node is already gone.
        """
        nodes = self.nodes(phase)
        remaining = [n for n in nodes if n.id != node_id]
        if len(remaining) == len(nodes):
            return False
        nodes[:] = remaining
        # Edges of every phase are checked, not only the node's own
        self.connections = [c for c in self.connections if not c.touches(node_id)]
        logger.debug(f"Deleted node {node_id} from {Phase(phase).value}")
        return True

    def add_connection(self, phase: Phase, source_id: int, target_id: int) -> Connection:
        phase = Phase(phase)
        if source_id == target_id:
            raise SelfLoopError(source_id)
        for node_id in (source_id, target_id):
            if self.find_node(phase, node_id) is None:
                raise NodeNotFoundError(phase, node_id)
        if self.has_connection(phase, source_id, target_id):
            raise DuplicateConnectionError(source_id, target_id)

        connection = Connection(
            id=str(uuid4()),
            source_id=source_id,
            target_id=target_id,
            phase=phase,
        )
        self.connections.append(connection)
        return connection

    def set_source_confirmed(self, value: bool) -> None:
        self.source_confirmed = bool(value)

    # ── Document (de)serialisation ──────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_nodes": [n.to_dict() for n in self.source_nodes],
            "target_nodes": [n.to_dict() for n in self.target_nodes],
            "connections": [c.to_dict() for c in self.connections],
            "source_confirmed": self.source_confirmed,
            "next_node_id": self.next_node_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ArchitectureGraph":
        """Rebuild a graph from its persisted document.

        Every problem found is collected before raising, so a single
        GraphDataError describes the whole document. Malformed entries are
        reported as problems, never raised as raw exceptions.

        Raises:
            GraphDataError: On unknown kinds, bad ids or coordinates, bad
                phases, duplicate ids or connections whose endpoints are missing
        """
        if not isinstance(data, Mapping):
            raise GraphDataError([f"document is not an object: {type(data).__name__}"])

        problems: List[str] = []
        graph = cls(source_confirmed=bool(data.get("source_confirmed", False)))
        seen_ids = set()

        for phase, key in ((Phase.SOURCE, "source_nodes"), (Phase.TARGET, "target_nodes")):
            for raw in _entries(data, key, problems):
                try:
                    node = _node_from_raw(raw)
                except InvalidKindError as e:
                    problems.append(f"{key} node {raw.get('id')}: {e.message}")
                    continue
                except (KeyError, TypeError, ValueError) as e:
                    problems.append(f"{key} node {raw.get('id')!r} is malformed: {e}")
                    continue
                if node.id in seen_ids:
                    problems.append(f"duplicate node id {node.id}")
                    continue
                seen_ids.add(node.id)
                graph.nodes(phase).append(node)

        for raw in _entries(data, "connections", problems):
            try:
                phase = Phase(raw.get("phase"))
            except ValueError:
                problems.append(f"connection {raw.get('id')}: unknown phase {raw.get('phase')!r}")
                continue
            source_id, target_id = raw.get("source_id"), raw.get("target_id")
            if graph.find_node(phase, source_id) is None or graph.find_node(phase, target_id) is None:
                problems.append(
                    f"connection {raw.get('id')}: endpoints {source_id}-{target_id} "
                    f"not in {phase.value} architecture"
                )
                continue
            if source_id == target_id or graph.has_connection(phase, source_id, target_id):
                problems.append(f"connection {raw.get('id')}: self-loop or duplicate edge")
                continue
            graph.connections.append(Connection(
                id=str(raw.get("id") or uuid4()),
                source_id=source_id,
                target_id=target_id,
                phase=phase,
            ))

        try:
            stored_next = int(data.get("next_node_id") or 1)
        except (TypeError, ValueError):
            problems.append(f"invalid next_node_id: {data.get('next_node_id')!r}")
            stored_next = 1

        if problems:
            raise GraphDataError(problems)

        graph.next_node_id = max([stored_next] + [i + 1 for i in seen_ids])
        return graph


def _entries(data: Mapping[str, Any], key: str, problems: List[str]) -> List[Mapping[str, Any]]:
    """The object entries stored under ``key``; anything else is a problem."""
    value = data.get(key) or []
    if not isinstance(value, list):
        problems.append(f"{key} is not a list")
        return []
    entries = []
    for index, raw in enumerate(value):
        if isinstance(raw, Mapping):
            entries.append(raw)
        else:
            problems.append(f"{key}[{index}] is not an object")
    return entries


def _node_from_raw(raw: Mapping[str, Any]) -> Node:
    kind = catalog.parse_kind(raw.get("kind"))
    node_id = int(raw["id"])
    details = raw.get("details")
    if details is not None and not isinstance(details, Mapping):
        raise TypeError("details is not an object")
    details = _clean_details(kind, details)
    return Node(
        id=node_id,
        kind=kind,
        name=str(raw.get("name") or f"{catalog.lookup(kind).display_name}-{node_id}"),
        position=Position(float(raw.get("x") or 0.0), float(raw.get("y") or 0.0)),
        details=details,
        is_detailed=catalog.is_detailed(kind, details),
    )
