"""Domain exceptions for archshift.

Structural rejections raised by the graph model carry a stable ``code`` so
the protocol layer and the API can report them without string matching:

- InvalidKindError: component kind is not in the catalog
- NodeNotFoundError: node id is absent from the named phase
- SelfLoopError: connection endpoints are the same node
- DuplicateConnectionError: the unordered pair is already connected
- GraphDataError: a stored document failed load-time validation

StoreError wraps persistence failures from the database layer.
"""

from typing import List, Optional


class ArchShiftError(Exception):
    """Base exception for all archshift errors."""

    code = "archshift_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class GraphError(ArchShiftError):
    """A structural rejection. The graph is unchanged when one is raised."""

    code = "graph_error"


class InvalidKindError(GraphError):
    code = "invalid_kind"

    def __init__(self, kind):
        super().__init__(f"Unknown component kind: {kind!r}")
        self.kind = kind


class NodeNotFoundError(GraphError):
    code = "node_not_found"

    def __init__(self, phase, node_id):
        phase_name = getattr(phase, "value", phase)
        super().__init__(f"Node {node_id} not found in {phase_name} architecture")
        self.phase = phase
        self.node_id = node_id


class SelfLoopError(GraphError):
    code = "self_loop"

    def __init__(self, node_id):
        super().__init__(f"Cannot connect node {node_id} to itself")
        self.node_id = node_id


class DuplicateConnectionError(GraphError):
    code = "duplicate_connection"

    def __init__(self, source_id, target_id):
        super().__init__("Connection already exists.")
        self.source_id = source_id
        self.target_id = target_id


class GraphDataError(GraphError):
    """Raised when a persisted architecture document cannot be loaded."""

    code = "invalid_document"

    def __init__(self, problems: List[str]):
        super().__init__("Invalid architecture document: " + "; ".join(problems))
        self.problems = list(problems)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "problems": self.problems}


class StoreError(ArchShiftError):
    """The persistent store could not complete an operation."""

    code = "store_error"

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
