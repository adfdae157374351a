"""Architecture graph editing.

Exports:
- ArchitectureGraph, Node, Connection, Phase, Position: data model
- validate, validate_phase, ValidationReport: completeness checks
- EditorSession, PendingStart: two-phase editing protocol
"""

from .model import ArchitectureGraph, Connection, Node, Phase, Position
from .validation import ValidationReport, validate, validate_phase
from .protocol import EditorSession, PendingStart

__all__ = [
    "ArchitectureGraph",
    "Connection",
    "Node",
    "Phase",
    "Position",
    "ValidationReport",
    "validate",
    "validate_phase",
    "EditorSession",
    "PendingStart",
]
