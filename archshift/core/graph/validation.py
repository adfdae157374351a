"""Architectural guidance: completeness checks for one diagram.

Two rules:
1. Every component must have its checklist filled in (warning per node)
2. Every component must be connected to something (error per isolated node)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from .model import ArchitectureGraph, Connection, Node, Phase


@dataclass
class ValidationReport:
    warnings: int = 0
    errors: int = 0
    isolated_node_ids: List[int] = field(default_factory=list)
    is_complete: bool = True

    def summary(self) -> str:
        if self.is_complete:
            return "Architecture complete"
        parts = []
        if self.errors:
            parts.append(f"{self.errors} isolated component(s)")
        if self.warnings:
            parts.append(f"{self.warnings} component(s) missing details")
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "warnings": self.warnings,
            "errors": self.errors,
            "isolated_node_ids": list(self.isolated_node_ids),
            "is_complete": self.is_complete,
            "summary": self.summary(),
        }


def validate(nodes: Iterable[Node], connections: Iterable[Connection]) -> ValidationReport:
    """Check ``nodes`` against a connection set already filtered to one phase."""
    nodes = list(nodes)
    connected = set()
    for c in connections:
        connected.add(c.source_id)
        connected.add(c.target_id)

    warnings = sum(1 for n in nodes if not n.is_detailed)
    isolated = [n.id for n in nodes if n.id not in connected]

    return ValidationReport(
        warnings=warnings,
        errors=len(isolated),
        isolated_node_ids=isolated,
        is_complete=warnings == 0 and not isolated,
    )


def validate_phase(graph: ArchitectureGraph, phase: Phase) -> ValidationReport:
    return validate(graph.nodes(phase), graph.connections_for(phase))
