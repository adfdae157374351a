"""Two-phase editing protocol.

An EditorSession wraps one ArchitectureGraph and enforces the workflow:

- The source diagram is designed first and confirmed; confirmation is
  refused while any source component is isolated.
- The target diagram can only be opened once the source is confirmed.
  While confirmed, the source diagram is read-only.
- Connections are drawn with a two-click gesture tracked by an explicit
  cursor: ``None`` or ``PendingStart(node_id)``.
- Kickoff is offered from the target diagram once it is populated and has
  no isolated components.

Every operation returns an Outcome; none of them raise for user mistakes.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from .. import catalog
from ..errors import DuplicateConnectionError, GraphError, InvalidKindError, NodeNotFoundError
from ..migration.mapper import CREATED, NOTHING_TO_DO, derive_migrations
from ..migration.models import MigrationJob, MigrationScope
from ..outcome import ERROR, INFO, SUCCESS, WARNING, Outcome
from .model import ArchitectureGraph, Phase, PositionLike
from .validation import ValidationReport, validate_phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingStart:
    """First click of a connect gesture."""
    node_id: int


class EditorSession:
    """Interaction state for one operator editing one graph."""

    def __init__(self, graph: ArchitectureGraph, scope: Optional[MigrationScope] = None):
        self.graph = graph
        self.scope = scope or MigrationScope()
        self.active_phase = Phase.TARGET if graph.source_confirmed else Phase.SOURCE
        self.cursor: Optional[PendingStart] = None

    # ── Phase handling ──────────────────────────────────────────────────

    def switch_phase(self, phase: Phase) -> Outcome:
        phase = Phase(phase)
        if phase == Phase.TARGET and not self.graph.source_confirmed:
            return Outcome.rejected(
                "source_not_confirmed",
                "Confirm the source architecture before designing the target.",
            )
        self.active_phase = phase
        self.cursor = None
        return Outcome.success("phase_switched", f"Now editing {phase.value} architecture.", level=INFO)

    def toggle_source_confirmation(self) -> Outcome:
        """Confirm or unconfirm the source diagram."""
        if self.graph.source_confirmed:
            self.graph.set_source_confirmed(False)
            self.active_phase = Phase.SOURCE
            self.cursor = None
            return Outcome.success("source_unconfirmed", "Source Architecture Unconfirmed!", level=WARNING)

        report = self.guidance(Phase.SOURCE)
        if report.errors > 0:
            return Outcome.rejected(
                "source_has_errors",
                "Please fix architecture errors (isolated nodes) before confirming.",
                level=ERROR,
                validation=report.to_dict(),
            )
        self.graph.set_source_confirmed(True)
        self.active_phase = Phase.TARGET
        self.cursor = None
        return Outcome.success("source_confirmed", "Source Architecture Confirmed!")

    def guidance(self, phase: Phase) -> ValidationReport:
        return validate_phase(self.graph, phase)

    # ── Component editing ───────────────────────────────────────────────

    def _edit_guard(self, phase: Phase) -> Optional[Outcome]:
        """Reject edits outside the active phase or to a locked source."""
        if phase != self.active_phase:
            other = "Source" if phase == Phase.SOURCE else "Target"
            return Outcome.rejected(
                "inactive_phase",
                f"Cannot interact with nodes outside the current phase. "
                f"Switch to {other} Architecture.",
            )
        if phase == Phase.SOURCE and self.graph.source_confirmed:
            return Outcome.rejected(
                "source_locked",
                "Source architecture is confirmed. Unconfirm it to make changes.",
            )
        return None

    def place_component(self, kind, position: PositionLike = None) -> Outcome:
        """Drop a palette component into the active diagram."""
        rejection = self._edit_guard(self.active_phase)
        if rejection:
            return rejection
        try:
            kind = catalog.parse_kind(kind)
        except InvalidKindError as e:
            return Outcome.from_error(e)

        palette = catalog.list_for_palette(self.active_phase, self.scope.source_env)
        if kind not in palette:
            return Outcome.rejected(
                "kind_not_in_palette",
                f"{catalog.lookup(kind).display_name} is not available in the "
                f"{self.active_phase.value} palette.",
                level=ERROR,
            )

        node = self.graph.place_node(self.active_phase, kind, position)
        return Outcome.success(
            "node_placed", f"{node.name} added.", level=INFO,
            phase=self.active_phase.value, node=node.to_dict(),
        )

    def save_node_details(
        self,
        phase: Phase,
        node_id: int,
        name: str,
        details: Mapping[str, Any],
    ) -> Outcome:
        """Save the checklist dialog for a component.

        A display name and the kind's primary attribute are mandatory; the
        node counts as detailed only when every attribute is filled.
        """
        phase = Phase(phase)
        rejection = self._edit_guard(phase)
        if rejection:
            return rejection
        node = self.graph.find_node(phase, node_id)
        if node is None:
            return Outcome.from_error(NodeNotFoundError(phase, node_id))

        primary = catalog.primary_attribute(node.kind)
        name = (name or "").strip()
        if not name or not str((details or {}).get(primary) or "").strip():
            return Outcome.rejected(
                "missing_required_field",
                f"Please provide a Display Name and value for {primary.replace('_', ' ')}.",
                level=ERROR,
            )

        node = self.graph.update_node_details(phase, node_id, name, details)
        status = "Complete" if node.is_detailed else "Pending"
        return Outcome.success(
            "details_saved",
            f"Details for {node.name} saved. Detailed status: {status}",
            level=SUCCESS if node.is_detailed else INFO,
            phase=phase.value, node=node.to_dict(),
        )

    def delete_component(self, phase: Phase, node_id: int) -> Outcome:
        phase = Phase(phase)
        rejection = self._edit_guard(phase)
        if rejection:
            return rejection
        removed = self.graph.delete_node(phase, node_id)
        if self.cursor and self.cursor.node_id == node_id:
            self.cursor = None
        if not removed:
            return Outcome.success("node_absent", f"Node {node_id} was already removed.", level=INFO)
        return Outcome.success(
            "node_deleted", "Component and associated connections removed.",
            level=WARNING, node_id=node_id,
        )

    def move_component(self, phase: Phase, node_id: int, position: PositionLike) -> Outcome:
        phase = Phase(phase)
        rejection = self._edit_guard(phase)
        if rejection:
            return rejection
        try:
            node = self.graph.move_node(phase, node_id, position)
        except GraphError as e:
            return Outcome.from_error(e)
        return Outcome.success("node_moved", f"{node.name} moved.", level=INFO, node=node.to_dict())

    # ── Connect gesture ─────────────────────────────────────────────────

    def click_node(self, phase: Phase, node_id: int) -> Outcome:
        """Advance the two-click connect gesture."""
        phase = Phase(phase)
        rejection = self._edit_guard(phase)
        if rejection:
            return rejection

        if self.cursor is None:
            node = self.graph.find_node(phase, node_id)
            if node is None:
                return Outcome.from_error(NodeNotFoundError(phase, node_id))
            self.cursor = PendingStart(node_id)
            return Outcome.success(
                "connection_started",
                f"Selected {node.name}. Click another component to connect.",
                level=INFO,
            )

        start_id = self.cursor.node_id
        if start_id == node_id:
            self.cursor = None
            return Outcome.success("selection_cleared", "Selection cleared.", level=INFO)

        # Every completion attempt ends the gesture
        self.cursor = None
        try:
            connection = self.graph.add_connection(phase, start_id, node_id)
        except DuplicateConnectionError as e:
            return Outcome.from_error(e, level=WARNING)
        except GraphError as e:
            return Outcome.from_error(e)
        return Outcome.success(
            "connection_created", "Connection established!",
            connection=connection.to_dict(),
        )

    # ── Kickoff ─────────────────────────────────────────────────────────

    def kickoff(
        self,
        existing_jobs: Iterable[MigrationJob],
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> Outcome:
        """Derive new migration jobs. The caller persists ``data["jobs"]``."""
        if self.active_phase != Phase.TARGET:
            return Outcome.rejected(
                "target_not_ready",
                "Switch to the target architecture to kick off the migration.",
            )
        if not self.graph.target_nodes:
            return Outcome.rejected("target_not_ready", "Design the target architecture first.")
        target_report = self.guidance(Phase.TARGET)
        if target_report.errors > 0:
            return Outcome.rejected(
                "target_not_ready",
                "Please fix target architecture errors (isolated nodes) before kickoff.",
                level=ERROR,
                validation=target_report.to_dict(),
            )

        result = derive_migrations(self.graph, existing_jobs, self.scope, rng=rng, clock=clock)
        if result.code != CREATED:
            level = WARNING if result.code == NOTHING_TO_DO else ERROR
            return Outcome.rejected(result.code, result.message, level=level, created=0, jobs=[])
        return Outcome.success(result.code, result.message, created=result.created, jobs=result.jobs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active_phase": self.active_phase.value,
            "cursor": {"pending_start": self.cursor.node_id} if self.cursor else None,
            "graph": self.graph.to_dict(),
            "guidance": {
                Phase.SOURCE.value: self.guidance(Phase.SOURCE).to_dict(),
                Phase.TARGET.value: self.guidance(Phase.TARGET).to_dict(),
            },
        }
