"""Migration Engine: orchestrator for architecture editing and kickoff.

Provides the public API consumed by API routes. Each user identity gets one
EditorSession, loaded from the store on first use and saved back whole
after every successful change.
"""

import logging
import random
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .. import catalog
from ..catalog import SourceEnvironment
from ..constants import DEFAULT_TICK_INTERVAL, TARGET_REGIONS
from ..errors import GraphDataError, StoreError
from ..graph.model import ArchitectureGraph, Phase
from ..graph.protocol import EditorSession
from ..outcome import ERROR, SUCCESS, Outcome
from .models import MigrationScope
from .simulator import StatusSimulator
from .worker import SimulationWorker

logger = logging.getLogger(__name__)

# Outcome codes that changed the graph and must be saved
MUTATING_CODES = {
    "node_placed",
    "details_saved",
    "node_deleted",
    "node_moved",
    "connection_created",
    "source_confirmed",
    "source_unconfirmed",
}


class MigrationEngine:
    """Orchestrate editing sessions, kickoff and the status simulator.

    Public API:
        get_state(user_id) -> session snapshot
        update_scope(user_id, ...) -> Outcome
        place_component / save_node_details / delete_component /
        move_component / click_node / switch_phase /
        toggle_source_confirmation(user_id, ...) -> Outcome
        kickoff(user_id) -> Outcome with created jobs
        list_jobs(user_id) -> job dicts, newest first
    """

    def __init__(
        self,
        store,
        simulator: Optional[StatusSimulator] = None,
        worker_interval: float = DEFAULT_TICK_INTERVAL,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._rng = rng or random.Random()
        self._clock = clock
        self._simulator = simulator or StatusSimulator(rng=self._rng, clock=clock)
        self._worker_interval = worker_interval
        self._worker: Optional[SimulationWorker] = None

        self._sessions: Dict[str, EditorSession] = {}
        self._load_errors: Dict[str, dict] = {}
        self._user_locks: Dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

    # ── Worker lifecycle ────────────────────────────────────────────────

    def _ensure_worker(self):
        """Lazily initialize and start the simulation worker."""
        with self._lock:
            if self._worker is None:
                self._worker = SimulationWorker(
                    self._simulator, self._store, interval=self._worker_interval
                )
            if not self._worker.is_running:
                self._worker.start()

    def resume(self):
        """Restart simulation for jobs left active by a previous run."""
        try:
            active = self._store.count_active_jobs()
        except StoreError as e:
            logger.error(f"Could not resume simulation: {e}")
            return
        if active:
            logger.info(f"Resuming simulation for {active} active job(s)")
            self._ensure_worker()

    def shutdown(self):
        if self._worker is not None:
            self._worker.stop()

    # ── Sessions ────────────────────────────────────────────────────────

    def _user_lock(self, user_id: str) -> threading.RLock:
        with self._lock:
            return self._user_locks.setdefault(user_id, threading.RLock())

    def _session(self, user_id: str) -> EditorSession:
        """Return the cached session, loading the stored document once.

        Raises:
            StoreError: If the document could not be read. Nothing is cached,
                so the next request retries the load.
        """
        with self._lock:
            session = self._sessions.get(user_id)
        if session is not None:
            return session

        graph, scope = ArchitectureGraph(), MigrationScope()
        is_new = False
        try:
            document = self._store.load_document(user_id)
        except StoreError as e:
            logger.error(f"Could not load workspace for {user_id}: {e.message}")
            raise
        if document is None:
            is_new = True
        else:
            scope = document.scope
            try:
                graph = ArchitectureGraph.from_dict(document.architecture)
            except GraphDataError as e:
                logger.error(f"Stored architecture for {user_id} is invalid: {e.message}")
                self._load_errors[user_id] = e.to_dict()

        session = EditorSession(graph, scope)
        with self._lock:
            session = self._sessions.setdefault(user_id, session)

        if is_new:
            try:
                self._store.save_document(user_id, session.scope, session.graph)
            except StoreError as e:
                logger.warning(f"Initial workspace write failed for {user_id}: {e.message}")
        return session

    def end_session(self, user_id: str) -> None:
        """Forget the in-memory session; the next request reloads it."""
        with self._lock:
            self._sessions.pop(user_id, None)
            self._load_errors.pop(user_id, None)

    def _persist(self, user_id: str, session: EditorSession, outcome: Outcome) -> Outcome:
        """Save the document; a failed save is reported but not rolled back."""
        try:
            self._store.save_document(user_id, session.scope, session.graph)
            outcome.data["persisted"] = True
        except StoreError as e:
            outcome.data["persisted"] = False
            outcome.data["store_error"] = e.message
        return outcome

    def _edit(self, user_id: str, action: Callable[[EditorSession], Outcome]) -> Outcome:
        with self._user_lock(user_id):
            try:
                session = self._session(user_id)
            except StoreError as e:
                return Outcome.from_error(e)
            outcome = action(session)
            if outcome.ok and outcome.code in MUTATING_CODES:
                outcome = self._persist(user_id, session, outcome)
            if outcome.level == ERROR:
                logger.info(f"[{user_id}] {outcome.code}: {outcome.message}")
            return outcome

    # ── Public API: state and scope ─────────────────────────────────────

    def get_state(self, user_id: str) -> Dict[str, Any]:
        with self._user_lock(user_id):
            session = self._session(user_id)
            state = session.to_dict()
            state["scope"] = session.scope.to_dict()
            state["palette"] = self._palette(session)
            state["load_error"] = self._load_errors.get(user_id)
            return state

    def get_scope(self, user_id: str) -> Dict[str, Any]:
        return self._session(user_id).scope.to_dict()

    def update_scope(
        self,
        user_id: str,
        app_name: str,
        source_env: str = SourceEnvironment.ONPREM.value,
        target_region: str = "us-east-1",
    ) -> Outcome:
        if not (app_name or "").strip():
            return Outcome.rejected("app_name_required", "Please enter an Application Name.")
        try:
            env = SourceEnvironment(source_env)
        except ValueError:
            return Outcome.rejected(
                "invalid_scope", f"Unsupported source environment: {source_env}", level=ERROR
            )
        if target_region not in TARGET_REGIONS:
            return Outcome.rejected(
                "invalid_scope", f"Unsupported target region: {target_region}", level=ERROR
            )

        with self._user_lock(user_id):
            try:
                session = self._session(user_id)
            except StoreError as e:
                return Outcome.from_error(e)
            session.scope = MigrationScope(app_name.strip(), env, target_region)
            outcome = Outcome.success(
                "scope_saved", "Configuration saved!", scope=session.scope.to_dict()
            )
            return self._persist(user_id, session, outcome)

    def _palette(self, session: EditorSession) -> List[Dict[str, Any]]:
        kinds = catalog.list_for_palette(session.active_phase, session.scope.source_env)
        return [
            {
                "kind": spec.kind.value,
                "display_name": spec.display_name,
                "required_attributes": list(spec.required_attributes),
            }
            for spec in (catalog.lookup(k) for k in kinds)
        ]

    def palette(self, user_id: str) -> List[Dict[str, Any]]:
        return self._palette(self._session(user_id))

    # ── Public API: editing ─────────────────────────────────────────────

    def switch_phase(self, user_id: str, phase: Phase) -> Outcome:
        return self._edit(user_id, lambda s: s.switch_phase(phase))

    def place_component(self, user_id: str, kind: str, position=None) -> Outcome:
        return self._edit(user_id, lambda s: s.place_component(kind, position))

    def save_node_details(self, user_id: str, phase: Phase, node_id: int, name: str, details) -> Outcome:
        return self._edit(user_id, lambda s: s.save_node_details(phase, node_id, name, details))

    def delete_component(self, user_id: str, phase: Phase, node_id: int) -> Outcome:
        return self._edit(user_id, lambda s: s.delete_component(phase, node_id))

    def move_component(self, user_id: str, phase: Phase, node_id: int, position) -> Outcome:
        return self._edit(user_id, lambda s: s.move_component(phase, node_id, position))

    def click_node(self, user_id: str, phase: Phase, node_id: int) -> Outcome:
        return self._edit(user_id, lambda s: s.click_node(phase, node_id))

    def toggle_source_confirmation(self, user_id: str) -> Outcome:
        return self._edit(user_id, lambda s: s.toggle_source_confirmation())

    def validate_phase(self, user_id: str, phase: Phase) -> Dict[str, Any]:
        with self._user_lock(user_id):
            return self._session(user_id).guidance(Phase(phase)).to_dict()

    def save(self, user_id: str) -> Outcome:
        """Manual save of the current document."""
        with self._user_lock(user_id):
            try:
                session = self._session(user_id)
            except StoreError as e:
                return Outcome.from_error(e)
            outcome = self._persist(
                user_id, session, Outcome.success("saved", "Configuration saved!")
            )
            if not outcome.data["persisted"]:
                return Outcome.rejected(
                    "store_error",
                    f"Failed to save configuration: {outcome.data['store_error']}",
                    level=ERROR,
                )
            return outcome

    # ── Public API: migration ───────────────────────────────────────────

    def kickoff(self, user_id: str) -> Outcome:
        """Derive and persist new jobs, then make sure the simulator runs."""
        with self._user_lock(user_id):
            try:
                session = self._session(user_id)
                existing = self._store.list_jobs(user_id)
            except StoreError as e:
                return Outcome.from_error(e)

            outcome = session.kickoff(existing, rng=self._rng, clock=self._clock)
            if not outcome.ok:
                return outcome

            created = []
            try:
                for job in outcome.data["jobs"]:
                    self._store.append_job(user_id, job)
                    created.append(job)
            except StoreError as e:
                logger.error(f"Kickoff for {user_id} stopped after {len(created)} job(s): {e.message}")
                # Jobs already written are active and must still progress
                if created:
                    self._ensure_worker()
                return Outcome.rejected(
                    "store_error",
                    f"Error initiating migration: {e.message}",
                    level=ERROR,
                    created=len(created),
                    jobs=[j.to_dict() for j in created],
                )

        self._ensure_worker()
        logger.info(f"[{user_id}] {len(created)} migration job(s) initiated")
        return Outcome.success(
            outcome.code,
            f"{len(created)} migration job(s) initiated via MGN!",
            level=SUCCESS,
            created=len(created),
            jobs=[j.to_dict() for j in created],
        )

    def list_jobs(self, user_id: str) -> List[Dict[str, Any]]:
        return [job.to_dict() for job in self._store.list_jobs(user_id)]

    def subscribe_jobs(self, user_id: str, callback) -> Callable[[], None]:
        return self._store.subscribe_jobs(user_id, callback)
