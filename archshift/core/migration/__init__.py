"""Migration derivation and simulation.

Public API:
    MigrationEngine: per-user orchestration consumed by API routes
    derive_migrations: map a confirmed graph onto new job records
    StatusSimulator: probabilistic status transitions
    SimulationWorker: background tick driver
"""

# Lazy imports: the engine pulls in the graph protocol, which itself
# imports the mapper from this package.

__all__ = [
    "MigrationEngine",
    "derive_migrations",
    "MappingResult",
    "MigrationJob",
    "MigrationScope",
    "MigrationStatus",
    "StatusSimulator",
    "TickReport",
    "SimulationWorker",
]

_IMPORT_MAP = {
    "MigrationEngine": ".engine",
    "derive_migrations": ".mapper",
    "MappingResult": ".mapper",
    "MigrationJob": ".models",
    "MigrationScope": ".models",
    "MigrationStatus": ".models",
    "StatusSimulator": ".simulator",
    "TickReport": ".simulator",
    "SimulationWorker": ".worker",
}


def __getattr__(name):
    if name in _IMPORT_MAP:
        import importlib
        module = importlib.import_module(_IMPORT_MAP[name], __package__)
        return getattr(module, name)
    raise AttributeError(f"module 'archshift.core.migration' has no attribute {name}")
