import argparse
import logging
import random
import sys
from pathlib import Path

from sqlalchemy.engine import make_url

from .core.db.db import get_database_manager, wait_for_db
from .core.migration.engine import MigrationEngine
from .core.migration.simulator import StatusSimulator
from .core.store.workspace_store import WorkspaceStore
from .setting import get_settings


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.ERROR)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("psycopg2").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


def _ensure_sqlite_dir(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def main():
    """Main entry point for archshift."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="archshift - Architecture Migration Designer")
    parser.add_argument(
        "--port",
        type=int,
        default=9010,
        help="Port for the API server"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run in debug mode (auto-reload)"
    )
    args = parser.parse_args()

    setup_logging(args.log_level)
    logger.info("Starting archshift")

    _ensure_sqlite_dir(settings.database_url)
    db_manager = get_database_manager(settings.database_url)
    if wait_for_db(db_manager):
        db_manager.init_db()

    rng = random.Random(settings.simulation_seed)
    if settings.simulation_seed is not None:
        logger.info(f"Simulation seeded with {settings.simulation_seed}")

    store = WorkspaceStore(db_manager)
    engine = MigrationEngine(
        store,
        simulator=StatusSimulator(rng=rng),
        worker_interval=settings.simulation_interval_seconds,
        rng=rng,
    )
    engine.resume()

    from .api.app import create_app
    app = create_app(db_manager=db_manager, engine=engine, settings=settings)

    import uvicorn

    logger.info(f"Starting FastAPI server on http://0.0.0.0:{args.port}")
    print(f"\n  archshift is running at: http://localhost:{args.port}")
    print(f"  API docs at: http://localhost:{args.port}/docs\n")

    try:
        uvicorn.run(
            app,
            host="0.0.0.0",
            port=args.port,
            log_level=args.log_level.lower(),
            reload=args.debug,
        )
    finally:
        engine.shutdown()
        db_manager.dispose()


if __name__ == "__main__":
    main()
