"""FastAPI dependencies for archshift.

Provides shared dependencies (identity, database, engine) via FastAPI's
Depends() injection system.
"""

import logging

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)


async def get_db_manager(request: Request):
    """Get DatabaseManager from app state."""
    return request.app.state.db_manager


async def get_engine(request: Request):
    """Get MigrationEngine from app state."""
    return request.app.state.engine


async def get_current_user(request: Request) -> dict:
    """FastAPI dependency for the session identity.

    Returns the user dict stored by POST /auth/session or raises 401.
    """
    user_id = request.session.get("user_id")
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return {
        "user_id": user_id,
        "display_name": request.session.get("display_name"),
        "anonymous": request.session.get("anonymous", True),
    }
