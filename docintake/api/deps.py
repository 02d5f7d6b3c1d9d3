"""
Shared dependencies: in-memory ingestion session registry.
Sessions live for the process; nothing is persisted.
"""
import logging

from fastapi import HTTPException, status

from docintake.jobs.ingestion import IngestionSession

logger = logging.getLogger(__name__)

_sessions: dict[str, IngestionSession] = {}


def create_session() -> IngestionSession:
    session = IngestionSession()
    _sessions[session.id] = session
    logger.info("session %s created", session.id)
    return session


async def get_session(session_id: str) -> IngestionSession:
    """Return the session or 404."""
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


async def close_all_sessions() -> None:
    for session in list(_sessions.values()):
        await session.close()
    _sessions.clear()
