import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.db.engine_sync import get_sync_session

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health", tags=["System"])
def get_system_health(session: Session = Depends(get_sync_session)):
    """
    Returns the system health status including a database round trip.
    """
    try:
        session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {e}")
        database = "error"

    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
    }
