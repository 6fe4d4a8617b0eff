"""Health check route."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from court_directory.database.db import get_db_session

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/health")
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """
    Health check endpoint.

    Returns:
        dict: Service status and whether the database answered
    """
    try:
        await session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": True}
    except Exception as e:
        logger.error("Health check database query failed: %s", e, exc_info=True)
        return {"status": "unhealthy", "database": False}
