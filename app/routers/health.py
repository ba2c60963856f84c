"""
Health check endpoints.

This module provides endpoints for checking the health of the application,
including database connectivity.
"""

from typing import Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.logging import logger
from app.db.session import get_db

router = APIRouter()


@router.get("", response_model=Dict[str, str])
async def health_check() -> Dict[str, str]:
    """Liveness probe."""
    logger.debug("Health check endpoint called")
    return {"status": "ok", "version": settings.api.version}


@router.get("/db")
async def database_health_check(db: AsyncSession = Depends(get_db)):
    """
    Database health check endpoint.

    Returns:
        ``{"status": "ok"}`` when ``SELECT 1`` succeeds, 503 otherwise
    """
    try:
        result = await db.execute(text("SELECT 1"))
        if result.scalar() == 1:
            return {"status": "ok", "database": "connected"}
        logger.error("Database health check failed - unexpected result")
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "error", "database": "unavailable"},
    )
