"""
Health check endpoint for the REST API.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.logging import rest_api_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import get_db


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Service status with a database round trip.
    Returns 503 when the database does not answer.
    """
    checks = {
        "status": "healthy",
        "service": "bocatto-api",
        "environment": settings.environment,
        "database": "connected",
    }
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check failed", error=str(e))
        checks["status"] = "unhealthy"
        checks["database"] = "disconnected"
        return JSONResponse(content=checks, status_code=503)
    return checks
