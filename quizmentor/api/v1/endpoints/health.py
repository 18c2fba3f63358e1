"""
Health check endpoints
"""

from fastapi import APIRouter

from quizmentor.core.config import settings
from quizmentor.core.database import DatabaseHealthCheck

router = APIRouter()


@router.get("/health")
def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.APP_VERSION,
    }


@router.get("/health/detailed")
def detailed_health_check():
    """Health check including database connectivity"""
    database = DatabaseHealthCheck.check_connection()
    return {
        "status": "healthy" if database["status"] == "healthy" else "degraded",
        "service": settings.PROJECT_NAME,
        "version": settings.APP_VERSION,
        "checks": {"database": database},
    }
