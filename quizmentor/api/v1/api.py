"""
API v1 main router
Combines all v1 endpoint routers
"""

from fastapi import APIRouter

from quizmentor.api.v1.endpoints import admin, health, quizzes, users

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(users.router, prefix="/user", tags=["Users"])
api_router.include_router(quizzes.router, prefix="/quizzes", tags=["Quizzes"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(health.router, tags=["Health"])
