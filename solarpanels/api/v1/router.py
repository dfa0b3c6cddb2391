"""
API v1 router - aggregates all endpoint modules (RESTful structure).
"""

from fastapi import APIRouter

from solarpanels.api.v1.endpoints import health, panels, solarpanel_requests, users

api_router = APIRouter(prefix="/v1")

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(panels.router, prefix="/panels", tags=["panels"])
api_router.include_router(
    solarpanel_requests.router, prefix="/solarpanel-requests", tags=["solarpanel-requests"]
)
