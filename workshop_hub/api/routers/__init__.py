"""Router registrations."""

from fastapi import APIRouter

from workshop_hub.api.routers import events, health, notifications, users, workshops


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router, tags=["health"])
    router.include_router(workshops.router, prefix="/api/v1/workshops", tags=["workshops"])
    router.include_router(users.router, prefix="/api/v1/users", tags=["users"])
    router.include_router(notifications.router, prefix="/api/v1/notifications", tags=["notifications"])
    router.include_router(events.router, prefix="/api/v1/events", tags=["events"])
    return router
