"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from club.api.v1.endpoints import auth, bookings, modalities, sessions, settings, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(modalities.router, prefix="/modalities", tags=["Modalities"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["Class sessions"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
api_router.include_router(users.router, prefix="/users", tags=["Members"])
api_router.include_router(settings.router, prefix="/settings", tags=["Club settings"])
