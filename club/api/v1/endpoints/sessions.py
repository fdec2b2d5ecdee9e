"""
Class session endpoints.

Admin scheduling (single sessions and recurring batches) and the
student browsing view.
"""

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from club.api.dependencies import get_active_user, get_store, require_admin
from club.schemas.class_session import (ClassSession, ClassSessionCreate, ClassSessionUpdate, GenerateSessionsRequest,
                                        GenerateSessionsResult, SessionAvailability, )
from club.schemas.user import User
from club.services.club_store import ClubStore

router = APIRouter()


@router.get("", summary="List class sessions.", response_model=list[ClassSession])
def list_sessions(modality_id: Optional[str] = Query(None, description="Only sessions of this modality"),
                  start: Optional[datetime.date] = Query(None, description="Range start (inclusive)"),
                  end: Optional[datetime.date] = Query(None, description="Range end (inclusive)"),
                  store: ClubStore = Depends(get_store), user: User = Depends(get_active_user), ):
    sessions = store.sessions
    if modality_id:
        sessions = [s for s in sessions if s.modality_id == modality_id]
    if start:
        sessions = [s for s in sessions if s.start_time.astimezone(store.timezone).date() >= start]
    if end:
        sessions = [s for s in sessions if s.start_time.astimezone(store.timezone).date() <= end]
    return sessions


@router.get("/browse", summary="Sessions open for booking today and tomorrow.",
            response_model=list[SessionAvailability])
def browse_sessions(store: ClubStore = Depends(get_store), user: User = Depends(get_active_user)):
    return store.browse_sessions(user)


@router.post("", summary="Schedule a class session.", response_model=ClassSession,
             status_code=status.HTTP_201_CREATED)
def create_session(data: ClassSessionCreate, store: ClubStore = Depends(get_store),
                   admin: User = Depends(require_admin)):
    """A start time without offset is read as club local time."""
    return store.add_session(data)


@router.post("/generate", summary="Generate recurring class sessions.", response_model=GenerateSessionsResult,
             status_code=status.HTTP_201_CREATED)
def generate_sessions(data: GenerateSessionsRequest, store: ClubStore = Depends(get_store),
                      admin: User = Depends(require_admin)):
    """
    Expand a weekly pattern into sessions.

    Raises:
        HTTPException 409: Large batch not confirmed (resend with ``confirm``)
        HTTPException 422: Incomplete pattern
    """
    sessions = store.generate_sessions(data.spec, confirm=data.confirm)
    return GenerateSessionsResult(created=len(sessions), sessions=sessions)


@router.put("/{session_id}", summary="Update a class session.", response_model=ClassSession)
def update_session(session_id: str, data: ClassSessionUpdate, store: ClubStore = Depends(get_store),
                   admin: User = Depends(require_admin)):
    return store.update_session(session_id, data)


@router.delete("/{session_id}", summary="Cancel a class session and its bookings.",
               status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: str, store: ClubStore = Depends(get_store), admin: User = Depends(require_admin)):
    store.delete_session(session_id)


@router.get("/{session_id}/bookings/count", summary="Confirmed bookings of a session.")
def bookings_count(session_id: str, store: ClubStore = Depends(get_store), user: User = Depends(get_active_user)):
    return {"sessionId": session_id, "confirmed": store.get_session_bookings_count(session_id)}
