"""
Booking endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from club.api.dependencies import get_active_user, get_store, require_staff
from club.schemas.booking import Booking, BookingCreate
from club.schemas.user import User
from club.services.club_store import ClubStore

router = APIRouter()


@router.post("", summary="Book a seat in a class session.", response_model=Booking,
             status_code=status.HTTP_201_CREATED)
def book(data: BookingCreate, store: ClubStore = Depends(get_store), user: User = Depends(get_active_user)):
    """
    Reserve a seat for the current user.

    Raises:
        HTTPException 409: Session full, already booked or outside the booking window
        HTTPException 403: Next-day session before the release hour
    """
    return store.book_session(user, data.session_id)


@router.get("/me", summary="Current user's bookings.", response_model=list[Booking])
def my_bookings(store: ClubStore = Depends(get_store), user: User = Depends(get_active_user)):
    return store.my_bookings(user)


@router.get("", summary="List all bookings.", response_model=list[Booking])
def list_bookings(session_id: Optional[str] = Query(None, description="Only bookings of this session"),
                  store: ClubStore = Depends(get_store), staff: User = Depends(require_staff), ):
    if session_id:
        return store.entities.bookings_for_session(session_id)
    return store.bookings


@router.delete("/{booking_id}", summary="Cancel a booking.", status_code=status.HTTP_204_NO_CONTENT)
def cancel(booking_id: str, store: ClubStore = Depends(get_store), user: User = Depends(get_active_user)):
    store.cancel_booking(user, booking_id)
