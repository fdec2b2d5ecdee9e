"""
Club settings endpoints.
"""

from fastapi import APIRouter, Depends

from club.api.dependencies import get_active_user, get_store, require_admin
from club.schemas.settings import BookingReleaseHour
from club.schemas.user import User
from club.services.club_store import ClubStore

router = APIRouter()


@router.get("/booking-release-hour", summary="Hour from which next-day sessions open.",
            response_model=BookingReleaseHour)
def get_release_hour(store: ClubStore = Depends(get_store), user: User = Depends(get_active_user)):
    return BookingReleaseHour(hour=store.booking_release_hour)


@router.put("/booking-release-hour", summary="Change the booking release hour.", response_model=BookingReleaseHour)
def update_release_hour(data: BookingReleaseHour, store: ClubStore = Depends(get_store),
                        admin: User = Depends(require_admin)):
    return BookingReleaseHour(hour=store.update_booking_release_hour(data.hour))
