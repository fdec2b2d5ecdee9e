"""
Member management endpoints (admin only).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from club.api.dependencies import get_store, require_admin
from club.schemas.user import RegistrationResult, Role, User, UserRegistration, UserUpdate
from club.services.club_store import ClubStore

router = APIRouter()


@router.get("", summary="List active members.", response_model=list[User])
def list_users(role: Optional[Role] = Query(None, description="Only members with this role"),
               store: ClubStore = Depends(get_store), admin: User = Depends(require_admin), ):
    return store.active_users(role)


@router.post("/students", summary="Register (or reactivate) a student.", response_model=RegistrationResult,
             status_code=status.HTTP_201_CREATED)
def register_student(data: UserRegistration, store: ClubStore = Depends(get_store),
                     admin: User = Depends(require_admin)):
    """
    Register a student.

    Without an email a placeholder login is generated from the name and
    phone.  A deactivated student with the same email is reactivated and
    keeps the previous password.

    Raises:
        HTTPException 409: Member already active, or login without profile
    """
    return store.register_student(data)


@router.post("/teachers", summary="Register (or reactivate) a teacher.", response_model=RegistrationResult,
             status_code=status.HTTP_201_CREATED)
def register_teacher(data: UserRegistration, store: ClubStore = Depends(get_store),
                     admin: User = Depends(require_admin)):
    return store.register_teacher(data)


@router.put("/{user_id}", summary="Update a member profile.", response_model=User)
def update_user(user_id: str, data: UserUpdate, store: ClubStore = Depends(get_store),
                admin: User = Depends(require_admin)):
    return store.update_user(user_id, data)


@router.delete("/{user_id}", summary="Deactivate a member.", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, store: ClubStore = Depends(get_store), admin: User = Depends(require_admin)):
    """Soft delete: the profile becomes inactive and keeps its history."""
    store.delete_user(user_id, actor=admin)


@router.post("/{user_id}/password-reset", summary="Send a password reset email to a member.",
             status_code=status.HTTP_202_ACCEPTED)
def reset_password(user_id: str, store: ClubStore = Depends(get_store), admin: User = Depends(require_admin)):
    user = store.reset_member_password(user_id)
    return {"message": f"E-mail de redefinição enviado para {user.email}."}
