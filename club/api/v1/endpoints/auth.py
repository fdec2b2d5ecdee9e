"""
Authentication endpoints.

Handles login, logout, the current user and password changes.
"""

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from club.api.dependencies import get_current_user, get_store
from club.schemas.user import (LoginRequest, PasswordChange, PasswordResetRequest, Token, User, UserMe, role_home_path,
                               role_label, )
from club.services.club_store import ClubStore

router = APIRouter()


@router.post("/login", summary="User login endpoint via OAuth2 form (for Swagger UI).", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), store: ClubStore = Depends(get_store)):
    """
    Authenticate user via OAuth2 form (for Swagger UI).

    Use the email or the phone number as username.
    """
    return store.login(form_data.username, form_data.password)


@router.post("/token", summary="User login endpoint via Json.", response_model=Token)
def login_json(login_data: LoginRequest, store: ClubStore = Depends(get_store)):
    """
    Authenticate user via JSON body.

    Args:
        login_data: Email or phone number, and password
        store: Club store

    Returns:
        JWT access token, flagged when the password must be changed first
    """
    return store.login(login_data.identifier, login_data.password)


@router.get("/me", summary="User info endpoint.", response_model=UserMe)
def me(user: User = Depends(get_current_user)):
    return UserMe(user=user, role_label=role_label(user.role), home_path=role_home_path(user.role))


@router.post("/password", summary="Change the current user's password.", response_model=User)
def change_password(data: PasswordChange, user: User = Depends(get_current_user),
                    store: ClubStore = Depends(get_store)):
    """Also clears the first-login password change flag."""
    return store.update_password(user, data.new_password)


@router.post("/logout", summary="Sign out.", status_code=status.HTTP_204_NO_CONTENT)
def logout(user: User = Depends(get_current_user), store: ClubStore = Depends(get_store)):
    store.logout(user)


@router.post("/password/reset", summary="Request a password reset email.", status_code=status.HTTP_202_ACCEPTED)
def request_password_reset(data: PasswordResetRequest, store: ClubStore = Depends(get_store)):
    store.reset_user_password(data.email)
    return {"message": "Se o e-mail estiver cadastrado, você receberá as instruções."}
