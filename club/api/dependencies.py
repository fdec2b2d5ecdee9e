"""
Shared API dependencies.

Reusable FastAPI dependencies for the store facade and authentication.
"""

from fastapi import Depends, HTTPException, Request, status

from club.core.security import decode_access_token, oauth2_scheme
from club.schemas.user import Role, User
from club.services.club_store import ClubStore


def get_store(request: Request) -> ClubStore:
    """The process-wide store built in the application lifespan."""
    return request.app.state.store


def get_current_user(token: str = Depends(oauth2_scheme), store: ClubStore = Depends(get_store), ) -> User:
    """Extract and validate the current user from the JWT token."""
    user_id = decode_access_token(token)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token",
                            headers={"WWW-Authenticate": "Bearer"}, )
    user = store.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found",
                            headers={"WWW-Authenticate": "Bearer"}, )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Esta conta foi desativada.")
    return user


def get_active_user(user: User = Depends(get_current_user)) -> User:
    """Current user, refused until the first-login password change is done."""
    if user.must_change_password:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="Altere sua senha antes de continuar.")
    return user


def require_admin(user: User = Depends(get_active_user)) -> User:
    if user.role is not Role.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso restrito à administração.")
    return user


def require_staff(user: User = Depends(get_active_user)) -> User:
    """Admins and teachers."""
    if user.role not in (Role.ADMIN, Role.TEACHER):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso restrito à equipe do clube.")
    return user
