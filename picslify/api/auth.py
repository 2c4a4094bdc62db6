"""Authentication & profile API endpoints."""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from picslify.api.deps import get_current_user
from picslify.database import get_session
from picslify.models.user import User
from picslify.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserProfileResponse,
)
from picslify.services.auth_service import change_password, login, register, update_profile

router = APIRouter(tags=["auth"])


def _profile(user: User) -> UserProfileResponse:
    return UserProfileResponse(
        id=user.id,
        username=user.username,
        name=user.name,
        profile_picture=user.profile_picture,
    )


@router.post("/auth/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register_user(request: RegisterRequest, session: Session = Depends(get_session)):
    """Create an account."""
    register(request.username, request.name, request.password, session)
    return MessageResponse(message="User registered successfully")


@router.post("/auth/login", response_model=LoginResponse)
def login_user(request: LoginRequest, session: Session = Depends(get_session)):
    """Verify credentials and return a bearer token."""
    token, user = login(request.username, request.password, session)
    return LoginResponse(message="Logged in", token=token, user=_profile(user))


@router.get("/auth/me", response_model=UserProfileResponse)
def me(user: User = Depends(get_current_user)):
    return _profile(user)


@router.post("/auth/logout", response_model=MessageResponse)
def logout():
    """Tokens are stateless; the client discards its token."""
    return MessageResponse(message="Logged out successfully")


@router.get("/profile", response_model=UserProfileResponse)
def get_my_profile(user: User = Depends(get_current_user)):
    """Get current user's profile."""
    return _profile(user)


@router.put("/profile", response_model=UserProfileResponse)
def update_my_profile(
    request: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Update display name or profile picture."""
    user = update_profile(user, session, name=request.name, profile_picture=request.profile_picture)
    return _profile(user)


@router.put("/profile/password", response_model=MessageResponse)
def update_my_password(
    request: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    change_password(user, request.current_password, request.new_password, session)
    return MessageResponse(message="Password updated successfully")
