"""Auth and profile request/response schemas."""

from typing import Optional

from pydantic import BaseModel


# --- Auth ---

class RegisterRequest(BaseModel):
    username: str
    name: str
    password: str


class LoginRequest(BaseModel):
    username: str
    password: str


class UserProfileResponse(BaseModel):
    id: str
    username: str
    name: str
    profile_picture: Optional[str] = None


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserProfileResponse


class MessageResponse(BaseModel):
    message: str


# --- Profile ---

class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    profile_picture: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str
