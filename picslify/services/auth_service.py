"""Account registration, login and profile management."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from picslify.errors import Conflict, NotFound, Unauthorized, ValidationFailed
from picslify.models.user import User
from picslify.utils.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def get_user_by_username(username: str, session: Session) -> Optional[User]:
    return session.exec(select(User).where(User.username == username)).first()


def register(username: str, name: str, password: str, session: Session) -> User:
    username = (username or "").strip()
    name = (name or "").strip()
    if not username or not name or not password:
        raise ValidationFailed("Username, name and password are required")

    if get_user_by_username(username, session):
        raise Conflict("Username already exists")

    user = User(username=username, name=name, password_hash=hash_password(password))
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Username already exists")
    session.refresh(user)
    logger.info("Registered user %s", username)
    return user


def login(username: str, password: str, session: Session) -> tuple[str, User]:
    """Verify credentials and issue an access token."""
    if not username or not password:
        raise ValidationFailed("Username and password are required")

    user = get_user_by_username(username, session)
    if not user:
        raise NotFound("User not found")
    if not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid password")

    return create_access_token(user.username, user.id), user


def update_profile(
    user: User,
    session: Session,
    name: Optional[str] = None,
    profile_picture: Optional[str] = None,
) -> User:
    if name is not None:
        if not name.strip():
            raise ValidationFailed("Name cannot be empty")
        user.name = name.strip()
    if profile_picture is not None:
        user.profile_picture = profile_picture
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def change_password(user: User, current_password: str, new_password: str, session: Session) -> None:
    if not verify_password(current_password, user.password_hash):
        raise ValidationFailed("Current password is incorrect")
    if not new_password:
        raise ValidationFailed("New password is required")
    user.password_hash = hash_password(new_password)
    session.add(user)
    session.commit()
