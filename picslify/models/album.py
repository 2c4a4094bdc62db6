"""Album models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Album(SQLModel, table=True):
    __tablename__ = "albums"

    id: str = Field(default_factory=lambda: f"alb_{secrets.token_hex(4)}", primary_key=True)
    name: str
    description: Optional[str] = None
    album_cover: Optional[str] = None
    owner: str = Field(foreign_key="users.username", index=True)  # set once at creation
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AlbumShare(SQLModel, table=True):
    """One row per username in an album's shared set."""

    __tablename__ = "album_shares"
    __table_args__ = (UniqueConstraint("album_id", "username", name="uq_album_share"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    album_id: str = Field(foreign_key="albums.id", index=True)
    username: str = Field(foreign_key="users.username", index=True)
    shared_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
