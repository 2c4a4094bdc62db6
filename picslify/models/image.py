"""Image, tag and comment models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Image(SQLModel, table=True):
    __tablename__ = "images"

    id: str = Field(default_factory=lambda: f"img_{secrets.token_hex(4)}", primary_key=True)
    album_id: str = Field(foreign_key="albums.id", index=True)
    name: str
    public_id: str  # storage deletion handle
    url: str
    person: Optional[str] = Field(default=None, index=True)
    is_favorite: bool = Field(default=False)
    size: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ImageTag(SQLModel, table=True):
    __tablename__ = "image_tags"
    __table_args__ = (UniqueConstraint("image_id", "tag", name="uq_image_tag"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    image_id: str = Field(foreign_key="images.id", index=True)
    tag: str = Field(index=True)


class Comment(SQLModel, table=True):
    __tablename__ = "comments"

    id: str = Field(default_factory=lambda: f"cmt_{secrets.token_hex(4)}", primary_key=True)
    image_id: str = Field(foreign_key="images.id", index=True)
    author: str = Field(foreign_key="users.username")
    text: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
