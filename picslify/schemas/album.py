"""Album request/response schemas."""

from typing import Optional

from pydantic import BaseModel


class AlbumCreateRequest(BaseModel):
    name: str
    description: Optional[str] = None
    album_cover: Optional[str] = None


class AlbumUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    album_cover: Optional[str] = None


class AlbumResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    album_cover: Optional[str]
    owner: str
    shared_users: list[str]
    created_at: str
    updated_at: str


class AlbumListResponse(BaseModel):
    albums: list[AlbumResponse]


class AlbumShareRequest(BaseModel):
    usernames: list[str]


class AlbumDeleteResponse(BaseModel):
    message: str
    images_deleted: int
    storage_failures: int
