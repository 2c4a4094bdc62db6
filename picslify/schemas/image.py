"""Image and comment request/response schemas."""

from typing import Optional

from pydantic import BaseModel


class CommentRequest(BaseModel):
    text: Optional[str] = None


class CommentResponse(BaseModel):
    id: str
    image_id: str
    author: str
    text: str
    created_at: str


class ImageResponse(BaseModel):
    id: str
    album_id: str
    name: str
    url: str
    tags: list[str]
    person: Optional[str]
    is_favorite: bool
    size: int
    comments: list[CommentResponse]
    created_at: str


class ImageListResponse(BaseModel):
    images: list[ImageResponse]


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]
