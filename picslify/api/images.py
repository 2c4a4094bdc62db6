"""Image and comment API endpoints, nested under albums."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlmodel import Session

from picslify.api.deps import get_current_user, get_storage
from picslify.config import settings
from picslify.database import get_session
from picslify.models.image import Comment
from picslify.models.user import User
from picslify.schemas.auth import MessageResponse
from picslify.schemas.image import (
    CommentListResponse,
    CommentRequest,
    CommentResponse,
    ImageListResponse,
    ImageResponse,
)
from picslify.services import image_service
from picslify.services.image_service import ImageDetail
from picslify.utils.storage import MediaStorage

router = APIRouter(prefix="/albums/{album_id}/images", tags=["images"])


def _comment_to_response(c: Comment) -> CommentResponse:
    return CommentResponse(
        id=c.id,
        image_id=c.image_id,
        author=c.author,
        text=c.text,
        created_at=c.created_at.isoformat() if c.created_at else "",
    )


def _image_to_response(detail: ImageDetail) -> ImageResponse:
    img = detail.image
    return ImageResponse(
        id=img.id,
        album_id=img.album_id,
        name=img.name,
        url=img.url,
        tags=detail.tags,
        person=img.person,
        is_favorite=bool(img.is_favorite),
        size=img.size,
        comments=[_comment_to_response(c) for c in detail.comments],
        created_at=img.created_at.isoformat() if img.created_at else "",
    )


@router.post("", response_model=ImageResponse, status_code=status.HTTP_201_CREATED)
def upload_image(
    album_id: str,
    file: UploadFile = File(...),
    name: Optional[str] = Form(default=None),
    tags: Optional[str] = Form(default=None),
    person: Optional[str] = Form(default=None),
    is_favorite: bool = Form(default=False),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    storage: MediaStorage = Depends(get_storage),
):
    """Upload an image (jpg, png or gif, max 5MB) to an album. Owner only."""
    detail = image_service.upload_image(
        album_id,
        user.username,
        file.file.read(settings.max_upload_bytes + 1),
        file.filename or "",
        storage,
        session,
        name=name,
        tags=tags,
        person=person,
        is_favorite=is_favorite,
    )
    return _image_to_response(detail)


@router.get("", response_model=ImageListResponse)
def list_images(
    album_id: str,
    tags: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List images in an album, optionally filtered by comma-separated tags."""
    details = image_service.list_images(album_id, user.username, session, tags=tags)
    return ImageListResponse(images=[_image_to_response(d) for d in details])


@router.get("/{image_id}", response_model=ImageResponse)
def get_image(
    album_id: str,
    image_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    detail = image_service.get_image(album_id, image_id, user.username, session)
    return _image_to_response(detail)


@router.put("/{image_id}/favorite", response_model=ImageResponse)
def toggle_favorite(
    album_id: str,
    image_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Flip the favorite flag. Owner only."""
    detail = image_service.toggle_favorite(album_id, image_id, user.username, session)
    return _image_to_response(detail)


@router.delete("/{image_id}", response_model=MessageResponse)
def delete_image(
    album_id: str,
    image_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    storage: MediaStorage = Depends(get_storage),
):
    """Delete an image and its stored file. Owner only."""
    image_service.delete_image(album_id, image_id, user.username, storage, session)
    return MessageResponse(message="Image deleted successfully")


@router.post(
    "/{image_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    album_id: str,
    image_id: str,
    request: CommentRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Comment on an image. Owner and shared users."""
    comment = image_service.add_comment(album_id, image_id, user.username, request.text, session)
    return _comment_to_response(comment)


@router.get("/{image_id}/comments", response_model=CommentListResponse)
def list_comments(
    album_id: str,
    image_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    comments = image_service.list_comments(album_id, image_id, user.username, session)
    return CommentListResponse(comments=[_comment_to_response(c) for c in comments])
