"""Search API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from picslify.api.deps import get_current_user
from picslify.api.images import _image_to_response
from picslify.database import get_session
from picslify.models.user import User
from picslify.schemas.image import ImageListResponse
from picslify.services.search_service import search_images

router = APIRouter(prefix="/search", tags=["search"])


@router.get("/images", response_model=ImageListResponse)
def search(
    query: Optional[str] = Query(default=None),
    tags: Optional[str] = Query(default=None, description="Comma-separated tags"),
    person: Optional[str] = Query(default=None),
    album_id: Optional[str] = Query(default=None, alias="albumId"),
    favorite: bool = Query(default=False),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Search images across every album the user owns or is shared on."""
    details = search_images(
        user.username,
        session,
        query=query,
        tags=tags,
        person=person,
        album_id=album_id,
        favorite=favorite,
    )
    return ImageListResponse(images=[_image_to_response(d) for d in details])
