"""Album API endpoints."""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from picslify.api.deps import get_current_user, get_storage
from picslify.database import get_session
from picslify.models.album import Album
from picslify.models.user import User
from picslify.schemas.album import (
    AlbumCreateRequest,
    AlbumDeleteResponse,
    AlbumListResponse,
    AlbumResponse,
    AlbumShareRequest,
    AlbumUpdateRequest,
)
from picslify.services import album_service, cascade
from picslify.utils.storage import MediaStorage

router = APIRouter(prefix="/albums", tags=["albums"])


def _album_to_response(album: Album, shared_users: list[str]) -> AlbumResponse:
    return AlbumResponse(
        id=album.id,
        name=album.name,
        description=album.description,
        album_cover=album.album_cover,
        owner=album.owner,
        shared_users=shared_users,
        created_at=album.created_at.isoformat() if album.created_at else "",
        updated_at=album.updated_at.isoformat() if album.updated_at else "",
    )


@router.post("", response_model=AlbumResponse, status_code=status.HTTP_201_CREATED)
def create_album(
    request: AlbumCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create a new album owned by the current user."""
    album = album_service.create_album(
        user.username,
        request.name,
        session,
        description=request.description,
        album_cover=request.album_cover,
    )
    return _album_to_response(album, [])


@router.get("", response_model=AlbumListResponse)
def list_albums(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List albums owned by the current user."""
    albums = album_service.list_owned_albums(user.username, session)
    return AlbumListResponse(albums=[_album_to_response(a, s) for a, s in albums])


@router.get("/shared", response_model=AlbumListResponse)
def list_shared_albums(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List albums other users have shared with the current user."""
    albums = album_service.list_shared_albums(user.username, session)
    return AlbumListResponse(albums=[_album_to_response(a, s) for a, s in albums])


@router.get("/{album_id}", response_model=AlbumResponse)
def get_album(
    album_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    album, shared = album_service.get_album(album_id, user.username, session)
    return _album_to_response(album, shared)


@router.put("/{album_id}", response_model=AlbumResponse)
def update_album(
    album_id: str,
    request: AlbumUpdateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Update album name, description or cover. Owner only."""
    album, shared = album_service.update_album(
        album_id, user.username, request.model_dump(exclude_unset=True), session
    )
    return _album_to_response(album, shared)


@router.delete("/{album_id}", response_model=AlbumDeleteResponse)
def delete_album(
    album_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    storage: MediaStorage = Depends(get_storage),
):
    """Delete an album together with all of its images. Owner only."""
    report = cascade.delete_album(album_id, user.username, storage, session)
    return AlbumDeleteResponse(
        message="Album and associated images deleted successfully",
        images_deleted=report.images_deleted,
        storage_failures=len(report.storage_failures),
    )


@router.post("/{album_id}/share", response_model=AlbumResponse)
def share_album(
    album_id: str,
    request: AlbumShareRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Grant users read and comment access. Owner only, idempotent."""
    album, shared = album_service.share_album(album_id, user.username, request.usernames, session)
    return _album_to_response(album, shared)


@router.post("/{album_id}/unshare", response_model=AlbumResponse)
def unshare_album(
    album_id: str,
    request: AlbumShareRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Revoke access from users. Owner only."""
    album, shared = album_service.revoke_album_share(
        album_id, user.username, request.usernames, session
    )
    return _album_to_response(album, shared)
