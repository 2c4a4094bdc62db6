"""Album access control.

Pure decision logic: given an actor, an album's owner and its shared
set, and the requested action, decide whether the action may proceed.

Sharing grants read and comment access only. Every write, delete and
share action is reserved to the owner, and the owner is always allowed
regardless of what the shared set contains.
"""

from collections.abc import Iterable
from enum import Enum

from picslify.errors import Forbidden
from picslify.models.album import Album


class AlbumAction(str, Enum):
    VIEW = "view"
    UPDATE = "update"
    DELETE = "delete"
    SHARE = "share"
    REVOKE_SHARE = "revoke_share"
    LIST_IMAGES = "list_images"
    UPLOAD_IMAGE = "upload_image"
    TOGGLE_FAVORITE = "toggle_favorite"
    DELETE_IMAGE = "delete_image"
    COMMENT = "comment"
    SEARCH = "search"


# Actions a shared user may perform. Everything else is owner-only.
SHARED_ACTIONS = frozenset({
    AlbumAction.VIEW,
    AlbumAction.LIST_IMAGES,
    AlbumAction.COMMENT,
    AlbumAction.SEARCH,
})

_DENIED_MESSAGES = {
    AlbumAction.VIEW: "Access denied",
    AlbumAction.UPDATE: "Not authorised to update this album",
    AlbumAction.DELETE: "Not authorised to delete this album",
    AlbumAction.SHARE: "Not authorised to share this album",
    AlbumAction.REVOKE_SHARE: "Not authorised to change sharing on this album",
    AlbumAction.LIST_IMAGES: "Access denied",
    AlbumAction.UPLOAD_IMAGE: "Not authorised to upload to this album",
    AlbumAction.TOGGLE_FAVORITE: "Not authorised to change favorites in this album",
    AlbumAction.DELETE_IMAGE: "Not authorised to delete images in this album",
    AlbumAction.COMMENT: "Not authorised to comment on this album",
    AlbumAction.SEARCH: "Access denied",
}


def is_allowed(
    actor: str,
    owner: str,
    shared_users: Iterable[str],
    action: AlbumAction,
) -> bool:
    if actor == owner:
        return True
    if action not in SHARED_ACTIONS:
        return False
    return actor in set(shared_users)


def authorize(
    actor: str,
    album: Album,
    shared_users: Iterable[str],
    action: AlbumAction,
) -> None:
    """Raise Forbidden unless ``actor`` may perform ``action`` on ``album``."""
    if not is_allowed(actor, album.owner, shared_users, action):
        raise Forbidden(_DENIED_MESSAGES[action])


def can_view(actor: str, album: Album, shared_users: Iterable[str]) -> bool:
    return is_allowed(actor, album.owner, shared_users, AlbumAction.VIEW)


def can_update(actor: str, album: Album, shared_users: Iterable[str]) -> bool:
    return is_allowed(actor, album.owner, shared_users, AlbumAction.UPDATE)


def can_delete(actor: str, album: Album, shared_users: Iterable[str]) -> bool:
    return is_allowed(actor, album.owner, shared_users, AlbumAction.DELETE)


def can_share(actor: str, album: Album, shared_users: Iterable[str]) -> bool:
    return is_allowed(actor, album.owner, shared_users, AlbumAction.SHARE)


def can_upload_image(actor: str, album: Album, shared_users: Iterable[str]) -> bool:
    return is_allowed(actor, album.owner, shared_users, AlbumAction.UPLOAD_IMAGE)


def can_delete_image(actor: str, album: Album, shared_users: Iterable[str]) -> bool:
    return is_allowed(actor, album.owner, shared_users, AlbumAction.DELETE_IMAGE)


def can_comment(actor: str, album: Album, shared_users: Iterable[str]) -> bool:
    return is_allowed(actor, album.owner, shared_users, AlbumAction.COMMENT)
