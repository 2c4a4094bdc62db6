"""Album lifecycle and sharing-set maintenance."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import Session, col, select

from picslify.errors import NotFound, ValidationFailed
from picslify.models.album import Album, AlbumShare
from picslify.models.user import User
from picslify.services.access import AlbumAction, authorize

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "album_cover")


def get_shared_users(album_id: str, session: Session) -> list[str]:
    """Usernames the album is shared with, sorted."""
    return sorted(session.exec(
        select(AlbumShare.username).where(AlbumShare.album_id == album_id)
    ).all())


def load_album(album_id: str, session: Session) -> Album:
    album = session.get(Album, album_id)
    if not album:
        raise NotFound("Album not found")
    return album


def load_authorized_album(
    album_id: str,
    actor: str,
    action: AlbumAction,
    session: Session,
) -> tuple[Album, list[str]]:
    """Point-in-time read of an album and its shared set, then the access check.

    Raises NotFound for a missing album before any permission is evaluated.
    """
    album = load_album(album_id, session)
    shared = get_shared_users(album_id, session)
    authorize(actor, album, shared, action)
    return album, shared


def create_album(
    actor: str,
    name: str,
    session: Session,
    description: Optional[str] = None,
    album_cover: Optional[str] = None,
) -> Album:
    if not name or not name.strip():
        raise ValidationFailed("Album name is required")
    album = Album(
        name=name.strip(),
        description=description,
        album_cover=album_cover,
        owner=actor,
    )
    session.add(album)
    session.commit()
    session.refresh(album)
    logger.info("Album %s created by %s", album.id, actor)
    return album


def list_owned_albums(actor: str, session: Session) -> list[tuple[Album, list[str]]]:
    albums = session.exec(
        select(Album).where(Album.owner == actor).order_by(col(Album.created_at).desc())
    ).all()
    return [(a, get_shared_users(a.id, session)) for a in albums]


def list_shared_albums(actor: str, session: Session) -> list[tuple[Album, list[str]]]:
    """Albums shared with the actor that the actor does not own."""
    shared_ids = session.exec(
        select(AlbumShare.album_id).where(AlbumShare.username == actor)
    ).all()
    if not shared_ids:
        return []
    albums = session.exec(
        select(Album).where(
            col(Album.id).in_(shared_ids),
            Album.owner != actor,
        ).order_by(col(Album.created_at).desc())
    ).all()
    return [(a, get_shared_users(a.id, session)) for a in albums]


def accessible_album_ids(actor: str, session: Session) -> list[str]:
    """Ids of every album the actor owns or is shared on."""
    owned = session.exec(select(Album.id).where(Album.owner == actor)).all()
    shared = session.exec(
        select(AlbumShare.album_id).where(AlbumShare.username == actor)
    ).all()
    return list({*owned, *shared})


def get_album(album_id: str, actor: str, session: Session) -> tuple[Album, list[str]]:
    return load_authorized_album(album_id, actor, AlbumAction.VIEW, session)


def update_album(
    album_id: str,
    actor: str,
    changes: dict,
    session: Session,
) -> tuple[Album, list[str]]:
    """Update album metadata. Owner and shared set are not updatable here."""
    album, shared = load_authorized_album(album_id, actor, AlbumAction.UPDATE, session)

    values = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    if "name" in values:
        if not values["name"] or not values["name"].strip():
            raise ValidationFailed("Album name cannot be empty")
        values["name"] = values["name"].strip()
    if not values:
        return album, shared

    values["updated_at"] = datetime.now(timezone.utc)
    # Conditional on the owner observed at check time
    result = session.exec(
        update(Album)
        .where(col(Album.id) == album_id, col(Album.owner) == album.owner)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        session.rollback()
        raise NotFound("Album not found")
    session.commit()
    session.refresh(album)
    return album, shared


def _normalize_usernames(usernames: list[str], owner: str) -> list[str]:
    names = {u.strip() for u in usernames if u and u.strip()}
    names.discard(owner)
    return sorted(names)


def share_album(
    album_id: str,
    actor: str,
    usernames: list[str],
    session: Session,
) -> tuple[Album, list[str]]:
    """Add usernames to the shared set.

    The result is the union of the existing set and the request, so
    repeating a call or reordering its names changes nothing.
    """
    album, _ = load_authorized_album(album_id, actor, AlbumAction.SHARE, session)
    names = _normalize_usernames(usernames, album.owner)

    if names:
        known = set(session.exec(
            select(User.username).where(col(User.username).in_(names))
        ).all())
        unknown = [n for n in names if n not in known]
        if unknown:
            raise NotFound(f"User not found: {', '.join(unknown)}")

        now = datetime.now(timezone.utc)
        session.exec(
            sqlite_insert(AlbumShare.__table__)  # type: ignore[arg-type]
            .values([{"album_id": album_id, "username": n, "shared_at": now} for n in names])
            .on_conflict_do_nothing(index_elements=["album_id", "username"])
        )
        session.commit()
        logger.info("Album %s shared with %s", album_id, ", ".join(names))

    return album, get_shared_users(album_id, session)


def revoke_album_share(
    album_id: str,
    actor: str,
    usernames: list[str],
    session: Session,
) -> tuple[Album, list[str]]:
    """Remove usernames from the shared set. Names not shared are ignored."""
    album, _ = load_authorized_album(album_id, actor, AlbumAction.REVOKE_SHARE, session)
    names = _normalize_usernames(usernames, album.owner)

    if names:
        session.exec(
            delete(AlbumShare).where(
                col(AlbumShare.album_id) == album_id,
                col(AlbumShare.username).in_(names),
            )
        )
        session.commit()
        logger.info("Album %s unshared from %s", album_id, ", ".join(names))

    return album, get_shared_users(album_id, session)
