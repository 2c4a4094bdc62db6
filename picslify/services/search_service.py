"""Image search scoped to the albums a user can view."""

from typing import Optional

from sqlalchemy import or_
from sqlmodel import Session, col, select

from picslify.models.image import Image, ImageTag
from picslify.services.access import AlbumAction
from picslify.services.album_service import accessible_album_ids, load_authorized_album
from picslify.services.image_service import ImageDetail, parse_tags, with_details


def _icontains(column, value: str):
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


def search_images(
    actor: str,
    session: Session,
    query: Optional[str] = None,
    tags: Optional[str] = None,
    person: Optional[str] = None,
    album_id: Optional[str] = None,
    favorite: bool = False,
) -> list[ImageDetail]:
    """Search images by name, tags, person and favorite flag.

    With ``album_id`` the search is limited to that album (which must be
    viewable); otherwise it spans every album the actor owns or is shared on.
    All text matching is case-insensitive substring matching.
    """
    if album_id:
        load_authorized_album(album_id, actor, AlbumAction.SEARCH, session)
        scope = [album_id]
    else:
        scope = accessible_album_ids(actor, session)
    if not scope:
        return []

    stmt = select(Image).where(col(Image.album_id).in_(scope))

    if query and query.strip():
        stmt = stmt.where(_icontains(col(Image.name), query.strip()))

    tag_list = parse_tags(tags)
    if tag_list:
        tagged = select(ImageTag.image_id).where(
            or_(*[_icontains(col(ImageTag.tag), t) for t in tag_list])
        )
        stmt = stmt.where(col(Image.id).in_(tagged))

    if person and person.strip():
        stmt = stmt.where(_icontains(col(Image.person), person.strip()))

    if favorite:
        stmt = stmt.where(Image.is_favorite == True)  # noqa: E712

    stmt = stmt.order_by(col(Image.created_at).desc())
    return with_details(list(session.exec(stmt).all()), session)
