"""Image upload, listing, favorites, deletion and comments."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from sqlalchemy import literal_column, not_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from picslify.config import settings
from picslify.errors import NotFound, Upstream, ValidationFailed
from picslify.models.image import Comment, Image, ImageTag
from picslify.services.access import AlbumAction
from picslify.services.album_service import load_authorized_album
from picslify.services.cascade import delete_image_records
from picslify.utils.storage import MediaStorage

logger = logging.getLogger(__name__)


@dataclass
class ImageDetail:
    image: Image
    tags: list[str]
    comments: list[Comment]


def parse_tags(tags: Union[str, list[str], None]) -> list[str]:
    """Split a comma list (or list of strings) into trimmed, unique, non-empty tags."""
    if not tags:
        return []
    raw = tags.split(",") if isinstance(tags, str) else tags
    seen: dict[str, None] = {}
    for tag in raw:
        tag = tag.strip()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


def load_album_image(album_id: str, image_id: str, session: Session) -> Image:
    """Fetch an image that belongs to the given album."""
    image = session.get(Image, image_id)
    if not image or image.album_id != album_id:
        raise NotFound("Image not found")
    return image


def _comments_query():
    return select(Comment).order_by(
        col(Comment.created_at), literal_column("comments.rowid")
    )


def with_details(images: list[Image], session: Session) -> list[ImageDetail]:
    """Attach tags and ordered comments to a batch of images."""
    ids = [img.id for img in images]
    if not ids:
        return []

    tags: dict[str, list[str]] = defaultdict(list)
    for image_id, tag in session.exec(
        select(ImageTag.image_id, ImageTag.tag)
        .where(col(ImageTag.image_id).in_(ids))
        .order_by(col(ImageTag.id))
    ).all():
        tags[image_id].append(tag)

    comments: dict[str, list[Comment]] = defaultdict(list)
    for comment in session.exec(_comments_query().where(col(Comment.image_id).in_(ids))).all():
        comments[comment.image_id].append(comment)

    return [ImageDetail(img, tags[img.id], comments[img.id]) for img in images]


def _validate_upload(data: bytes, filename: str) -> None:
    if not data:
        raise ValidationFailed("No file uploaded")
    if Path(filename).suffix.lower() not in settings.allowed_extensions:
        raise ValidationFailed("Only image files are allowed!")
    if len(data) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise ValidationFailed(f"File size exceeds {limit_mb}MB limit")


def upload_image(
    album_id: str,
    actor: str,
    data: bytes,
    filename: str,
    storage: MediaStorage,
    session: Session,
    name: Optional[str] = None,
    tags: Union[str, list[str], None] = None,
    person: Optional[str] = None,
    is_favorite: bool = False,
) -> ImageDetail:
    """Store an image in an album.

    1. Album must exist and the actor must own it
    2. Validate file type and size
    3. Upload to media storage
    4. Insert image and tag records
    """
    load_authorized_album(album_id, actor, AlbumAction.UPLOAD_IMAGE, session)
    _validate_upload(data, filename)

    stored = storage.upload(data, filename)

    image = Image(
        album_id=album_id,
        name=(name or "").strip() or Path(filename).name,
        public_id=stored.public_id,
        url=stored.url,
        person=(person or "").strip() or None,
        is_favorite=is_favorite,
        size=len(data),
    )
    tag_list = parse_tags(tags)
    try:
        session.add(image)
        session.flush()
        for tag in tag_list:
            session.add(ImageTag(image_id=image.id, tag=tag))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        try:
            storage.destroy(stored.public_id)
        except Upstream:
            logger.warning("Orphaned media %s after failed insert", stored.public_id)
        raise Upstream(f"Failed to save image: {e}") from e

    session.refresh(image)
    logger.info("Image %s (%d bytes) uploaded to album %s by %s", image.id, image.size, album_id, actor)
    return ImageDetail(image, tag_list, [])


def list_images(
    album_id: str,
    actor: str,
    session: Session,
    tags: Union[str, list[str], None] = None,
) -> list[ImageDetail]:
    """List an album's images, optionally keeping those carrying any of ``tags``."""
    load_authorized_album(album_id, actor, AlbumAction.LIST_IMAGES, session)

    query = select(Image).where(Image.album_id == album_id)
    tag_list = parse_tags(tags)
    if tag_list:
        tagged = select(ImageTag.image_id).where(col(ImageTag.tag).in_(tag_list))
        query = query.where(col(Image.id).in_(tagged))
    query = query.order_by(col(Image.created_at).desc())

    return with_details(list(session.exec(query).all()), session)


def get_image(album_id: str, image_id: str, actor: str, session: Session) -> ImageDetail:
    load_authorized_album(album_id, actor, AlbumAction.VIEW, session)
    image = load_album_image(album_id, image_id, session)
    return with_details([image], session)[0]


def toggle_favorite(album_id: str, image_id: str, actor: str, session: Session) -> ImageDetail:
    """Flip ``is_favorite`` in a single UPDATE, no read-modify-write."""
    load_authorized_album(album_id, actor, AlbumAction.TOGGLE_FAVORITE, session)

    result = session.exec(
        update(Image)
        .where(col(Image.id) == image_id, col(Image.album_id) == album_id)
        .values(is_favorite=not_(col(Image.is_favorite)))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        session.rollback()
        raise NotFound("Image not found")
    session.commit()

    image = load_album_image(album_id, image_id, session)
    session.refresh(image)
    return with_details([image], session)[0]


def delete_image(
    album_id: str,
    image_id: str,
    actor: str,
    storage: MediaStorage,
    session: Session,
) -> None:
    """Delete the stored object first, then the record."""
    load_authorized_album(album_id, actor, AlbumAction.DELETE_IMAGE, session)
    image = load_album_image(album_id, image_id, session)

    storage.destroy(image.public_id)

    # Comments go first; that DELETE holds the write lock, so a comment
    # posted while storage was being cleaned up is removed too.
    try:
        delete_image_records([image.id], session)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise Upstream(f"Failed to delete image {image_id}: {e}") from e
    logger.info("Image %s deleted from album %s by %s", image_id, album_id, actor)


def add_comment(
    album_id: str,
    image_id: str,
    actor: str,
    text: Optional[str],
    session: Session,
) -> Comment:
    """Append one comment. Each comment is its own row, so concurrent
    commenters never overwrite each other."""
    text = (text or "").strip()
    if not text:
        raise ValidationFailed("Comment text is required")

    load_authorized_album(album_id, actor, AlbumAction.COMMENT, session)
    load_album_image(album_id, image_id, session)

    comment = Comment(image_id=image_id, author=actor, text=text)
    session.add(comment)
    try:
        session.commit()
    except IntegrityError:
        # image deleted between the lookup and the insert
        session.rollback()
        raise NotFound("Image not found")
    session.refresh(comment)
    return comment


def list_comments(album_id: str, image_id: str, actor: str, session: Session) -> list[Comment]:
    load_authorized_album(album_id, actor, AlbumAction.VIEW, session)
    load_album_image(album_id, image_id, session)
    return list(session.exec(_comments_query().where(Comment.image_id == image_id)).all())
