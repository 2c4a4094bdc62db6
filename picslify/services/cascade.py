"""Album deletion with cleanup of dependent images.

Storage cleanup is best-effort: a failed ``destroy`` for one image is
logged and counted, and the remaining images, their records and the
album record are still removed. Record removal happens in one
transaction, and the album delete is conditional on the owner seen at
check time so two concurrent deletes cannot both succeed.

The first DELETE of the transaction takes SQLite's write lock. Images
are enumerated again once the lock is held, so an image inserted while
storage was being cleaned up is still destroyed and removed with the
album.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from picslify.errors import NotFound, Upstream
from picslify.models.album import Album, AlbumShare
from picslify.models.image import Comment, Image, ImageTag
from picslify.services.access import AlbumAction
from picslify.services.album_service import load_authorized_album
from picslify.utils.storage import MediaStorage

logger = logging.getLogger(__name__)


@dataclass
class CascadeReport:
    album_id: str
    images_deleted: int = 0
    storage_failures: list[str] = field(default_factory=list)


def delete_image_records(image_ids: list[str], session: Session) -> None:
    """Delete image rows with their tags and comments. Does not commit."""
    if not image_ids:
        return
    session.exec(delete(Comment).where(col(Comment.image_id).in_(image_ids)))
    session.exec(delete(ImageTag).where(col(ImageTag.image_id).in_(image_ids)))
    session.exec(delete(Image).where(col(Image.id).in_(image_ids)))


def delete_album_image_records(album_id: str, session: Session) -> None:
    """Delete every image of an album with its tags and comments. Does not commit."""
    album_images = select(Image.id).where(Image.album_id == album_id)
    for stmt in (
        delete(Comment).where(col(Comment.image_id).in_(album_images)),
        delete(ImageTag).where(col(ImageTag.image_id).in_(album_images)),
        delete(Image).where(col(Image.album_id) == album_id),
    ):
        session.exec(stmt.execution_options(synchronize_session=False))


def _album_media(album_id: str, session: Session) -> list[tuple[str, str]]:
    return list(session.exec(
        select(Image.id, Image.public_id).where(Image.album_id == album_id)
    ).all())


def _destroy_media(
    images: list[tuple[str, str]],
    storage: MediaStorage,
    report: CascadeReport,
) -> None:
    for image_id, public_id in images:
        try:
            storage.destroy(public_id)
        except Upstream as e:
            logger.warning(
                "Storage cleanup failed for image %s (%s) in album %s: %s",
                image_id, public_id, report.album_id, e,
            )
            report.storage_failures.append(image_id)


def delete_album(
    album_id: str,
    actor: str,
    storage: MediaStorage,
    session: Session,
) -> CascadeReport:
    album, _ = load_authorized_album(album_id, actor, AlbumAction.DELETE, session)
    owner = album.owner
    report = CascadeReport(album_id=album_id)

    images = _album_media(album_id, session)
    _destroy_media(images, storage, report)

    try:
        session.exec(
            delete(AlbumShare)
            .where(col(AlbumShare.album_id) == album_id)
            .execution_options(synchronize_session=False)
        )
        seen = {image_id for image_id, _ in images}
        final = _album_media(album_id, session)
        _destroy_media([m for m in final if m[0] not in seen], storage, report)

        delete_album_image_records(album_id, session)
        result = session.exec(
            delete(Album)
            .where(col(Album.id) == album_id, col(Album.owner) == owner)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            session.rollback()
            raise NotFound("Album not found")
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise Upstream(f"Failed to delete album {album_id}: {e}") from e

    report.images_deleted = len(final)
    logger.info(
        "Album %s deleted by %s (%d images, %d storage failures)",
        album_id, actor, report.images_deleted, len(report.storage_failures),
    )
    return report
