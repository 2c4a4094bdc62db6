"""Album deletion cascade, exercised at the service layer."""

import pytest
from sqlmodel import Session, select

from conftest import RecordingStorage
from picslify.errors import Forbidden, NotFound, Upstream
from picslify.models.album import Album, AlbumShare
from picslify.models.image import Comment, Image, ImageTag
from picslify.services import album_service, cascade, image_service


def _album_with_images(session, storage, count=2):
    album = album_service.create_album("alice", "A1", session)
    aid = album.id
    album_service.share_album(aid, "alice", ["bob"], session)
    images = [
        image_service.upload_image(
            aid, "alice", b"img", f"i{n}.png", storage, session, tags="x,y"
        ).image
        for n in range(count)
    ]
    image_service.add_comment(aid, images[0].id, "bob", "hello", session)
    return album, images


def test_delete_removes_every_image_record(session, storage):
    """After the cascade the album has zero image rows, which is what an
    image listing would show; the API itself answers 404 for the gone album."""
    album, images = _album_with_images(session, storage)
    aid = album.id
    public_ids = sorted(i.public_id for i in images)

    report = cascade.delete_album(aid, "alice", storage, session)

    assert report.images_deleted == 2
    assert report.storage_failures == []
    assert sorted(storage.destroyed) == public_ids
    assert session.exec(select(Image).where(Image.album_id == aid)).all() == []
    assert session.exec(select(ImageTag)).all() == []
    assert session.exec(select(Comment)).all() == []
    assert session.exec(select(AlbumShare)).all() == []
    assert session.get(Album, aid) is None


def test_storage_failure_does_not_block_cleanup(session):
    storage = RecordingStorage()
    album, images = _album_with_images(session, storage)
    aid = album.id
    failing, ok = images
    failing_id, ok_public_id = failing.id, ok.public_id
    storage.fail_on = {failing.public_id}

    report = cascade.delete_album(aid, "alice", storage, session)

    assert report.storage_failures == [failing_id]
    assert storage.destroyed == [ok_public_id]
    assert session.exec(select(Image).where(Image.album_id == aid)).all() == []
    assert session.get(Album, aid) is None


@pytest.mark.parametrize("actor", ["bob", "carol"])
def test_non_owner_delete_changes_nothing(session, storage, actor):
    album, images = _album_with_images(session, storage)
    aid = album.id

    with pytest.raises(Forbidden):
        cascade.delete_album(aid, actor, storage, session)

    assert storage.destroyed == []
    assert session.get(Album, aid) is not None
    assert len(session.exec(select(Image).where(Image.album_id == aid)).all()) == 2


def test_delete_missing_album(session, storage):
    with pytest.raises(NotFound):
        cascade.delete_album("alb_missing", "alice", storage, session)


def test_second_delete_is_not_found(session, storage):
    album, _ = _album_with_images(session, storage, count=1)
    aid = album.id
    cascade.delete_album(aid, "alice", storage, session)
    with pytest.raises(NotFound):
        cascade.delete_album(aid, "alice", storage, session)


def test_single_image_delete_aborts_on_storage_failure(session):
    storage = RecordingStorage()
    album, images = _album_with_images(session, storage, count=1)
    aid = album.id
    storage.fail_on = {images[0].public_id}

    with pytest.raises(Upstream):
        image_service.delete_image(aid, images[0].id, "alice", storage, session)
    assert session.get(Image, images[0].id) is not None


def test_shared_user_cannot_delete_image(session, storage):
    album, images = _album_with_images(session, storage, count=1)
    aid = album.id
    with pytest.raises(Forbidden):
        image_service.delete_image(aid, images[0].id, "bob", storage, session)
    assert storage.destroyed == []


class InsertDuringDestroy(RecordingStorage):
    """Storage whose first ``destroy`` lets another session write a row."""

    def __init__(self, db, make_row):
        super().__init__()
        self.db = db
        self.make_row = make_row
        self.inserted = None

    def destroy(self, public_id: str) -> None:
        if self.inserted is None:
            with Session(self.db.engine) as other:
                row = self.make_row()
                other.add(row)
                other.commit()
                self.inserted = (row.id, getattr(row, "public_id", None))
        super().destroy(public_id)


def test_image_added_during_cleanup_is_deleted_with_album(db, session):
    seed = RecordingStorage()
    album, images = _album_with_images(session, seed)
    aid = album.id
    storage = InsertDuringDestroy(db, lambda: Image(
        album_id=aid, name="late.jpg", public_id="test/late", url="/media/test/late", size=3,
    ))

    report = cascade.delete_album(aid, "alice", storage, session)

    late_id, late_public_id = storage.inserted
    assert report.images_deleted == 3
    assert late_public_id in storage.destroyed
    assert session.exec(select(Image).where(Image.album_id == aid)).all() == []
    assert session.get(Image, late_id) is None
    assert session.get(Album, aid) is None


def test_comment_added_during_image_cleanup_is_deleted(db, session):
    seed = RecordingStorage()
    album, images = _album_with_images(session, seed, count=1)
    aid, iid = album.id, images[0].id
    storage = InsertDuringDestroy(db, lambda: Comment(image_id=iid, author="bob", text="late"))

    image_service.delete_image(aid, iid, "alice", storage, session)

    assert storage.inserted is not None
    assert session.get(Image, iid) is None
    assert session.exec(select(Comment).where(Comment.image_id == iid)).all() == []


def test_listing_images_of_deleted_album_is_not_found(session, storage):
    album, _ = _album_with_images(session, storage)
    aid = album.id
    cascade.delete_album(aid, "alice", storage, session)

    with pytest.raises(NotFound):
        image_service.list_images(aid, "alice", session)
