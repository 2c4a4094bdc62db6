"""Shared fixtures. Settings are read from the environment at import
time, so data and media directories are pointed at temp dirs first."""

import os
import secrets
import tempfile

_DATA_DIR = tempfile.mkdtemp()
os.environ["PICSLIFY_DATA_DIR"] = _DATA_DIR
os.environ["PICSLIFY_MEDIA_DIR"] = tempfile.mkdtemp()
os.environ["PICSLIFY_DB_PATH"] = os.path.join(_DATA_DIR, "test.db")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from picslify.database import Database  # noqa: E402
from picslify.errors import Upstream  # noqa: E402
from picslify.main import app  # noqa: E402
from picslify.models.user import User  # noqa: E402
from picslify.utils.storage import StoredMedia  # noqa: E402

API = "/api/v1"
MiB = 1024 * 1024


class RecordingStorage:
    """In-memory media storage that can be told to fail on delete."""

    def __init__(self, fail_on: set[str] | None = None):
        self.objects: dict[str, bytes] = {}
        self.destroyed: list[str] = []
        self.fail_on = fail_on or set()

    def upload(self, data: bytes, filename: str) -> StoredMedia:
        public_id = f"test/{secrets.token_hex(6)}"
        self.objects[public_id] = data
        return StoredMedia(public_id=public_id, url=f"/media/{public_id}")

    def destroy(self, public_id: str) -> None:
        if public_id in self.fail_on:
            raise Upstream(f"storage unavailable for {public_id}")
        self.objects.pop(public_id, None)
        self.destroyed.append(public_id)


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(client):
    """Register and log in a fresh user; returns (username, auth headers)."""
    def _make(prefix: str = "user"):
        username = f"{prefix}_{secrets.token_hex(3)}"
        r = client.post(f"{API}/auth/register", json={
            "username": username,
            "name": prefix.title(),
            "password": "secret123",
        })
        assert r.status_code == 201, r.text
        r = client.post(f"{API}/auth/login", json={
            "username": username,
            "password": "secret123",
        })
        assert r.status_code == 200, r.text
        return username, {"Authorization": f"Bearer {r.json()['token']}"}
    return _make


@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "service.db")
    database.init()
    yield database
    database.close()


@pytest.fixture
def session(db):
    with db.session() as s:
        for name in ("alice", "bob", "carol"):
            s.add(User(username=name, name=name.title(), password_hash=""))
        s.commit()
        yield s


@pytest.fixture
def storage():
    return RecordingStorage()


def upload(client, headers, album_id, size=1024, filename="photo.jpg", **form):
    return client.post(
        f"{API}/albums/{album_id}/images",
        files={"file": (filename, b"\xff" * size, "image/jpeg")},
        data=form,
        headers=headers,
    )
