"""Image upload, favorites, deletion and comments over HTTP."""

from pathlib import Path

import pytest

from conftest import API, MiB, upload
from picslify.config import settings


@pytest.fixture
def album(client, make_user):
    alice, ha = make_user("alice")
    bob, hb = make_user("bob")
    aid = client.post(f"{API}/albums", json={"name": "A1"}, headers=ha).json()["id"]
    client.post(f"{API}/albums/{aid}/share", json={"usernames": [bob]}, headers=ha)
    return aid, ha, hb


def test_upload_size_limit(client, album):
    aid, ha, _ = album

    r = upload(client, ha, aid, size=6 * MiB)
    assert r.status_code == 400
    assert "5MB" in r.json()["detail"]

    r = upload(client, ha, aid, size=4 * MiB, name="Big one")
    assert r.status_code == 201
    image = r.json()
    assert image["size"] == 4 * MiB

    listed = client.get(f"{API}/albums/{aid}/images", headers=ha).json()["images"]
    assert [i["id"] for i in listed] == [image["id"]]
    assert listed[0]["name"] == "Big one"


def test_upload_limit_boundary(client, album):
    aid, ha, _ = album
    assert upload(client, ha, aid, size=settings.max_upload_bytes + 1).status_code == 400
    r = upload(client, ha, aid, size=settings.max_upload_bytes)
    assert r.status_code == 201
    assert r.json()["size"] == settings.max_upload_bytes


def test_upload_rejects_non_images_and_empty_files(client, album):
    aid, ha, _ = album
    assert upload(client, ha, aid, filename="notes.txt").status_code == 400
    assert upload(client, ha, aid, size=0).status_code == 400
    assert client.get(f"{API}/albums/{aid}/images", headers=ha).json()["images"] == []


def test_upload_to_missing_album(client, album):
    _, ha, _ = album
    assert upload(client, ha, "alb_missing").status_code == 404


def test_upload_parses_tags_and_serves_file(client, album):
    aid, ha, _ = album
    r = upload(client, ha, aid, tags="beach, sunset,,beach ", person="Mia")
    assert r.status_code == 201
    image = r.json()
    assert image["tags"] == ["beach", "sunset"]
    assert image["person"] == "Mia"
    assert image["name"] == "photo.jpg"

    r = client.get(image["url"])
    assert r.status_code == 200
    assert r.content == b"\xff" * 1024

    r = client.get(f"{API}/albums/{aid}/images?tags=sunset", headers=ha)
    assert len(r.json()["images"]) == 1
    r = client.get(f"{API}/albums/{aid}/images?tags=mountain", headers=ha)
    assert r.json()["images"] == []


def test_toggle_favorite_owner_only(client, album):
    aid, ha, hb = album
    iid = upload(client, ha, aid).json()["id"]
    url = f"{API}/albums/{aid}/images/{iid}/favorite"

    assert client.put(url, headers=hb).status_code == 403
    assert client.put(url, headers=ha).json()["is_favorite"] is True
    assert client.put(url, headers=ha).json()["is_favorite"] is False
    assert client.put(f"{API}/albums/{aid}/images/img_missing/favorite", headers=ha).status_code == 404


def test_delete_image_owner_only(client, album):
    aid, ha, hb = album
    image = upload(client, ha, aid).json()
    url = f"{API}/albums/{aid}/images/{image['id']}"
    stored = settings.media_dir / image["url"].removeprefix(settings.media_base_url + "/")
    assert Path(stored).exists()

    assert client.delete(url, headers=hb).status_code == 403
    assert client.delete(url, headers=ha).status_code == 200
    assert not Path(stored).exists()
    assert client.get(f"{API}/albums/{aid}/images", headers=ha).json()["images"] == []
    assert client.delete(url, headers=ha).status_code == 404


def test_comments(client, make_user, album):
    aid, ha, hb = album
    _, hc = make_user("carol")
    iid = upload(client, ha, aid).json()["id"]
    url = f"{API}/albums/{aid}/images/{iid}/comments"

    assert client.post(url, json={"text": "   "}, headers=hb).status_code == 400
    assert client.post(url, json={}, headers=hb).status_code == 400
    assert client.post(url, json={"text": "hi"}, headers=hc).status_code == 403
    assert client.get(url, headers=ha).json()["comments"] == []

    assert client.post(url, json={"text": "first"}, headers=hb).status_code == 201
    assert client.post(url, json={"text": "second"}, headers=ha).status_code == 201

    comments = client.get(url, headers=hb).json()["comments"]
    assert [c["text"] for c in comments] == ["first", "second"]

    image = client.get(f"{API}/albums/{aid}/images/{iid}", headers=hb).json()
    assert len(image["comments"]) == 2


def test_image_must_belong_to_album(client, album):
    aid, ha, _ = album
    other = client.post(f"{API}/albums", json={"name": "Other"}, headers=ha).json()["id"]
    iid = upload(client, ha, other).json()["id"]

    assert client.get(f"{API}/albums/{aid}/images/{iid}", headers=ha).status_code == 404
    assert client.delete(f"{API}/albums/{aid}/images/{iid}", headers=ha).status_code == 404
