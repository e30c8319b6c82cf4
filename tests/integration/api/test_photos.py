import uuid

import pytest

INTERNAL = {"x-internal-token": "test-internal-token"}


def _payload(album, acquired_at="2024-05-01T10:00:00+00:00", **overrides):
    upload_id = overrides.pop("id", str(uuid.uuid4()))
    payload = {
        "id": upload_id,
        "album_id": album["id"],
        "title": "Beach",
        "file_key": f"{album['user_id']}/{album['id']}/{upload_id}.jpg",
        "thumbnail_key": f"{album['user_id']}/{album['id']}/{upload_id}_thumb.jpg",
        "size_bytes": 1024,
        "mime_type": "image/jpeg",
        "dominant_color": "#336699",
        "acquired_at": acquired_at,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_photo(client):
    def _create(album, **kwargs):
        response = client.post("/photos", json=_payload(album, **kwargs), headers=INTERNAL)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.mark.integration
def test_create_photo_is_internal_only(client, auth_headers, album):
    assert client.post("/photos", json=_payload(album)).status_code == 401
    assert client.post("/photos", json=_payload(album), headers=auth_headers).status_code == 401


@pytest.mark.integration
def test_create_photo_is_idempotent_on_id(client, album, create_photo, db_session):
    payload = _payload(album)

    first = client.post("/photos", json=payload, headers=INTERNAL)
    second = client.post("/photos", json={**payload, "title": "Different"}, headers=INTERNAL)

    assert first.status_code == second.status_code == 201
    assert first.json()["id"] == second.json()["id"] == payload["id"]
    assert second.json()["title"] == "Beach"


@pytest.mark.integration
def test_create_photo_rejects_bad_colour(client, album):
    response = client.post("/photos", json=_payload(album, dominant_color="blue"), headers=INTERNAL)
    assert response.status_code == 422


@pytest.mark.integration
def test_count_endpoint_is_internal_only(client, auth_headers, album, create_photo):
    create_photo(album)
    create_photo(album)

    assert client.get(f"/photos/album/{album['id']}/count", headers=auth_headers).status_code == 401
    response = client.get(f"/photos/album/{album['id']}/count", headers=INTERNAL)
    assert response.json() == {"album_id": album["id"], "count": 2}


@pytest.mark.integration
def test_list_sorted_by_acquired_at(client, auth_headers, album, create_photo):
    old = create_photo(album, acquired_at="2020-01-01T00:00:00+00:00")
    new = create_photo(album, acquired_at="2023-01-01T00:00:00+00:00")

    desc = client.get(f"/photos/album/{album['id']}", headers=auth_headers).json()
    asc = client.get(f"/photos/album/{album['id']}", params={"order": "asc"}, headers=auth_headers).json()

    assert [p["id"] for p in desc["items"]] == [new["id"], old["id"]]
    assert [p["id"] for p in asc["items"]] == [old["id"], new["id"]]


@pytest.mark.integration
def test_list_pagination_rounds_pages_up(client, auth_headers, album, create_photo):
    for _ in range(5):
        create_photo(album)

    body = client.get(f"/photos/album/{album['id']}", params={"limit": 2, "page": 3}, headers=auth_headers).json()

    assert body["total"] == 5
    assert body["pages"] == 3
    assert body["size"] == 2
    assert len(body["items"]) == 1


@pytest.mark.integration
def test_list_rejects_bad_query(client, auth_headers, album):
    url = f"/photos/album/{album['id']}"
    assert client.get(url, params={"limit": 101}, headers=auth_headers).status_code == 422
    assert client.get(url, params={"sort": "title"}, headers=auth_headers).status_code == 422


@pytest.mark.integration
def test_foreign_album_and_photo_are_not_found(client, register, album, create_photo):
    photo = create_photo(album)
    _, other = register(email="bob@example.com")

    assert client.get(f"/photos/album/{album['id']}", headers=other).status_code == 404
    assert client.get(f"/photos/{photo['id']}", headers=other).status_code == 404
    assert client.patch(f"/photos/{photo['id']}", json={"title": "x"}, headers=other).status_code == 404
    assert client.delete(f"/photos/{photo['id']}", headers=other).status_code == 404


@pytest.mark.integration
def test_get_and_update_photo(client, auth_headers, album, create_photo):
    photo = create_photo(album)

    assert client.get(f"/photos/{photo['id']}", headers=auth_headers).json()["title"] == "Beach"

    updated = client.patch(
        f"/photos/{photo['id']}", json={"description": "Sunset"}, headers=auth_headers
    ).json()
    assert updated["title"] == "Beach"
    assert updated["description"] == "Sunset"
    assert updated["file_key"] == photo["file_key"]


@pytest.mark.integration
def test_delete_photo_removes_objects(client, auth_headers, album, create_photo, storage, s3_client):
    photo = create_photo(album)
    storage.put_object(photo["file_key"], b"original", "image/jpeg")
    storage.put_object(photo["thumbnail_key"], b"thumb", "image/jpeg")

    response = client.delete(f"/photos/{photo['id']}", headers=auth_headers)

    assert response.status_code == 204
    assert client.get(f"/photos/{photo['id']}", headers=auth_headers).status_code == 404
    assert s3_client.list_objects_v2(Bucket="test-photos").get("KeyCount") == 0


@pytest.mark.integration
def test_delete_photo_tolerates_missing_objects(client, auth_headers, album, create_photo):
    photo = create_photo(album)
    assert client.delete(f"/photos/{photo['id']}", headers=auth_headers).status_code == 204


@pytest.mark.integration
def test_shared_listing_has_signed_urls(client, auth_headers, album, create_photo):
    create_photo(album)
    token = client.post(f"/albums/{album['id']}/share", headers=auth_headers).json()["token"]

    body = client.get(f"/photos/shared/{token}").json()

    assert body["total"] == 1
    item = body["items"][0]
    assert "X-Amz-Signature" in item["url"] or "Signature=" in item["url"]
    assert item["thumbnail_url"]

    client.delete(f"/albums/{album['id']}/share", headers=auth_headers)
    assert client.get(f"/photos/shared/{token}").status_code == 404
