from uuid import UUID

import pytest

from src.api.deps import get_photos_client
from src.app.exceptions import ServiceUnavailableError, UpstreamError
from src.models import Photo, utcnow


def _add_photo(db_session, album):
    photo = Photo(
        album_id=UUID(album["id"]),
        title="p",
        file_key=f"{album['user_id']}/{album['id']}/p.jpg",
        size_bytes=1,
        mime_type="image/jpeg",
        acquired_at=utcnow(),
    )
    db_session.add(photo)
    db_session.commit()


@pytest.mark.integration
def test_albums_require_authentication(client):
    assert client.get("/albums").status_code == 401
    assert client.post("/albums", json={"title": "x"}).status_code == 401


@pytest.mark.integration
def test_create_and_get_album(client, auth_headers):
    created = client.post("/albums", json={"title": "Trip", "description": "Alps"}, headers=auth_headers)

    assert created.status_code == 201
    album = created.json()
    assert album["is_public"] is False
    assert album["public_token"] is None

    fetched = client.get(f"/albums/{album['id']}", headers=auth_headers)
    assert fetched.json()["title"] == "Trip"


@pytest.mark.integration
def test_create_album_validation(client, auth_headers):
    assert client.post("/albums", json={"title": ""}, headers=auth_headers).status_code == 422
    assert client.post("/albums", json={"title": "x" * 256}, headers=auth_headers).status_code == 422
    assert client.post(
        "/albums", json={"title": "ok", "description": "d" * 1001}, headers=auth_headers
    ).status_code == 422


@pytest.mark.integration
def test_list_pagination(client, auth_headers):
    for i in range(11):
        client.post("/albums", json={"title": f"Album {i}"}, headers=auth_headers)

    first = client.get("/albums", headers=auth_headers).json()
    second = client.get("/albums", params={"page": 2, "limit": 10}, headers=auth_headers).json()

    assert first["total"] == 11
    assert first["size"] == 10
    assert first["pages"] == 2
    assert len(first["items"]) == 10
    assert len(second["items"]) == 1


@pytest.mark.integration
def test_other_users_albums_are_not_found(client, register, album):
    _, other = register(email="bob@example.com")

    assert client.get(f"/albums/{album['id']}", headers=other).status_code == 404
    assert client.patch(f"/albums/{album['id']}", json={"title": "x"}, headers=other).status_code == 404
    assert client.delete(f"/albums/{album['id']}", headers=other).status_code == 404
    assert client.get("/albums", headers=other).json()["total"] == 0


@pytest.mark.integration
def test_partial_update_keeps_other_fields(client, auth_headers):
    album = client.post("/albums", json={"title": "Trip", "description": "Alps"}, headers=auth_headers).json()

    updated = client.patch(f"/albums/{album['id']}", json={"title": "Ski"}, headers=auth_headers).json()

    assert updated["title"] == "Ski"
    assert updated["description"] == "Alps"


@pytest.mark.integration
def test_share_unshare_and_public_lookup(client, auth_headers, album):
    first = client.post(f"/albums/{album['id']}/share", headers=auth_headers).json()
    again = client.post(f"/albums/{album['id']}/share", headers=auth_headers).json()

    assert first["token"] == again["token"]
    assert first["url"] == f"http://frontend.test/shared/{first['token']}"

    public = client.get(f"/albums/shared/{first['token']}")
    assert public.status_code == 200
    assert public.json()["title"] == "Holidays"
    assert "user_id" not in public.json()

    assert client.delete(f"/albums/{album['id']}/share", headers=auth_headers).status_code == 204
    assert client.get(f"/albums/shared/{first['token']}").status_code == 404

    reshared = client.post(f"/albums/{album['id']}/share", headers=auth_headers).json()
    assert reshared["token"] != first["token"]


@pytest.mark.integration
def test_thumbnail_set_and_clear(client, auth_headers, album):
    key = f"{album['user_id']}/{album['id']}/cover_thumb.jpg"

    updated = client.patch(f"/albums/{album['id']}/thumbnail", json={"thumbnail_key": key}, headers=auth_headers)
    assert updated.json()["thumbnail_key"] == key

    foreign = client.patch(
        f"/albums/{album['id']}/thumbnail", json={"thumbnail_key": "someone/else.jpg"}, headers=auth_headers
    )
    assert foreign.status_code == 400

    cleared = client.delete(f"/albums/{album['id']}/thumbnail", headers=auth_headers)
    assert cleared.json()["thumbnail_key"] is None


@pytest.mark.integration
def test_delete_empty_album(client, auth_headers, album):
    assert client.delete(f"/albums/{album['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/albums/{album['id']}", headers=auth_headers).status_code == 404


@pytest.mark.integration
def test_delete_is_blocked_while_album_has_photos(client, auth_headers, album, db_session):
    _add_photo(db_session, album)

    response = client.delete(f"/albums/{album['id']}", headers=auth_headers)

    assert response.status_code == 400
    assert client.get(f"/albums/{album['id']}", headers=auth_headers).status_code == 200


@pytest.mark.integration
def test_delete_proceeds_and_cascades_when_photos_service_is_down(app, client, auth_headers, album, db_session, mocker):
    _add_photo(db_session, album)
    down = mocker.Mock()
    down.count_by_album.side_effect = ServiceUnavailableError("photos service unavailable")
    app.dependency_overrides[get_photos_client] = lambda: down

    response = client.delete(f"/albums/{album['id']}", headers=auth_headers)

    assert response.status_code == 204
    db_session.expire_all()
    assert db_session.query(Photo).count() == 0


@pytest.mark.integration
def test_delete_proceeds_when_photo_count_answers_with_error(app, client, auth_headers, album, mocker):
    failing = mocker.Mock()
    failing.count_by_album.side_effect = UpstreamError(500, "Internal server error")
    app.dependency_overrides[get_photos_client] = lambda: failing

    response = client.delete(f"/albums/{album['id']}", headers=auth_headers)

    assert response.status_code == 204
    assert client.get(f"/albums/{album['id']}", headers=auth_headers).status_code == 404
