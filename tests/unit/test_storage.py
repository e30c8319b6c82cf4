from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from botocore.exceptions import ClientError

from src.services.storage.s3 import (
    StorageService,
    StorageServiceError,
    avatar_key,
    key_belongs_to,
    original_key,
    thumbnail_key,
)


def _client_error(code: str, operation: str = "DeleteObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def test_key_layout():
    owner, album, upload = uuid4(), uuid4(), uuid4()

    assert original_key(owner, album, upload) == f"{owner}/{album}/{upload}.jpg"
    assert thumbnail_key(owner, album, upload) == f"{owner}/{album}/{upload}_thumb.jpg"
    assert avatar_key(owner) == f"avatars/{owner}.jpg"


def test_key_ownership():
    owner, other = uuid4(), uuid4()

    assert key_belongs_to(f"{owner}/album/photo.jpg", owner)
    assert key_belongs_to(f"avatars/{owner}.jpg", owner)
    assert not key_belongs_to(f"{other}/album/photo.jpg", owner)
    assert not key_belongs_to(f"avatars/{other}.jpg", owner)
    assert not key_belongs_to(f"x{owner}/album/photo.jpg", owner)


def test_put_overwrites_existing_object(storage, s3_client):
    storage.put_object("u/a/p.jpg", b"first", "image/jpeg")
    storage.put_object("u/a/p.jpg", b"second", "image/jpeg")

    body = s3_client.get_object(Bucket="test-photos", Key="u/a/p.jpg")
    assert body["Body"].read() == b"second"
    assert body["ContentType"] == "image/jpeg"


def test_presigned_url_points_at_key(storage):
    storage.put_object("u/a/p.jpg", b"data", "image/jpeg")

    url = storage.generate_presigned_url("u/a/p.jpg", expires_in=60)

    assert "u/a/p.jpg" in url
    assert "Expires=" in url or "X-Amz-Expires=60" in url


def test_delete_is_idempotent(storage, s3_client):
    storage.put_object("u/a/p.jpg", b"data", "image/jpeg")

    storage.delete_object("u/a/p.jpg")
    storage.delete_object("u/a/p.jpg")

    listing = s3_client.list_objects_v2(Bucket="test-photos")
    assert listing.get("KeyCount", 0) == 0


def test_delete_treats_no_such_key_as_success():
    client = MagicMock()
    client.delete_object.side_effect = _client_error("NoSuchKey")

    StorageService(client=client, bucket_name="b").delete_object("missing.jpg")


def test_delete_surfaces_other_errors():
    client = MagicMock()
    client.delete_object.side_effect = _client_error("AccessDenied")

    with pytest.raises(StorageServiceError):
        StorageService(client=client, bucket_name="b").delete_object("k.jpg")


def test_put_failure_raises_storage_error():
    client = MagicMock()
    client.put_object.side_effect = _client_error("InternalError", "PutObject")

    with pytest.raises(StorageServiceError) as exc_info:
        StorageService(client=client, bucket_name="b").put_object("k.jpg", b"x", "image/jpeg")
    assert exc_info.value.status_code == 503


def test_ensure_bucket_creates_once(s3_client):
    storage = StorageService(client=s3_client, bucket_name="fresh-bucket")

    assert storage.ensure_bucket() is True
    assert storage.ensure_bucket() is False
    names = [b["Name"] for b in s3_client.list_buckets()["Buckets"]]
    assert "fresh-bucket" in names


def test_client_built_from_settings_uses_configured_bucket(s3_client):
    storage = StorageService()
    assert storage.bucket_name == "test-photos"
    assert storage.s3_client.meta.region_name == "us-east-1"
