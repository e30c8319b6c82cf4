import logging
from uuid import UUID, uuid4

import pytest

from src.app.exceptions import ServiceUnavailableError, UnsupportedMediaTypeError
from src.services.image.processor import ImageProcessor
from src.services.storage.s3 import StorageServiceError
from src.services.upload.orchestrator import UploadOrchestrator, title_from_filename


@pytest.fixture
def owner_id():
    return uuid4()


@pytest.fixture
def album_id():
    return uuid4()


@pytest.fixture
def photos_client(mocker):
    client = mocker.Mock()
    client.create_photo.side_effect = lambda payload, user_id, email: {**payload}
    return client


@pytest.fixture
def storage(mocker):
    return mocker.Mock()


@pytest.fixture
def orchestrator(storage, photos_client, mocker):
    return UploadOrchestrator(storage, ImageProcessor(), photos_client, mocker.Mock())


def test_title_from_filename():
    assert title_from_filename("holiday/IMG_0001.JPG") == "IMG_0001"
    assert title_from_filename("") == "Untitled"
    assert title_from_filename(None) == "Untitled"
    assert title_from_filename(".jpg") == ".jpg"


def test_ingest_stores_both_objects_then_creates_record(
    orchestrator, storage, photos_client, owner_id, album_id, image_factory
):
    data = image_factory("PNG")

    result = orchestrator.ingest_photo(owner_id, "o@example.com", album_id, data, "beach.png")

    upload_id = result.upload_id
    assert result.file_key == f"{owner_id}/{album_id}/{upload_id}.jpg"
    assert result.thumbnail_key == f"{owner_id}/{album_id}/{upload_id}_thumb.jpg"
    assert result.photo_id == upload_id
    assert result.mime_type == "image/png"
    assert result.size_bytes == len(data)

    put_keys = [call.args[0] for call in storage.put_object.call_args_list]
    assert put_keys == [result.file_key, result.thumbnail_key]
    assert storage.put_object.call_args_list[0].args[1] == data

    payload, user_id, email = photos_client.create_photo.call_args.args
    assert payload["id"] == str(upload_id)
    assert payload["album_id"] == str(album_id)
    assert payload["title"] == "beach"
    assert user_id == owner_id and email == "o@example.com"
    storage.delete_object.assert_not_called()


def test_bad_type_fails_before_any_write(orchestrator, storage, photos_client, owner_id, album_id):
    with pytest.raises(UnsupportedMediaTypeError):
        orchestrator.ingest_photo(owner_id, "o@example.com", album_id, b"not an image")

    storage.put_object.assert_not_called()
    photos_client.create_photo.assert_not_called()


def test_record_failure_compensates_and_logs_orphans(
    orchestrator, storage, photos_client, owner_id, album_id, image_factory, caplog
):
    photos_client.create_photo.side_effect = ServiceUnavailableError("photos service unavailable")

    with caplog.at_level(logging.ERROR, logger="src.services.upload.orchestrator"):
        with pytest.raises(ServiceUnavailableError):
            orchestrator.ingest_photo(owner_id, "o@example.com", album_id, image_factory("JPEG"))

    written = [call.args[0] for call in storage.put_object.call_args_list]
    deleted = [call.args[0] for call in storage.delete_object.call_args_list]
    assert deleted == written
    assert len(written) == 2

    upload_id = UUID(written[0].rsplit("/", 1)[1].removesuffix(".jpg"))
    orphan_logs = [r.getMessage() for r in caplog.records if "orphaned" in r.getMessage()]
    assert orphan_logs
    assert str(upload_id) in orphan_logs[0]
    assert all(key in orphan_logs[0] for key in written)


def test_thumbnail_failure_compensates_only_the_original(
    orchestrator, storage, photos_client, owner_id, album_id, image_factory
):
    storage.put_object.side_effect = [None, StorageServiceError("boom")]

    with pytest.raises(StorageServiceError):
        orchestrator.ingest_photo(owner_id, "o@example.com", album_id, image_factory("JPEG"))

    first_key = storage.put_object.call_args_list[0].args[0]
    storage.delete_object.assert_called_once_with(first_key)
    photos_client.create_photo.assert_not_called()


def test_first_write_failure_has_nothing_to_compensate(
    orchestrator, storage, owner_id, album_id, image_factory
):
    storage.put_object.side_effect = StorageServiceError("down")

    with pytest.raises(StorageServiceError):
        orchestrator.ingest_photo(owner_id, "o@example.com", album_id, image_factory("JPEG"))

    storage.delete_object.assert_not_called()


def test_failed_compensation_still_raises_original_error(
    orchestrator, storage, photos_client, owner_id, album_id, image_factory
):
    photos_client.create_photo.side_effect = ServiceUnavailableError("photos down")
    storage.delete_object.side_effect = StorageServiceError("also down")

    with pytest.raises(ServiceUnavailableError, match="photos down"):
        orchestrator.ingest_photo(owner_id, "o@example.com", album_id, image_factory("JPEG"))

    assert storage.delete_object.call_count == 2


def test_upload_ids_are_unique(orchestrator, owner_id, album_id, image_factory):
    data = image_factory("PNG")
    first = orchestrator.ingest_photo(owner_id, "o@example.com", album_id, data)
    second = orchestrator.ingest_photo(owner_id, "o@example.com", album_id, data)

    assert first.upload_id != second.upload_id
    assert first.file_key != second.file_key


def test_avatar_is_stored_and_profile_updated(orchestrator, storage, owner_id, image_factory):
    key = orchestrator.ingest_avatar(owner_id, "o@example.com", image_factory("PNG"))

    assert key == f"avatars/{owner_id}.jpg"
    stored_key, _, content_type = storage.put_object.call_args.args
    assert stored_key == key
    assert content_type == "image/jpeg"
    orchestrator.auth_client.update_profile.assert_called_once_with(owner_id, "o@example.com", avatar_url=key)
