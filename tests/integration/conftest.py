"""
Integration test configuration.

Every backend service runs in one `all` application. Calls between
services go through a TestClient bound to that same application, so the
internal-token checks and JSON contracts are exercised for real.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.api.deps import (
    get_albums_client,
    get_auth_client,
    get_db,
    get_photos_client,
    get_storage,
)
from src.app.main import create_application
from src.db.base import Base, enable_sqlite_foreign_keys
from src.services.clients.services import AlbumsClient, AuthClient, PhotosClient

INTERNAL_HEADERS = {"x-internal-token": "test-internal-token"}


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so nested service calls each get their own connection."""
    bind = create_engine(
        f"sqlite:///{tmp_path / 'photos.db'}",
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(bind)
    Base.metadata.create_all(bind)
    yield bind
    bind.dispose()


@pytest.fixture
def app(engine, storage):
    application = create_application("all")
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    internal = TestClient(application)
    application.dependency_overrides.update({
        get_db: override_get_db,
        get_storage: lambda: storage,
        get_albums_client: lambda: AlbumsClient(base_url="http://testserver", client=internal),
        get_photos_client: lambda: PhotosClient(base_url="http://testserver", client=internal),
        get_auth_client: lambda: AuthClient(base_url="http://testserver", client=internal),
    })
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """FastAPI test client with dependency overrides."""
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a user and return (tokens body, bearer headers)."""

    def _register(email="ann@example.com", password="s3cret-pass", name="Ann"):
        response = client.post("/auth/register", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        body = response.json()
        return body, {"Authorization": f"Bearer {body['access_token']}"}

    return _register


@pytest.fixture
def auth_headers(register):
    _, headers = register()
    return headers


@pytest.fixture
def album(client, auth_headers):
    response = client.post("/albums", json={"title": "Holidays"}, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()
