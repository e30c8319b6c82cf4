"""
Shared test configuration.

Environment is fixed before any application module is imported so the
settings singleton, password hasher and DB engine pick it up.
"""
import io
import os

os.environ.update({
    "DATABASE_URL": "sqlite://",
    "BCRYPT_ROUNDS": "4",
    "JWT_SECRET_KEY": "test-jwt-secret",
    "INTERNAL_SERVICE_TOKEN": "test-internal-token",
    "SERVICE_NAME": "all",
    "S3_BUCKET_NAME": "test-photos",
    "S3_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "AWS_DEFAULT_REGION": "us-east-1",
    "FRONTEND_URL": "http://frontend.test",
})
for name in ("REDIS_URL", "RESEND_API_KEY", "S3_ENDPOINT_URL"):
    os.environ.pop(name, None)

import boto3
import pytest
from moto import mock_aws
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import src.models  # noqa: F401  registers every table on Base.metadata
from src.db.base import Base, enable_sqlite_foreign_keys
from src.services.storage.s3 import StorageService

INTERNAL_TOKEN = "test-internal-token"


def make_image(fmt: str = "PNG", size=(64, 48), color=(200, 30, 30), exif=None) -> bytes:
    """Encode a solid-colour image with Pillow."""
    img = Image.new("RGB", size, color)
    buffer = io.BytesIO()
    params = {"exif": exif} if exif is not None else {}
    img.save(buffer, format=fmt, **params)
    return buffer.getvalue()


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test."""
    bind = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(bind)
    Base.metadata.create_all(bind)
    yield bind
    Base.metadata.drop_all(bind)
    bind.dispose()


@pytest.fixture
def db_session(engine):
    """Create test database session."""
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def s3_client():
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket="test-photos")
        yield client


@pytest.fixture
def storage(s3_client):
    return StorageService(client=s3_client, bucket_name="test-photos")
