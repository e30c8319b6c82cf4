"""Create the photo bucket on the configured S3/MinIO endpoint if it is missing."""
from src.app.config import settings
from src.services.storage.s3 import StorageService


def create_bucket():
    storage = StorageService()
    if storage.ensure_bucket():
        print(f"➕ Created bucket: {settings.S3_BUCKET_NAME}")
    else:
        print(f"✔ Bucket already exists: {settings.S3_BUCKET_NAME}")


if __name__ == "__main__":
    create_bucket()
