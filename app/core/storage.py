import asyncio
from dataclasses import dataclass
from io import BytesIO
from typing import Protocol

from minio import Minio, S3Error
from urllib3.exceptions import HTTPError

from app.core.errors import StorageFailed

from .config import settings

minio_client = Minio(
    settings.minio_server,
    access_key=settings.minio_access_key,
    secret_key=settings.minio_secret_key,
    secure=True if settings.environment != "development" else False,
)
minio_bucket = settings.minio_bucket


@dataclass(frozen=True)
class StoredAsset:
    reference: str
    url: str


class ObjectStore(Protocol):
    async def put(self, data: bytes, filename: str, content_type: str) -> StoredAsset: ...

    async def get_url(self, reference: str) -> str: ...

    async def delete(self, reference: str) -> None: ...


def get_public_url(object_name: str) -> str:
    """Generate permanent public URL"""
    if settings.environment == "development":
        protocol = "http"
        return f"{protocol}://{settings.minio_server}/{minio_bucket}/{object_name}"

    protocol = "https"
    # In production, the bucket matches directly to the server url
    return f"{protocol}://{settings.s3_public_domain}/{object_name}"


class MinioStore:
    """Object store backed by a MinIO / S3-compatible bucket.

    References are object names; the filename handed to ``put`` is used as-is,
    so callers are expected to make it unique.
    """

    def __init__(self, client: Minio, bucket_name: str):
        self.client = client
        self.bucket_name = bucket_name

    async def put(self, data: bytes, filename: str, content_type: str) -> StoredAsset:
        try:
            await asyncio.to_thread(
                self.client.put_object,
                bucket_name=self.bucket_name,
                object_name=filename,
                data=BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except S3Error as e:
            raise StorageFailed(f"Could not upload {filename}: {e.code}") from e
        except HTTPError as e:
            raise StorageFailed(f"Could not upload {filename}") from e

        return StoredAsset(reference=filename, url=await self.get_url(filename))

    async def get_url(self, reference: str) -> str:
        return get_public_url(reference)

    async def delete(self, reference: str) -> None:
        try:
            await asyncio.to_thread(self.client.remove_object, self.bucket_name, reference)
        except S3Error as e:
            if e.code == "NoSuchKey":
                return
            raise StorageFailed(f"Could not delete {reference}: {e.code}") from e
        except HTTPError as e:
            raise StorageFailed(f"Could not delete {reference}") from e


object_store = MinioStore(minio_client, minio_bucket)
