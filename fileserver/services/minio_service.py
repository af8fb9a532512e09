"""MinIO: хранение байтов файлов. Ключ объекта — file_id документа."""
import logging
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import Protocol

from minio import Minio
from minio.error import MinioException, S3Error
from urllib3.exceptions import HTTPError

from fileserver.config import Settings
from fileserver.errors import DocumentNotFound, StorageError

_log = logging.getLogger(__name__)

CHUNK_SIZE = 32 * 1024
CONTENT_TYPE = "application/octet-stream"
MISSING_OBJECT_CODES = {"NoSuchKey", "NoSuchBucket", "NoSuchObject"}
STORE_ERRORS = (MinioException, HTTPError, OSError)


class ObjectStore(Protocol):
    def ensure_bucket(self, bucket: str) -> None: ...

    def put(self, bucket: str, key: str, path: Path) -> None: ...

    def get(self, bucket: str, key: str) -> AbstractContextManager[Iterator[bytes]]: ...

    def delete(self, bucket: str, key: str) -> None: ...


class MinioObjectStore:
    def __init__(self, client: Minio, region: str | None = None):
        self.client = client
        self.region = region

    @classmethod
    def from_settings(cls, settings: Settings) -> "MinioObjectStore":
        client = Minio(
            settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            session_token=settings.minio_session_token,
            secure=settings.minio_secure,
            region=settings.minio_region,
        )
        if settings.minio_bucket_lookup == "dns":
            client.enable_virtual_style_endpoint()
        elif settings.minio_bucket_lookup == "path":
            client.disable_virtual_style_endpoint()
        return cls(client, region=settings.minio_region)

    def ensure_bucket(self, bucket: str) -> None:
        try:
            if self.client.bucket_exists(bucket_name=bucket):
                return
            _log.info("bucket %s does not exist, creating", bucket)
            self.client.make_bucket(bucket_name=bucket, location=self.region)
        except STORE_ERRORS as e:
            raise StorageError(f"failed to create bucket {bucket}: {e}") from e
        _log.info("bucket %s created", bucket)

    def put(self, bucket: str, key: str, path: Path) -> None:
        self.ensure_bucket(bucket)
        try:
            self.client.fput_object(
                bucket_name=bucket,
                object_name=key,
                file_path=str(path),
                content_type=CONTENT_TYPE,
            )
        except STORE_ERRORS as e:
            raise StorageError(f"Error during upload file to MinIO: {e}") from e

    @contextmanager
    def get(self, bucket: str, key: str) -> Iterator[Iterator[bytes]]:
        """Открывает объект и отдаёт его байты чанками. Соединение освобождается на выходе."""
        try:
            response = self.client.get_object(bucket_name=bucket, object_name=key)
        except S3Error as e:
            if e.code in MISSING_OBJECT_CODES:
                raise DocumentNotFound(f"object {key} not found in bucket {bucket}") from e
            raise StorageError(f"Error getting object from MinIO: {e}") from e
        except STORE_ERRORS as e:
            raise StorageError(f"Error getting object from MinIO: {e}") from e
        try:
            yield response.stream(CHUNK_SIZE)
        finally:
            response.close()
            response.release_conn()

    def delete(self, bucket: str, key: str) -> None:
        try:
            self.client.remove_object(bucket_name=bucket, object_name=key)
        except STORE_ERRORS as e:
            raise StorageError(f"Error deleting object from MinIO: {e}") from e
        _log.info("object %s deleted from bucket %s", key, bucket)
