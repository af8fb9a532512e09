"""Файлы: загрузка, выдача, список и удаление. Координирует локальный staging, MinIO и БД.

Между MinIO и БД нет транзакции: если запись в БД не удалась после загрузки в MinIO,
объект остаётся в бакете без записи, компенсирующего удаления нет."""
import logging
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from fileserver.config import Settings
from fileserver.errors import DocumentAlreadyExists, DocumentNotFound, InvalidRequest
from fileserver.models import Document
from fileserver.services import staging
from fileserver.services.document_service import (
    add_document,
    get_document,
    get_document_by_fingerprint,
    search_documents,
    soft_delete_document,
)
from fileserver.services.fingerprint import compute_fingerprint, new_file_id
from fileserver.services.minio_service import ObjectStore

_log = logging.getLogger(__name__)


@dataclass
class StagedDocument:
    document: Document
    path: Path
    size: int


def parse_file_id(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise InvalidRequest(f"Error parsing the idFile: {value!r} is not a valid UUID") from None


async def upload_document(
    db: AsyncSession,
    store: ObjectStore,
    settings: Settings,
    upload: UploadFile,
) -> Document:
    """Staging -> отпечаток -> проверка дубликата -> MinIO -> запись в documents."""
    name = upload.filename
    if not name:
        raise InvalidRequest("Error retrieving the file: missing filename")
    with staging.staged_file(settings.get_upload_dir(), name) as path:
        size = await staging.write_upload(upload, path, settings.max_upload_size)
        fingerprint = compute_fingerprint(path, settings.fingerprint_mode)

        if await get_document_by_fingerprint(db, fingerprint) is not None:
            _log.info("duplicate upload of %s rejected: fingerprint %s", name, fingerprint)
            raise DocumentAlreadyExists(fingerprint)

        file_id = new_file_id()
        store.put(settings.minio_bucket, str(file_id), path)
        _log.info("stored %s (%d bytes) as %s/%s", name, size, settings.minio_bucket, file_id)

        try:
            document = await add_document(
                db, Document(name=name, file_id=file_id, fingerprint=fingerprint)
            )
        except Exception:
            _log.error("object %s/%s has no document row", settings.minio_bucket, file_id)
            raise
    return document


async def fetch_document(
    db: AsyncSession,
    store: ObjectStore,
    settings: Settings,
    file_id: UUID,
) -> StagedDocument:
    """Копирует объект активного документа во временный файл. Удаляет файл вызывающий."""
    document = await get_document(db, file_id)
    if document is None:
        raise DocumentNotFound(f"Error retrieving document: document with idFile {file_id} not found")

    key = str(file_id)
    with store.get(settings.minio_bucket, key) as chunks:
        path = staging.new_staging_path(settings.get_upload_dir(), key)
        try:
            size = staging.write_chunks(chunks, path)
        except BaseException:
            staging.discard(path)
            raise
    _log.info("sending file %s (size: %d bytes)", key, size)
    return StagedDocument(document=document, path=path, size=size)


async def list_documents(db: AsyncSession, search_query: str | None = None) -> list[Document]:
    return await search_documents(db, search_query)


async def delete_document(
    db: AsyncSession,
    store: ObjectStore,
    settings: Settings,
    file_id: UUID,
) -> Document:
    document = await get_document(db, file_id)
    if document is None:
        raise DocumentNotFound(f"Document not found: document with idFile {file_id} not found")
    await soft_delete_document(db, document)
    if settings.delete_blob_on_delete:
        store.delete(settings.minio_bucket, str(file_id))
    return document
