"""Метаданные документов в БД. Выборки возвращают только активные (не удалённые) записи."""
import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fileserver.errors import MetadataError
from fileserver.models import Document

_log = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def _like_pattern(search_query: str | None) -> str:
    q = search_query or ""
    if not q:
        return "%"
    for ch in (LIKE_ESCAPE, "%", "_"):
        q = q.replace(ch, LIKE_ESCAPE + ch)
    return f"%{q}%"


async def get_document(db: AsyncSession, file_id: UUID) -> Document | None:
    try:
        result = await db.execute(
            select(Document).where(Document.file_id == file_id, Document.deleted_at.is_(None))
        )
    except SQLAlchemyError as e:
        raise MetadataError(f"error while retrieving document: {e}") from e
    return result.scalar_one_or_none()


async def get_document_by_fingerprint(db: AsyncSession, fingerprint: str) -> Document | None:
    try:
        result = await db.execute(
            select(Document).where(Document.fingerprint == fingerprint, Document.deleted_at.is_(None))
        )
    except SQLAlchemyError as e:
        raise MetadataError(f"error while retrieving document: {e}") from e
    return result.scalar_one_or_none()


async def search_documents(db: AsyncSession, search_query: str | None = None) -> list[Document]:
    """Поиск подстроки в имени без учёта регистра. Пустой запрос возвращает все активные документы."""
    try:
        result = await db.execute(
            select(Document)
            .where(
                Document.name.ilike(_like_pattern(search_query), escape=LIKE_ESCAPE),
                Document.deleted_at.is_(None),
            )
            .order_by(Document.id)
        )
    except SQLAlchemyError as e:
        raise MetadataError(f"Error retrieving documents: {e}") from e
    return list(result.scalars().all())


async def add_document(db: AsyncSession, document: Document) -> Document:
    """Вставляет запись и коммитит. Падает, если file_id или отпечаток уже есть в любой строке, удалённой или нет."""
    db.add(document)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise MetadataError(f"Error adding document: {e.orig}") from e
    except SQLAlchemyError as e:
        await db.rollback()
        raise MetadataError(f"Error adding document: {e}") from e
    await db.refresh(document)
    return document


async def soft_delete_document(db: AsyncSession, document: Document, at: datetime | None = None) -> Document:
    document.soft_delete(at)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise MetadataError(f"Error deleting document from DB: {e}") from e
    _log.info("document %s soft-deleted at %s", document.file_id, document.deleted_at)
    return document
