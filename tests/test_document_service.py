"""Tests for document metadata: lifecycle, uniqueness across deleted rows, search."""
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import text

from fileserver.errors import FileServerError, MetadataError
from fileserver.models import Active, Deleted, Document, DocumentAlreadyDeleted
from fileserver.services.document_service import (
    add_document,
    get_document,
    get_document_by_fingerprint,
    search_documents,
    soft_delete_document,
)


def make_document(name: str = "a.txt", fingerprint: str = "fp-1", file_id: uuid.UUID | None = None) -> Document:
    return Document(name=name, file_id=file_id or uuid.uuid4(), fingerprint=fingerprint)


def test_lifecycle_state():
    doc = make_document()
    assert doc.state == Active()
    assert doc.is_active

    at = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert doc.soft_delete(at) == Deleted(at=at)
    assert doc.state == Deleted(at=at)
    assert not doc.is_active

    with pytest.raises(DocumentAlreadyDeleted) as excinfo:
        doc.soft_delete()
    # отдаётся обработчиком FileServerError как text/plain 409
    assert isinstance(excinfo.value, FileServerError)
    assert excinfo.value.status_code == 409


@pytest.mark.asyncio
async def test_add_and_get(db_session):
    doc = await add_document(db_session, make_document())
    assert doc.id is not None
    assert doc.created_at is not None
    assert doc.updated_at is not None

    found = await get_document(db_session, doc.file_id)
    assert found is not None and found.id == doc.id
    assert (await get_document_by_fingerprint(db_session, "fp-1")).id == doc.id
    assert await get_document(db_session, uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_ids_are_not_reused(db_session):
    first = await add_document(db_session, make_document(fingerprint="fp-1"))
    await soft_delete_document(db_session, first)
    second = await add_document(db_session, make_document(fingerprint="fp-2"))
    assert second.id > first.id


@pytest.mark.asyncio
async def test_deleted_document_hidden_from_lookups(db_session):
    doc = await add_document(db_session, make_document())
    await soft_delete_document(db_session, doc)
    assert isinstance(doc.state, Deleted)
    assert await get_document(db_session, doc.file_id) is None
    assert await get_document_by_fingerprint(db_session, "fp-1") is None
    assert await search_documents(db_session) == []


@pytest.mark.asyncio
async def test_fingerprint_unique_including_deleted_rows(db_session):
    doc = await add_document(db_session, make_document(fingerprint="fp-1"))
    await soft_delete_document(db_session, doc)
    with pytest.raises(MetadataError):
        await add_document(db_session, make_document(name="b.txt", fingerprint="fp-1"))


@pytest.mark.asyncio
async def test_file_id_unique_including_deleted_rows(db_session):
    file_id = uuid.uuid4()
    doc = await add_document(db_session, make_document(fingerprint="fp-1", file_id=file_id))
    await soft_delete_document(db_session, doc)
    with pytest.raises(MetadataError):
        await add_document(db_session, make_document(fingerprint="fp-2", file_id=file_id))


@pytest.mark.asyncio
async def test_soft_delete_twice_rejected(db_session):
    doc = await add_document(db_session, make_document())
    await soft_delete_document(db_session, doc)
    with pytest.raises(DocumentAlreadyDeleted):
        await soft_delete_document(db_session, doc)


@pytest.mark.asyncio
async def test_search_matches_literal_substring(db_session):
    await add_document(db_session, make_document(name="100%_done.txt", fingerprint="fp-1"))
    await add_document(db_session, make_document(name="100 done.txt", fingerprint="fp-2"))
    await add_document(db_session, make_document(name="ReadMe.md", fingerprint="fp-3"))

    assert [d.name for d in await search_documents(db_session, "%_")] == ["100%_done.txt"]
    assert [d.name for d in await search_documents(db_session, "readme")] == ["ReadMe.md"]
    assert len(await search_documents(db_session, None)) == 3
    assert len(await search_documents(db_session, "")) == 3


@pytest.mark.asyncio
async def test_search_whitespace_is_part_of_term(db_session):
    await add_document(db_session, make_document(name="my file.txt", fingerprint="fp-1"))
    await add_document(db_session, make_document(name="a.txt", fingerprint="fp-2"))
    await add_document(db_session, make_document(name="report .txt", fingerprint="fp-3"))

    assert [d.name for d in await search_documents(db_session, " ")] == ["my file.txt", "report .txt"]
    assert [d.name for d in await search_documents(db_session, "t ")] == ["report .txt"]


@pytest.mark.asyncio
async def test_timestamps_have_database_defaults(db_session):
    """Rows inserted outside the ORM (e.g. by hand in psql) still get created_at/updated_at."""
    await db_session.execute(
        text("INSERT INTO documents (name, file_id, fingerprint) VALUES ('raw.txt', :file_id, 'fp-raw')"),
        {"file_id": uuid.uuid4().hex},
    )
    row = (
        await db_session.execute(text("SELECT created_at, updated_at FROM documents WHERE name = 'raw.txt'"))
    ).one()
    assert row.created_at is not None
    assert row.updated_at is not None
