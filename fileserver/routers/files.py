"""
API файлов: список с поиском по имени, выдача, загрузка, мягкое удаление.
"""
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse, PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.background import BackgroundTask

from fileserver.config import Settings
from fileserver.database import get_db
from fileserver.dependencies import get_object_store, get_settings
from fileserver.schemas import DocumentResponse
from fileserver.services import staging
from fileserver.services.file_service import (
    delete_document,
    fetch_document,
    list_documents,
    parse_file_id,
    upload_document,
)
from fileserver.services.minio_service import CONTENT_TYPE, ObjectStore

router = APIRouter(tags=["files"])


@router.get("/files", response_model=list[DocumentResponse])
async def list_files(
    search_query: str | None = Query(None, alias="searchQuery", description="Подстрока имени файла"),
    db: AsyncSession = Depends(get_db),
):
    documents = await list_documents(db, search_query)
    return [DocumentResponse.model_validate(d) for d in documents]


@router.get("/file/{id_file}")
async def get_file(
    id_file: str,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings),
) -> FileResponse:
    """Отдаёт файл из MinIO. Временная копия удаляется после отправки ответа."""
    staged = await fetch_document(db, store, settings, parse_file_id(id_file))
    return FileResponse(
        staged.path,
        media_type=CONTENT_TYPE,
        filename=str(staged.document.file_id),
        background=BackgroundTask(staging.discard, staged.path),
    )


@router.post("/file", response_class=PlainTextResponse)
async def load_file(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings),
):
    document = await upload_document(db, store, settings, file)
    return f"File {document.name} uploaded successfully with id {document.file_id}!\n"


@router.delete("/file/{id_file}", response_class=PlainTextResponse)
async def delete_file(
    id_file: str,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings),
):
    document = await delete_document(db, store, settings, parse_file_id(id_file))
    return f"File with ID {document.file_id} deleted successfully"
