"""Зависимости FastAPI: настройки и хранилище объектов из app.state (подменяются в тестах)."""
from fastapi import Request

from fileserver.config import Settings
from fileserver.services.minio_service import ObjectStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store
