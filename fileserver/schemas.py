"""Pydantic-схемы API."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentResponse(BaseModel):
    """Запись документа в JSON: id, name, fileId, fingerprint, createdAt, updatedAt, deletedAt."""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    file_id: UUID
    fingerprint: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
