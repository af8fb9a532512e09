"""Модели SQLAlchemy: documents.

Жизненный цикл документа: Active | Deleted(at). Мягко удалённые строки остаются в таблице
со своими file_id и отпечатком. Уникальность действует на все строки, поэтому отпечаток
удалённого документа повторно вставить нельзя."""
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from fileserver.errors import FileServerError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


@dataclass(frozen=True)
class Active:
    pass


@dataclass(frozen=True)
class Deleted:
    at: datetime


DocumentState = Active | Deleted


class DocumentAlreadyDeleted(FileServerError):
    status_code = 409


class Document(Base):
    """Загруженный файл: имя, ключ объекта в MinIO (file_id) и отпечаток содержимого."""
    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    file_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, default=uuid.uuid4)
    fingerprint: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("file_id", name="uq_documents_file_id"),
        UniqueConstraint("fingerprint", name="uq_documents_fingerprint"),
        Index("ix_documents_deleted_at", "deleted_at"),
    )

    @property
    def state(self) -> DocumentState:
        if self.deleted_at is None:
            return Active()
        return Deleted(at=self.deleted_at)

    @property
    def is_active(self) -> bool:
        return isinstance(self.state, Active)

    def soft_delete(self, at: datetime | None = None) -> Deleted:
        """Active -> Deleted(at). Удалённый документ повторно не удаляется."""
        match self.state:
            case Deleted(at=deleted_at):
                raise DocumentAlreadyDeleted(f"document {self.file_id} was deleted at {deleted_at}")
            case Active():
                self.deleted_at = at or utcnow()
        return Deleted(at=self.deleted_at)

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, name='{self.name}', file_id={self.file_id})>"
