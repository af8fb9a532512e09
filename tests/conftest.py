"""Pytest fixtures: app, client, db session, in-memory object store."""
from collections.abc import AsyncGenerator
from contextlib import contextmanager
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fileserver.config import Settings
from fileserver.database import get_db
from fileserver.dependencies import get_object_store, get_settings
from fileserver.errors import DocumentNotFound, StorageError
from fileserver.main import app
from fileserver.models import Base

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeObjectStore:
    """Object store in memory: {bucket: {key: bytes}}."""

    def __init__(self):
        self.buckets: dict[str, dict[str, bytes]] = {}
        self.fail_put = False
        self.fail_get = False
        self.fail_delete = False
        # обрывает поток после первого чанка
        self.fail_stream = False

    def ensure_bucket(self, bucket: str) -> None:
        self.buckets.setdefault(bucket, {})

    def put(self, bucket: str, key: str, path: Path) -> None:
        if self.fail_put:
            raise StorageError("Error during upload file to MinIO: connection refused")
        self.ensure_bucket(bucket)
        self.buckets[bucket][key] = Path(path).read_bytes()

    @contextmanager
    def get(self, bucket: str, key: str):
        if self.fail_get:
            raise StorageError("Error getting object from MinIO: InternalError")
        try:
            data = self.buckets[bucket][key]
        except KeyError:
            raise DocumentNotFound(f"object {key} not found in bucket {bucket}") from None
        chunks = [data[i:i + 4] for i in range(0, len(data), 4)]
        yield self._broken(chunks) if self.fail_stream else iter(chunks)

    @staticmethod
    def _broken(chunks):
        yield chunks[0]
        raise OSError("connection reset by peer")

    def delete(self, bucket: str, key: str) -> None:
        if self.fail_delete:
            raise StorageError("Error deleting object from MinIO: connection refused")
        self.buckets.get(bucket, {}).pop(key, None)

    def objects(self, bucket: str = "documents") -> dict[str, bytes]:
        return self.buckets.get(bucket, {})


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=TEST_DATABASE_URL,
        upload_dir=tmp_path / "uploads",
        max_upload_size=1024,
    )


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
async def engine():
    eng = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autocommit=False, autoflush=False
    )
    async with async_session() as session:
        yield session


@pytest.fixture
def override_get_db(db_session):
    async def _get_db():
        yield db_session
    return _get_db


@pytest.fixture
async def async_client(override_get_db, object_store, settings):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_store] = lambda: object_store
    app.dependency_overrides[get_settings] = lambda: settings
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


async def upload(client: AsyncClient, name: str, content: bytes):
    return await client.post("/file", files={"file": (name, content, "text/plain")})


async def file_id_of(client: AsyncClient, name: str) -> str:
    r = await client.get("/files", params={"searchQuery": name})
    matches = [d for d in r.json() if d["name"] == name]
    assert len(matches) == 1
    return matches[0]["fileId"]
