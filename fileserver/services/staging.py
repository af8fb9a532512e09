"""Локальный staging загрузок и выдач в общем каталоге загрузок.

Имена вида <unix-секунды>_<случайная часть>_<исходное имя>: уникальны для каждого
запроса, даже если одинаковые имена пришли в одну и ту же секунду."""
import logging
import os
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from fastapi import UploadFile

from fileserver.errors import StagingError, UploadTooLarge

_log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def _safe_name(original_name: str | None) -> str:
    # только имя файла, без каталогов из заголовка multipart
    name = Path(original_name or "").name.strip()
    return name or "file"


def new_staging_path(upload_dir: Path, original_name: str | None) -> Path:
    """Создаёт пустой файл с уникальным именем в upload_dir и возвращает путь."""
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(
            prefix=f"{int(time.time())}_",
            suffix=f"_{_safe_name(original_name)}",
            dir=upload_dir,
        )
        os.close(fd)
    except OSError as e:
        raise StagingError(f"Error creating the staged file: {e}") from e
    return Path(name)


def discard(path: Path) -> None:
    """Удаляет временный файл. Отсутствие файла ошибкой не считается."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        _log.warning("failed to remove staged file %s: %s", path, e)
        return
    _log.debug("staged file removed: %s", path)


@contextmanager
def staged_file(upload_dir: Path, original_name: str | None) -> Iterator[Path]:
    """Временный файл, который удаляется на выходе из блока при любом исходе."""
    path = new_staging_path(upload_dir, original_name)
    try:
        yield path
    finally:
        discard(path)


async def write_upload(upload: UploadFile, path: Path, max_size: int) -> int:
    """Копирует загружаемый поток в path и возвращает число записанных байт.

    Точная проверка лимита размера: middleware отсекает только заведомо большие тела
    по Content-Length."""
    if upload.size is not None and upload.size > max_size:
        raise UploadTooLarge(max_size)
    size = 0
    try:
        with path.open("wb") as out:
            while chunk := await upload.read(CHUNK_SIZE):
                size += len(chunk)
                if size > max_size:
                    raise UploadTooLarge(max_size)
                out.write(chunk)
    except OSError as e:
        raise StagingError(f"Error saving the file: {e}") from e
    return size


def write_chunks(chunks: Iterator[bytes], path: Path) -> int:
    size = 0
    try:
        with path.open("wb") as out:
            for chunk in chunks:
                size += len(chunk)
                out.write(chunk)
    except OSError as e:
        raise StagingError(f"Error saving object to file: {e}") from e
    return size
