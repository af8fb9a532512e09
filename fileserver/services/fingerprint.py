"""Отпечаток содержимого и идентификатор файла."""
import hashlib
import uuid
from pathlib import Path

CHUNK_SIZE = 64 * 1024


def content_fingerprint(path: Path) -> str:
    """SHA-1 (hex) от байтов файла: одинаковое содержимое даёт одинаковый отпечаток."""
    digest = hashlib.sha1()
    with path.open("rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def random_fingerprint() -> str:
    return str(uuid.uuid4())


def compute_fingerprint(path: Path, mode: str = "content") -> str:
    if mode == "content":
        return content_fingerprint(path)
    if mode == "random":
        return random_fingerprint()
    raise ValueError(f"unknown fingerprint mode: {mode}")


def new_file_id() -> uuid.UUID:
    return uuid.uuid4()
