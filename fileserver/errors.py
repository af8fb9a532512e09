"""Ошибки сервиса. Каждая несёт HTTP-статус, в который её превращает обработчик в main."""


class FileServerError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(FileServerError):
    status_code = 400


class UploadTooLarge(InvalidRequest):
    def __init__(self, limit: int):
        super().__init__(f"File exceeds the maximum upload size of {limit} bytes")
        self.limit = limit


class DocumentNotFound(FileServerError):
    status_code = 404


class DocumentAlreadyExists(FileServerError):
    status_code = 409

    def __init__(self, fingerprint: str):
        super().__init__("Document already exists.")
        self.fingerprint = fingerprint


class StagingError(FileServerError):
    """Ошибка чтения или записи в локальном каталоге загрузок."""


class StorageError(FileServerError):
    """Ошибка обращения к MinIO."""


class MetadataError(FileServerError):
    """Ошибка чтения или записи в БД, в том числе нарушение уникальности."""
