"""Приложение FastAPI: загрузка, выдача, список файлов и мягкое удаление."""
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.routing import APIRoute

from fileserver.config import Settings, get_profile, settings as default_settings
from fileserver.database import create_engine, create_session_maker, init_db
from fileserver.errors import FileServerError
from fileserver.middleware import MULTIPART_OVERHEAD, RequestSizeLimitMiddleware
from fileserver.routers import files
from fileserver.services.minio_service import MinioObjectStore

_log = logging.getLogger("fileserver")


def configure_logging(level: str) -> None:
    _log.setLevel(level.upper())
    if not _log.handlers:
        _h = logging.StreamHandler(sys.stderr)
        _h.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
        _log.addHandler(_h)
    _log.propagate = False


def _log_routes(app: FastAPI) -> None:
    _log.info("Register all routes")
    for route in app.routes:
        if isinstance(route, APIRoute):
            _log.info("Register route %s %s for %s", ",".join(sorted(route.methods)), route.path, route.name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    await init_db(engine)
    app.state.session_maker = create_session_maker(engine)
    _log.info("Database initialized")
    app.state.object_store = MinioObjectStore.from_settings(settings)
    _log.info("MinIO initialized: %s", settings.minio_endpoint)
    _log_routes(app)
    _log.info("Start server on %s:%s", settings.app_host, settings.app_port)
    try:
        yield
    finally:
        await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)
    _log.info("Application starting with profile: %s", get_profile())

    app = FastAPI(
        title="Fileserver",
        description="Загрузка документов в MinIO, метаданные в БД с мягким удалением.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_upload_size + MULTIPART_OVERHEAD)

    @app.exception_handler(FileServerError)
    async def file_server_error_handler(request: Request, exc: FileServerError):
        if exc.status_code >= 500:
            _log.error("%s %s failed (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
        else:
            _log.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        _log.warning("%s %s malformed request: %s", request.method, request.url.path, exc.errors())
        return PlainTextResponse("Error parsing the request", status_code=400)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        _log.exception("%s on %s (500): %s", type(exc).__name__, request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc), "type": type(exc).__name__},
        )

    app.include_router(files.router)

    @app.get("/", response_class=PlainTextResponse)
    async def hello():
        return "Welcome to my homepage"

    return app


app = create_app()
