"""Запуск uvicorn: python run.py (профиль через APP_PROFILE=dev|test|prod)."""
import logging
import sys

import uvicorn

from fileserver.config import settings

if __name__ == "__main__":
    try:
        uvicorn.run(
            "fileserver.main:app",
            host=settings.app_host,
            port=settings.app_port,
            reload=False,
        )
    except Exception:
        logging.getLogger("fileserver").exception("Catch fatal error")
        sys.exit(1)
