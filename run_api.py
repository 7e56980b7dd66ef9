"""
Запуск HTTP API резолвера ссылок.

Использование:
    python run_api.py
"""

import uvicorn
from src.core.config import settings
from src.core.logging_config import setup_logging

if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "src.webapp.server:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG_MODE,
        log_config=None,
        log_level=settings.LOG_LEVEL.lower(),
    )
