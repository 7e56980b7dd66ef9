"""
Единая настройка логирования для HTTP API и фоновых вызовов резолвера.

Консоль получает короткий формат на уровне LOG_LEVEL, файл (если задан)
получает всё, начиная с DEBUG: там видна каждая ступень разрешения ссылки.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Optional

LOG_FILE = Path("logs") / "resolver.log"

# Сторонние логгеры, которые на INFO пишут каждую строку запроса
_NOISY_LOGGERS = ("httpx", "httpcore")


class SuppressHealthcheckFilter(logging.Filter):
    """
    Фильтр удаляет access-записи healthcheck запросов (GET /health),
    которые мониторинг шлёт каждые несколько секунд.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return "/health" not in record.getMessage()


def setup_logging(level: str = "INFO", log_file: Optional[Path] = LOG_FILE) -> None:
    """
    Настраивает корневой логгер и логгеры uvicorn.

    Args:
        level: Уровень консольного вывода
        log_file: Файл с ротацией; None - только консоль
    """
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "short",
        },
    }
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "standard",
            "filename": str(log_file),
            "maxBytes": 5 * 1024 * 1024,  # 5 МБ на файл
            "backupCount": 5,
            "encoding": "utf-8",
            "delay": True,
        }
    names = list(handlers)

    loggers: Dict[str, Dict[str, Any]] = {
        "uvicorn": {"handlers": names, "level": level, "propagate": False},
        "uvicorn.access": {
            "handlers": names,
            "level": level,
            "filters": ["suppress_healthcheck"],
            "propagate": False,
        },
    }
    for name in _NOISY_LOGGERS:
        loggers[name] = {"level": "WARNING"}

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "suppress_healthcheck": {"()": SuppressHealthcheckFilter},
        },
        "formatters": {
            "standard": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "short": {"format": "%(levelname)s: %(message)s"},
        },
        "handlers": handlers,
        "root": {"handlers": names, "level": level},
        "loggers": loggers,
    })
