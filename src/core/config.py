"""
==============================================================================
AFFILIATE LINK RESOLVER - CONFIGURATION
==============================================================================
Управление конфигурацией через переменные окружения.
Использует Pydantic Settings для валидации и загрузки из .env файла.

Version: 1.0.0
License: MIT
==============================================================================
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """
    Класс для управления настройками приложения.

    Автоматически загружает переменные окружения из файла .env
    с валидацией типов и значений по умолчанию.

    Attributes:
        RESOLVER_MAX_HOPS (int): Максимум шагов цикла разрешения ссылки
        RESOLVER_TIMEOUT (float): Таймаут одного HTTP-запроса в секундах
        RESOLVER_MAX_REDIRECTS (int): Лимит HTTP-редиректов внутри одного запроса
        RESOLVER_DEADLINE (float): Общий дедлайн на запрос (0 = шаги × таймаут)
        RESOLVER_USER_AGENT (str): User-Agent браузера для исходящих запросов
        RESOLVER_ACCEPT_LANGUAGE (str): Заголовок Accept-Language
        RESOLVER_DOMAIN_RATE_LIMIT (float): Запросов в секунду на один домен (0 = без ограничений)
        DISABLE_SSL_VERIFY (bool): Отключить проверку SSL (не рекомендуется)
        DEBUG_MODE (bool): Режим отладки с подробными логами
        LOG_LEVEL (str): Уровень логирования консоли
        API_HOST (str): Хост HTTP API
        API_PORT (int): Порт HTTP API
    """
    RESOLVER_MAX_HOPS: int = 5  # Жёсткий потолок шагов (защита от бесконечных цепочек)
    RESOLVER_TIMEOUT: float = 10.0
    RESOLVER_MAX_REDIRECTS: int = 10
    RESOLVER_DEADLINE: float = 0.0
    RESOLVER_USER_AGENT: str = DEFAULT_USER_AGENT
    RESOLVER_ACCEPT_LANGUAGE: str = "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7"
    RESOLVER_DOMAIN_RATE_LIMIT: float = 0.0
    DISABLE_SSL_VERIFY: bool = False  # Отключить проверку SSL (только если есть проблемы с сертификатами)
    DEBUG_MODE: bool = False
    LOG_LEVEL: str = "INFO"

    # HTTP API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra='ignore'  # Игнорировать лишние переменные в .env
    )

    @property
    def resolver_deadline(self) -> float:
        """Общий дедлайн на одно разрешение ссылки (худший случай: шаги × таймаут)."""
        if self.RESOLVER_DEADLINE > 0:
            return self.RESOLVER_DEADLINE
        return self.RESOLVER_MAX_HOPS * self.RESOLVER_TIMEOUT


settings = Settings()
