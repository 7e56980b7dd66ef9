"""
Исходящие HTTP-запросы резолвера: GET/HEAD со следованием редиректам
и ограничением частоты запросов к одному домену.
"""

import asyncio
import logging
import ssl
import time
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import urlsplit

import certifi
import httpx

from src.core.config import Settings, settings as default_settings
from src.core.errors import FetchError

logger = logging.getLogger(__name__)

GET = "GET"
HEAD = "HEAD"


@dataclass(frozen=True)
class FetchResult:
    """
    Ответ исходящего запроса.

    final_url - адрес, на котором транспорт остановился после всех
    HTTP-редиректов (может отличаться от запрошенного).
    """
    final_url: str
    status_code: int
    body: Optional[str] = None


class DomainThrottle:
    """
    Ограничение частоты запросов к одному домену.

    Гарантирует минимальный интервал между запросами к одному хосту,
    чтобы площадки не блокировали сервис. Запросы к разным хостам
    друг друга не ждут.
    """

    def __init__(self, rate_limit: float):
        self.rate_limit = rate_limit
        self._last_request_time: Dict[str, float] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    async def wait(self, url: str) -> None:
        if self.rate_limit <= 0:
            return

        host = (urlsplit(url).hostname or "").lower()
        lock = self._locks.setdefault(host, asyncio.Lock())
        async with lock:
            # Минимальный интервал между запросами (в секундах)
            min_interval = 1.0 / self.rate_limit
            elapsed = time.monotonic() - self._last_request_time.get(host, 0.0)

            # Если прошло меньше минимального интервала - ждём
            if elapsed < min_interval:
                sleep_time = min_interval - elapsed
                logger.debug("Rate limiting %s: sleeping %.3f s", host, sleep_time)
                await asyncio.sleep(sleep_time)

            self._last_request_time[host] = time.monotonic()


class HttpFetcher:
    """
    Исходящие HTTP-запросы для резолвера ссылок.

    - следует редиректам (не больше RESOLVER_MAX_REDIRECTS), сообщает конечный адрес;
    - принимает любой статус: метаданные редиректа бывают и в 4xx/5xx ответах;
    - отправляет заголовки браузера: часть площадок блокирует клиентов по умолчанию
      или отдаёт им другой контент.

    Сетевые сбои превращаются в FetchError.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        throttle: Optional[DomainThrottle] = None,
    ):
        self.config = config or default_settings
        self.headers = {
            "User-Agent": self.config.RESOLVER_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": self.config.RESOLVER_ACCEPT_LANGUAGE,
        }
        self.throttle = throttle or DomainThrottle(self.config.RESOLVER_DOMAIN_RATE_LIMIT)
        self._client = client
        self._owns_client = client is None

    def _build_client(self) -> httpx.AsyncClient:
        # Настраиваем SSL проверку
        if self.config.DISABLE_SSL_VERIFY:
            logger.warning("SSL verification is DISABLED. This is not recommended for production!")
            verify_ssl = False
        else:
            # Используем certifi для корректной работы сертификатов
            verify_ssl = ssl.create_default_context(cafile=certifi.where())

        return httpx.AsyncClient(
            headers=self.headers,
            follow_redirects=True,
            max_redirects=self.config.RESOLVER_MAX_REDIRECTS,
            timeout=self.config.RESOLVER_TIMEOUT,
            verify=verify_ssl,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    async def fetch(self, url: str, method: str = GET) -> FetchResult:
        """
        Выполняет GET или HEAD с автоматическим следованием редиректам.

        Args:
            url: Запрашиваемый адрес
            method: "GET" или "HEAD"

        Returns:
            FetchResult: конечный адрес, статус и тело (только для GET)

        Raises:
            FetchError: таймаут, ошибка соединения, слишком много редиректов
        """
        await self.throttle.wait(url)
        logger.debug("%s %s", method, url)

        try:
            response = await self.client.request(
                method,
                url,
                headers=self.headers,
                follow_redirects=True,
                timeout=self.config.RESOLVER_TIMEOUT,
            )
        except httpx.InvalidURL as e:
            raise FetchError(url, f"invalid url: {e}") from e
        except httpx.HTTPError as e:
            raise FetchError(url, f"{type(e).__name__}: {e}") from e

        final_url = str(response.url) if response.url else url
        body = response.text if method == GET else None
        if response.history:
            logger.debug("%s %s -> %s (%d redirects, HTTP %d)",
                         method, url, final_url, len(response.history), response.status_code)
        return FetchResult(final_url=final_url, status_code=response.status_code, body=body)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
