# tests/conftest.py
from typing import Dict, List, Tuple

import pytest

from src.api.http_fetcher import FetchResult
from src.core.config import Settings


class FakeFetcher:
    """
    Фетчер по таблице маршрутов: (method, url) или url -> FetchResult | Exception | callable.

    Неизвестный URL считается конечной страницей без редиректа.
    """

    def __init__(self, routes: Dict[object, object] = None):
        self.routes = routes or {}
        self.calls: List[Tuple[str, str]] = []

    async def fetch(self, url: str, method: str = "GET") -> FetchResult:
        self.calls.append((method, url))
        route = self.routes.get((method, url), self.routes.get(url))
        if route is None:
            return FetchResult(final_url=url, status_code=200, body="")
        if callable(route):
            route = route(url, method)
        if isinstance(route, Exception):
            raise route
        return route


@pytest.fixture()
def make_fetcher():
    return FakeFetcher


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        RESOLVER_MAX_HOPS=5,
        RESOLVER_TIMEOUT=2.0,
        RESOLVER_DEADLINE=0.0,
        RESOLVER_DOMAIN_RATE_LIMIT=0.0,
        DISABLE_SSL_VERIFY=False,
    )
