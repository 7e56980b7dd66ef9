"""
test_server.py - тесты HTTP API резолвера

Проверяет (через FastAPI TestClient и сервис на фетчере-заглушке):
- /health
- /resolve и /resolve/{platform}
- Ответ 400 на пустой URL, 404 на неизвестную платформу, 500 на сбой сервиса
"""

import pytest
from fastapi.testclient import TestClient

from src import __version__
from src.api.http_fetcher import FetchResult
from src.core.resolver import LinkResolver
from src.services.link_resolution import LinkResolutionService
from src.webapp.server import create_app

AMAZON_PRODUCT = "https://www.amazon.com.br/Produto/dp/B08N5WRWNW/ref=sr_1_1"


@pytest.fixture()
def client(make_fetcher, test_settings):
    fetcher = make_fetcher({"https://amzn.to/abc123": FetchResult(final_url=AMAZON_PRODUCT, status_code=301)})
    service = LinkResolutionService(LinkResolver(fetcher=fetcher, config=test_settings))
    with TestClient(create_app(service=service)) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "version": __version__,
        "services": ["amazon", "shopee", "mercadolivre", "magalu"],
    }


def test_resolve_short_link(client):
    response = client.post("/resolve", json={"url": "https://amzn.to/abc123"})

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["platform"] == "amazon"
    assert data["asin"] == "B08N5WRWNW"
    assert data["product_id"] == "B08N5WRWNW"
    assert data["was_short_link"] is True
    assert data["hop_count"] == 1
    assert data["url_original"] == "https://amzn.to/abc123"
    assert data["url_resolved"] == AMAZON_PRODUCT
    assert data["error"] is None


def test_resolve_shopee_canonical(client):
    response = client.post("/resolve/shopee", json={"url": "https://shopee.com.br/product/123456/987654321"})

    data = response.json()
    assert response.status_code == 200
    assert data["ok"] is True
    assert data["shopId"] == "123456"
    assert data["itemId"] == "987654321"
    assert data["hop_count"] == 0
    assert data["was_short_link"] is False


def test_resolve_unknown_platform_is_not_an_http_error(client):
    response = client.post("/resolve", json={"url": "https://example.com/x"})

    assert response.status_code == 200
    assert response.json()["error"] == "unsupported_platform"
    assert response.json()["ok"] is False


@pytest.mark.parametrize("payload", [{}, {"url": ""}, {"url": "   "}, {"url": None}])
def test_missing_url_is_400(client, payload):
    response = client.post("/resolve", json=payload)

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "url_required", "platform": None}


def test_platform_path_is_case_insensitive(client):
    response = client.post("/resolve/MercadoLivre", json={"url": "https://www.mercadolivre.com.br/p/MLB1234567890"})

    assert response.status_code == 200
    assert response.json()["mlb_id"] == "MLB1234567890"


def test_unknown_platform_path_is_404(client):
    response = client.post("/resolve/aliexpress", json={"url": "https://amzn.to/abc123"})

    assert response.status_code == 404


def test_unexpected_service_failure_is_500():
    class BrokenService:
        async def resolve_and_identify(self, url, platform=None, cancel_event=None):
            raise RuntimeError("boom")

    with TestClient(create_app(service=BrokenService())) as test_client:
        response = test_client.post("/resolve", json={"url": "https://amzn.to/abc123"})

    assert response.status_code == 500
    assert response.json() == {
        "ok": False,
        "error": "boom",
        "url_original": "https://amzn.to/abc123",
        "url_resolved": None,
    }
