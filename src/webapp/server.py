"""
HTTP API резолвера партнёрских ссылок (FastAPI).

Эндпоинты:
    GET  /health
    POST /resolve                 - платформа определяется по конечному URL
    POST /resolve/{platform}      - amazon | shopee | mercadolivre | magalu
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from src import __version__
from src.api.http_fetcher import HttpFetcher
from src.core.config import settings
from src.core.errors import InputError
from src.core.models import Platform
from src.core.resolver import LinkResolver
from src.services.link_resolution import LinkResolutionService
from src.webapp.schemas import HealthResponse, ResolveRequest, ResolveResponse

logger = logging.getLogger(__name__)


def _url_required() -> JSONResponse:
    return JSONResponse(status_code=400, content={"ok": False, "error": "url_required", "platform": None})


def create_app(service: Optional[LinkResolutionService] = None) -> FastAPI:
    """
    Создаёт FastAPI приложение.

    Args:
        service: Готовый сервис (для тестов). По умолчанию создаётся сервис
            с общим HttpFetcher, который закрывается при остановке приложения.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        fetcher = None
        if service is None:
            fetcher = HttpFetcher(config=settings)
            app.state.service = LinkResolutionService(LinkResolver(fetcher=fetcher, config=settings))
        else:
            app.state.service = service
        try:
            yield
        finally:
            if fetcher is not None:
                await fetcher.aclose()

    app = FastAPI(
        title="Affiliate Link Resolver",
        description="Разворачивание партнёрских ссылок и извлечение ID товаров",
        version=__version__,
        lifespan=lifespan,
    )

    async def _resolve(request: Request, payload: ResolveRequest, platform: Optional[str] = None):
        resolution_service: LinkResolutionService = request.app.state.service
        try:
            result = await resolution_service.resolve_and_identify(payload.url, platform=platform)
        except InputError:
            return _url_required()
        except Exception as e:
            logger.error("Resolve error for %s: %s", payload.url, e, exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"ok": False, "error": str(e), "url_original": payload.url, "url_resolved": None},
            )
        return ResolveResponse(**result.to_dict())

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Проверка работоспособности API."""
        return HealthResponse(version=__version__, services=list(Platform.SUPPORTED))

    @app.post("/resolve", response_model=ResolveResponse)
    async def resolve(request: Request, payload: ResolveRequest):
        """Разворачивает ссылку любой поддерживаемой платформы."""
        return await _resolve(request, payload)

    @app.post("/resolve/{platform}", response_model=ResolveResponse)
    async def resolve_for_platform(platform: str, request: Request, payload: ResolveRequest):
        """Разворачивает ссылку и извлекает ID экстрактором указанной платформы."""
        platform = platform.lower()
        if platform not in Platform.SUPPORTED:
            raise HTTPException(status_code=404, detail=f"Unsupported platform: {platform}")
        return await _resolve(request, payload, platform=platform)

    return app


app = create_app()
