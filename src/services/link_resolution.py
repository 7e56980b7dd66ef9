"""
Сервис разрешения ссылок: короткая ссылка → канонический URL → ID товара.

Единая точка входа для HTTP API. Ожидаемые неудачи (нет совпадения,
исчерпан лимит шагов, сетевой сбой) кодируются в полях ok/error результата.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from src.core.errors import ErrorKind, InputError
from src.core.models import Platform, ResolutionResult, ResolveOutcome, StopReason
from src.core.resolver import LinkResolver
from src.utils.url_parser import URLParser

logger = logging.getLogger(__name__)


class LinkResolutionService:
    """
    Оркестратор: классификация → разрешение → повторная классификация → извлечение ID.
    """

    def __init__(self, resolver: Optional[LinkResolver] = None):
        self.resolver = resolver or LinkResolver()

    async def resolve(self, url: str, cancel_event: Optional[asyncio.Event] = None) -> ResolveOutcome:
        """Только разворачивает ссылку: (final_url, hop_count) без извлечения ID."""
        return await self.resolver.resolve(self._validate(url), cancel_event=cancel_event)

    async def resolve_and_identify(
        self,
        url: str,
        platform: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ResolutionResult:
        """
        Разворачивает ссылку (если нужно) и извлекает ID товара.

        Args:
            url: Ссылка от пользователя
            platform: Принудительная платформа (для платформенных эндпоинтов);
                по умолчанию определяется по конечному URL
            cancel_event: Токен отмены, передаётся резолверу

        Returns:
            ResolutionResult: итог с флагом ok и кодом ошибки

        Raises:
            InputError: пустой URL (до запуска резолвера)
        """
        url = self._validate(url)

        was_short_link = URLParser.is_unresolved(url)
        if was_short_link:
            outcome = await self.resolver.resolve(url, cancel_event=cancel_event)
        else:
            # Уже канонический URL: без сетевых запросов
            outcome = ResolveOutcome(final_url=url, hop_count=0, stop_reason=StopReason.SETTLED)

        final_url = outcome.final_url
        # Короткая ссылка могла скрывать настоящую платформу, определяем заново
        detected = URLParser.detect_platform(final_url)
        target = platform or detected

        if target == Platform.UNKNOWN:
            return self._build(url, outcome, Platform.UNKNOWN, was_short_link, None,
                               ErrorKind.UNSUPPORTED_PLATFORM)

        identifier = URLParser.extract_identifier(target, final_url)
        if identifier is None:
            if outcome.stop_reason == StopReason.NETWORK_ERROR:
                error = ErrorKind.NETWORK_ERROR
            elif URLParser.is_unresolved(final_url):
                error = ErrorKind.UNRESOLVED
            else:
                error = ErrorKind.EXTRACTION_MISS
            return self._build(url, outcome, target, was_short_link, None, error)

        return self._build(url, outcome, target, was_short_link, identifier, None)

    @staticmethod
    def _validate(url: Optional[str]) -> str:
        if not isinstance(url, str) or not url.strip():
            raise InputError("URL is required")
        return url.strip()

    @staticmethod
    def _build(original_url, outcome, platform, was_short_link, identifier, error) -> ResolutionResult:
        result = ResolutionResult(
            original_url=original_url,
            final_url=outcome.final_url,
            platform=platform,
            was_short_link=was_short_link,
            hop_count=outcome.hop_count,
            identifier=identifier,
            ok=identifier is not None,
            error=error,
            stop_reason=outcome.stop_reason,
        )
        if error:
            logger.info("No product id for %s: %s (final=%s)", original_url, error, outcome.final_url)
        return result
