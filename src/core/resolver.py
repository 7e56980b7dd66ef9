"""
==============================================================================
LINK RESOLVER - Разворачивание партнёрских ссылок
==============================================================================
Пошаговый резолвер: от короткой/трекинговой ссылки к каноническому URL
товара. На каждом шаге выбирается одна стратегия:

1. параметр-обёртка ``go=`` - без сетевого запроса;
2. GET со следованием HTTP-редиректам (при сетевой ошибке - один HEAD);
3. поиск редиректа в HTML (meta refresh, скрипт, canonical, og:url).

Число шагов жёстко ограничено, повторный URL в цепочке останавливает цикл.
Обычные сбои (сеть, таймаут, нечего разворачивать) не выбрасываются:
возвращается лучший достигнутый URL и причина остановки.

Version: 1.0.0
License: MIT
==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Set

from src.api.http_fetcher import FetchResult, HttpFetcher
from src.core.config import Settings, settings as default_settings
from src.core.errors import FetchError, InputError
from src.core.models import Platform, ResolveOutcome, StopReason
from src.utils.html_redirect import scan_for_redirect
from src.utils.url_parser import URLParser

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Исходящий HTTP: должен сообщать конечный адрес после редиректов."""

    async def fetch(self, url: str, method: str = "GET") -> FetchResult: ...


class _Interrupted(Exception):
    """Внутренний сигнал: отмена или истёк общий дедлайн запроса."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass
class _HopState:
    current_url: str
    hops: int = 0
    visited: Set[str] = field(default_factory=set)


class LinkResolver:
    """
    Резолвер ссылок, общий для всех платформ.

    Платформенные различия (короткие домены, промежуточные страницы,
    маркеры карточки товара, экстракторы) берутся из реестра платформ,
    поэтому экземпляр не хранит состояния между вызовами и может
    обслуживать параллельные запросы.
    """

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        config: Optional[Settings] = None,
    ):
        self.config = config or default_settings
        self.fetcher = fetcher or HttpFetcher(config=self.config)
        self.max_hops = self.config.RESOLVER_MAX_HOPS

    async def resolve(
        self,
        url: str,
        max_hops: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ResolveOutcome:
        """
        Разворачивает ссылку не более чем за max_hops шагов.

        Args:
            url: Исходная ссылка
            max_hops: Лимит шагов (по умолчанию RESOLVER_MAX_HOPS)
            cancel_event: Токен отмены; при установке текущий запрос
                прерывается и сразу возвращается лучший известный URL

        Returns:
            ResolveOutcome: конечный URL, число шагов, причина остановки

        Raises:
            InputError: пустой URL
        """
        url = (url or "").strip()
        if not url:
            raise InputError("URL is required")

        max_hops = self.max_hops if max_hops is None else max_hops
        deadline = asyncio.get_running_loop().time() + self.config.resolver_deadline
        state = _HopState(current_url=url, visited={url})
        start_platform = URLParser.detect_platform(url)

        logger.info("Resolving %s (platform=%s, max_hops=%d)", url, start_platform, max_hops)

        reason = None
        try:
            while state.hops < max_hops:
                if cancel_event is not None and cancel_event.is_set():
                    raise _Interrupted(StopReason.CANCELLED)
                reason = await self._step(state, start_platform, deadline, cancel_event)
                if reason is not None:
                    break
        except _Interrupted as e:
            reason = e.reason
            logger.warning("Resolution of %s interrupted (%s) at hop %d", url, reason, state.hops)

        if reason is None:
            # Лимит шагов исчерпан; последний шаг мог как раз дойти до карточки товара
            reason = StopReason.RESOLVED if self._is_resolved(state.current_url) else StopReason.EXHAUSTED

        logger.info("Resolved %s -> %s in %d hop(s): %s", url, state.current_url, state.hops, reason)
        return ResolveOutcome(final_url=state.current_url, hop_count=state.hops, stop_reason=reason)

    # ------------------------------------------------------------------ шаги

    async def _step(
        self,
        state: _HopState,
        start_platform: str,
        deadline: float,
        cancel_event: Optional[asyncio.Event],
    ) -> Optional[str]:
        """Один шаг цикла. Возвращает причину остановки или None, чтобы продолжить."""
        current = state.current_url

        go_url = URLParser.extract_go_param(current)
        if go_url:
            logger.debug("Hop %d: unwrapped go= parameter -> %s", state.hops + 1, go_url)
            return self._advance(state, go_url)

        # Ранний выход: уже на карточке товара, лишний запрос не нужен
        if state.hops > 0 and self._is_resolved(current):
            return StopReason.RESOLVED

        try:
            result = await self._fetch(current, "GET", deadline, cancel_event)
        except FetchError as e:
            logger.info("GET failed for %s: %s; trying HEAD", current, e)
            return await self._head_fallback(state, deadline, cancel_event)

        landed = result.final_url or current
        changed = landed != current

        if changed and self._is_resolved(landed):
            logger.debug("Hop %d: HTTP redirect -> %s", state.hops + 1, landed)
            return self._advance(state, landed) or StopReason.RESOLVED

        go_url = URLParser.extract_go_param(landed)
        if go_url:
            logger.debug("Hop %d: redirect landed on go= wrapper -> %s", state.hops + 1, go_url)
            state.visited.add(landed)
            return self._advance(state, go_url)

        if URLParser.is_unresolved(landed) and result.body:
            hint = URLParser.detect_platform(landed)
            if hint == Platform.UNKNOWN:
                hint = start_platform
            scanned = scan_for_redirect(result.body, hint, base_url=landed)
            if scanned and scanned not in (landed, current):
                logger.debug("Hop %d: HTML redirect -> %s", state.hops + 1, scanned)
                state.visited.add(landed)
                return self._advance(state, scanned)

        if changed:
            logger.debug("Hop %d: HTTP redirect -> %s", state.hops + 1, landed)
            stop = self._advance(state, landed)
            if stop:
                return stop
            return None if URLParser.is_unresolved(landed) else StopReason.SETTLED

        logger.debug("Hop %d: nothing to follow at %s", state.hops + 1, current)
        return StopReason.STALLED

    async def _head_fallback(
        self,
        state: _HopState,
        deadline: float,
        cancel_event: Optional[asyncio.Event],
    ) -> Optional[str]:
        current = state.current_url
        try:
            result = await self._fetch(current, "HEAD", deadline, cancel_event)
        except FetchError as e:
            logger.warning("HEAD fallback failed for %s: %s", current, e)
            return StopReason.NETWORK_ERROR

        if result.final_url and result.final_url != current:
            logger.debug("Hop %d: HEAD redirect -> %s", state.hops + 1, result.final_url)
            return self._advance(state, result.final_url)
        return StopReason.NETWORK_ERROR

    # ------------------------------------------------------------ helpers

    @staticmethod
    def _advance(state: _HopState, next_url: str) -> Optional[str]:
        if next_url in state.visited:
            logger.warning("Redirect cycle detected at %s", next_url)
            return StopReason.CYCLE
        state.visited.add(next_url)
        state.current_url = next_url
        state.hops += 1
        return None

    @staticmethod
    def _is_resolved(url: str) -> bool:
        if URLParser.is_unresolved(url):
            return False
        platform = URLParser.detect_platform(url)
        return URLParser.extract_identifier(platform, url) is not None

    async def _fetch(
        self,
        url: str,
        method: str,
        deadline: float,
        cancel_event: Optional[asyncio.Event],
    ) -> FetchResult:
        """
        Запрос через фетчер с учётом общего дедлайна и токена отмены.

        Raises:
            FetchError: ошибка сети (её обрабатывает вызывающий шаг)
            _Interrupted: отмена или истёк дедлайн
        """
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise _Interrupted(StopReason.DEADLINE)

        fetch_task = asyncio.ensure_future(self.fetcher.fetch(url, method))
        waiters = {fetch_task}
        cancel_task = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(waiters, timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pending = [task for task in waiters if not task.done()]
            for task in pending:
                task.cancel()
            # Дожидаемся отмены, чтобы транспорт закрыл запрос до возврата из resolve
            await asyncio.gather(*pending, return_exceptions=True)

        if fetch_task in done:
            return fetch_task.result()
        if cancel_task is not None and cancel_task in done:
            raise _Interrupted(StopReason.CANCELLED)
        raise _Interrupted(StopReason.DEADLINE)
