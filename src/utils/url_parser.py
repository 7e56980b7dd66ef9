"""
==============================================================================
URL PARSER - Определение платформы и извлечение ID товара
==============================================================================
Модуль для статического анализа URL товаров (без сетевых запросов):
определяет платформу (Amazon/Shopee/Mercado Livre/Magalu), решает, нужно ли
разворачивать ссылку, достаёт URL назначения из параметра-обёртки ``go=``
и извлекает ID товара.

Version: 1.0.0
License: MIT
==============================================================================
"""

from __future__ import annotations

import re
from typing import Optional, Tuple
from urllib.parse import unquote, urlsplit

from src.core.models import Platform, PlatformIdentifier
from src.utils.platforms import (
    PLATFORM_REGISTRY,
    TRACKING_QUERY_MARKERS,
    WRAPPER_PATH_MARKERS,
    get_rules,
)

WRAPPER_PARAM = "go"

_GO_PARAM_RE = re.compile(r"[?&]go=([^&#\s]+)", re.IGNORECASE)
_PERCENT_ESCAPE_RE = re.compile(r"%[0-9A-Fa-f]{2}")
_ABSOLUTE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)

__all__ = ["URLParser", "Platform"]


class URLParser:
    """
    Парсер URL для определения платформы и извлечения ID товара.

    Поддерживаемые платформы:
    - Amazon (amazon.*, amzn.to, a.co)
    - Shopee (shopee.*, shp.ee, shope.ee)
    - Mercado Livre (mercadolivre.*, mercadolibre.*, meli.co, meli.la)
    - Magalu (magazineluiza.com.br, magalu.com, mglu.me)
    """

    @staticmethod
    def _ensure_scheme(url: str) -> str:
        url = (url or "").strip()
        if url and not _ABSOLUTE_URL_RE.match(url) and "://" not in url:
            return f"https://{url}"
        return url

    @staticmethod
    def detect_platform(url: str) -> str:
        """
        Определяет платформу по URL.

        Сравнение без учёта регистра, по вхождению фрагментов домена,
        в порядке amazon → shopee → mercadolivre → magalu.

        Args:
            url: URL товара (в том числе короткая ссылка)

        Returns:
            str: Название платформы или Platform.UNKNOWN
        """
        if not url:
            return Platform.UNKNOWN

        url_lower = URLParser._ensure_scheme(url).lower()
        for rules in PLATFORM_REGISTRY:
            if rules.matches(url_lower):
                return rules.name
        return Platform.UNKNOWN

    @staticmethod
    def needs_resolution(url: str) -> bool:
        """
        Определяет по одному виду URL, нужно ли его разворачивать.

        Проверяются короткие домены всех платформ, трекинговые сегменты пути
        (/social/, /gz/webdevice/, /deals/ ...) и трекинговые параметры
        (forceInApp=true, go=).
        """
        if not url:
            return False

        url_lower = URLParser._ensure_scheme(url).lower()
        for rules in PLATFORM_REGISTRY:
            if any(marker in url_lower for marker in rules.short_link_markers):
                return True
        if any(marker in url_lower for marker in WRAPPER_PATH_MARKERS):
            return True
        return any(marker in url_lower for marker in TRACKING_QUERY_MARKERS)

    @staticmethod
    def needs_further_resolution(url: str, platform: Optional[str] = None) -> bool:
        """
        Проверяет, является ли URL промежуточной страницей платформы
        (universal-link Shopee, click1 Mercado Livre, redirect Magalu).

        Маркеры пути сравниваются с целыми сегментами: карточка товара
        со слагом /google-... или /redirector-... промежуточной не считается.
        """
        if not url:
            return False

        platform = platform or URLParser.detect_platform(url)
        rules = get_rules(platform)
        if rules is None:
            return False
        return rules.needs_further_resolution(URLParser._ensure_scheme(url))

    @staticmethod
    def is_unresolved(url: str) -> bool:
        """URL всё ещё требует разрешения: короткая ссылка, обёртка или промежуточная страница."""
        return URLParser.needs_resolution(url) or URLParser.needs_further_resolution(url)

    @staticmethod
    def extract_go_param(url: str) -> Optional[str]:
        """
        Достаёт URL назначения из параметра-обёртки ``go=``.

        Значение декодируется один раз; если после этого в нём остались
        %-последовательности (двойное кодирование), декодируется повторно.
        Если URL не разбирается стандартным парсером, параметр ищется регуляркой.

        Returns:
            Optional[str]: Абсолютный http(s) URL или None
        """
        if not url:
            return None

        raw = None
        try:
            query = urlsplit(URLParser._ensure_scheme(url)).query
            for pair in query.split("&"):
                key, sep, value = pair.partition("=")
                if sep and key.lower() == WRAPPER_PARAM and value:
                    raw = value
                    break
        except ValueError:
            match = _GO_PARAM_RE.search(url)
            raw = match.group(1) if match else None

        if not raw:
            return None

        decoded = unquote(raw)
        if _PERCENT_ESCAPE_RE.search(decoded):
            decoded = unquote(decoded)

        decoded = decoded.strip()
        if not _ABSOLUTE_URL_RE.match(decoded):
            return None
        return decoded

    @staticmethod
    def extract_identifier(platform: str, url: str) -> Optional[PlatformIdentifier]:
        """
        Извлекает ID товара экстрактором указанной платформы.

        Returns:
            Optional[PlatformIdentifier]: идентификатор или None
            (в том числе для Platform.UNKNOWN)
        """
        rules = get_rules(platform)
        if rules is None or not url:
            return None
        return rules.extractor(url)

    @staticmethod
    def parse_url(url: str) -> Tuple[str, Optional[PlatformIdentifier]]:
        """
        Комплексный анализ URL без сети - определяет платформу и извлекает ID.

        Returns:
            Tuple[str, Optional[PlatformIdentifier]]: (platform, identifier)
        """
        platform = URLParser.detect_platform(url)
        return platform, URLParser.extract_identifier(platform, url)
