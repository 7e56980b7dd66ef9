"""
Поиск URL назначения в HTML промежуточной страницы.

JavaScript не исполняется: редиректы восстанавливаются только по тексту
документа. Все стратегии эвристические, на неожиданной разметке функция
возвращает None и никогда не падает.

Порядок стратегий:
1. <meta http-equiv="refresh" content="0;url=...">
2. навигация во встроенном скрипте (window.location = "...", location.replace("..."))
3. <link rel="canonical"> - только ссылка на карточку товара платформы (домен + маркер пути)
4. <meta property="og:url"> - с тем же фильтром
5. любой абсолютный URL карточки товара платформы в тексте
"""

from __future__ import annotations

import html as html_lib
import logging
import re
from typing import Iterable, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from src.core.models import Platform
from src.utils.platforms import PLATFORM_REGISTRY, PlatformRules, get_rules

logger = logging.getLogger(__name__)

_META_REFRESH_URL_RE = re.compile(r"url\s*=\s*['\"]?\s*([^'\"\s>]+)", re.IGNORECASE)

# Навигация из скрипта: требуется явная схема, относительные пути игнорируются
_SCRIPT_NAVIGATION_RE = re.compile(
    r"""(?:window\.)?location(?:\.href\s*=\s*|\s*=\s*|\.replace\s*\(\s*)["'](https?:(?:\\?/){2}[^"']+)["']""",
    re.IGNORECASE,
)

_RAW_URL_RE = re.compile(r"https?://[^\s\"'<>\\]+", re.IGNORECASE)
_ABSOLUTE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


def _clean(candidate: str) -> str:
    candidate = candidate.replace("\\/", "/").replace("\\u0026", "&")
    return html_lib.unescape(candidate).strip().rstrip(".,;)")


def _absolute(candidate: Optional[str], base_url: Optional[str]) -> Optional[str]:
    if not candidate:
        return None
    candidate = _clean(candidate)
    if _ABSOLUTE_URL_RE.match(candidate):
        return candidate
    if base_url and candidate.startswith(("/", "./", "../")):
        return urljoin(base_url, candidate)
    return None


def _candidate_rules(platform_hint: Optional[str]) -> Tuple[PlatformRules, ...]:
    rules = get_rules(platform_hint or Platform.UNKNOWN)
    if rules is not None:
        return (rules,)
    # Платформа неизвестна: принимаем маркер любой поддерживаемой площадки
    return PLATFORM_REGISTRY


def _is_product_url(url: str, candidates: Iterable[PlatformRules]) -> bool:
    return any(rules.is_product_url(url) for rules in candidates)


def _parse(document: str) -> Optional[BeautifulSoup]:
    try:
        return BeautifulSoup(document, "html.parser")
    except Exception as e:  # html.parser не гарантирует разбор произвольного мусора
        logger.debug("HTML parse failed, falling back to text scan: %s", e)
        return None


def _meta_refresh(soup: BeautifulSoup, base_url: Optional[str]) -> Optional[str]:
    for meta in soup.find_all("meta"):
        if (meta.get("http-equiv") or "").strip().lower() != "refresh":
            continue
        match = _META_REFRESH_URL_RE.search(meta.get("content") or "")
        if match:
            url = _absolute(match.group(1), base_url)
            if url:
                return url
    return None


def _canonical(soup: BeautifulSoup, base_url: Optional[str]) -> Optional[str]:
    for link in soup.find_all("link"):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if "canonical" in (value.lower() for value in rel):
            return _absolute(link.get("href"), base_url)
    return None


def _og_url(soup: BeautifulSoup, base_url: Optional[str]) -> Optional[str]:
    meta = soup.find("meta", attrs={"property": "og:url"}) or soup.find("meta", attrs={"name": "og:url"})
    if meta is None:
        return None
    return _absolute(meta.get("content"), base_url)


def scan_for_redirect(
    document: str,
    platform_hint: Optional[str] = None,
    base_url: Optional[str] = None,
) -> Optional[str]:
    """
    Ищет URL назначения в HTML.

    Args:
        document: Тело HTML-ответа
        platform_hint: Ожидаемая платформа (для фильтра canonical/og:url/сырых ссылок)
        base_url: Адрес страницы, для относительных meta refresh и canonical

    Returns:
        Optional[str]: Найденный абсолютный URL или None
    """
    if not document or not isinstance(document, str):
        return None

    candidates = _candidate_rules(platform_hint)
    soup = _parse(document)

    if soup is not None:
        url = _meta_refresh(soup, base_url)
        if url:
            logger.debug("HTML redirect via meta refresh: %s", url)
            return url

    match = _SCRIPT_NAVIGATION_RE.search(document)
    if match:
        url = _clean(match.group(1))
        logger.debug("HTML redirect via inline script: %s", url)
        return url

    if soup is not None:
        for strategy in (_canonical, _og_url):
            url = strategy(soup, base_url)
            if url and _is_product_url(url, candidates):
                logger.debug("HTML redirect via %s: %s", strategy.__name__.lstrip("_"), url)
                return url

    text = document.replace("\\/", "/")
    for raw in _RAW_URL_RE.finditer(text):
        url = _clean(raw.group(0))
        if _is_product_url(url, candidates):
            logger.debug("HTML redirect via embedded product link: %s", url)
            return url

    return None
