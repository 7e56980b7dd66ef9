"""
Реестр платформ: одна таблица правил вместо отдельной копии резолвера
на каждую площадку.

Для каждой платформы хранится:
- фрагменты доменов для классификации URL;
- маркеры коротких ссылок и шаблоны промежуточных (трекинговых) страниц;
- маркеры пути карточки товара (для фильтрации canonical/og:url и сырых ссылок в HTML);
- функция-экстрактор идентификатора.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Pattern, Tuple
from urllib.parse import urlsplit

from src.core.models import Platform, PlatformIdentifier
from src.utils.extractors import (
    extract_amazon_asin,
    extract_magalu_sku,
    extract_mercadolivre_id,
    extract_shopee_ids,
)

# Конец сегмента пути: /go совпадает с /go, /go/x и /go?x, но не с /google-...
_SEGMENT_END = r"(?:[/?#]|$)"


def _patterns(*expressions: str) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(expression, re.IGNORECASE) for expression in expressions)


def _path_segment(segment: str) -> str:
    return r"^[a-z][a-z0-9+.-]*://[^/?#]+(?:/[^?#]*)?/" + re.escape(segment) + _SEGMENT_END


def _host(prefix: str) -> str:
    return r"^(?:[a-z][a-z0-9+.-]*://)?" + re.escape(prefix)


@dataclass(frozen=True)
class PlatformRules:
    name: str
    domain_fragments: Tuple[str, ...]
    short_link_markers: Tuple[str, ...]
    further_resolution_patterns: Tuple[Pattern[str], ...]
    product_markers: Tuple[str, ...]
    extractor: Callable[[str], Optional[PlatformIdentifier]]

    def matches(self, url_lower: str) -> bool:
        return any(fragment in url_lower for fragment in self.domain_fragments)

    def matches_host(self, url: str) -> bool:
        """Домен платформы в хосте URL (а не где-нибудь в пути или query)."""
        try:
            host = (urlsplit(url).hostname or "").lower()
        except ValueError:
            return False
        return bool(host) and self.matches(f"://{host}/")

    def needs_further_resolution(self, url: str) -> bool:
        return any(pattern.search(url) for pattern in self.further_resolution_patterns)

    def has_product_marker(self, url: str) -> bool:
        return any(marker in url for marker in self.product_markers)

    def is_product_url(self, url: str) -> bool:
        """Ссылка на карточку товара этой платформы: её домен и маркер пути."""
        return self.matches_host(url) and self.has_product_marker(url)


AMAZON = PlatformRules(
    name=Platform.AMAZON,
    domain_fragments=("amazon.", "amzn.to", "amzn.com", "://a.co/"),
    short_link_markers=("amzn.to", "://a.co/"),
    further_resolution_patterns=(),
    product_markers=("/dp/", "/gp/product/", "/gp/aw/d/"),
    extractor=extract_amazon_asin,
)

SHOPEE = PlatformRules(
    name=Platform.SHOPEE,
    domain_fragments=("shopee.", "shp.ee", "shope.ee"),
    short_link_markers=("shp.ee", "shope.ee", "s.shopee.com.br"),
    further_resolution_patterns=_patterns(
        _path_segment("universal-link"),
        _host("share.shopee."),
        _host("s.shopee.com.br"),
    ),
    product_markers=("shopee.com.br/product/", "-i.", ".i."),
    extractor=extract_shopee_ids,
)

MERCADOLIVRE = PlatformRules(
    name=Platform.MERCADOLIVRE,
    domain_fragments=("mercadolivre.", "mercadolibre.", "meli.co", "meli.la"),
    short_link_markers=("meli.co", "meli.la"),
    further_resolution_patterns=_patterns(
        _path_segment("go"),
        _host("click1.mercadolivre."),
    ),
    product_markers=("/p/MLB", "mercadolivre.com.br/MLB"),
    extractor=extract_mercadolivre_id,
)

MAGALU = PlatformRules(
    name=Platform.MAGALU,
    domain_fragments=("magazineluiza.com.br", "magalu.com", "mglu.me"),
    short_link_markers=("mglu.me",),
    further_resolution_patterns=_patterns(
        _path_segment("redirect"),
        _path_segment("r"),
    ),
    product_markers=("/p/",),
    extractor=extract_magalu_sku,
)

# Порядок важен: классификация идёт по нему, первое совпадение побеждает
PLATFORM_REGISTRY: Tuple[PlatformRules, ...] = (AMAZON, SHOPEE, MERCADOLIVRE, MAGALU)

PLATFORMS_BY_NAME: Dict[str, PlatformRules] = {rules.name: rules for rules in PLATFORM_REGISTRY}

# Маркеры, общие для всех площадок: настоящая платформа до разрешения
# ссылки может быть ещё неизвестна
WRAPPER_PATH_MARKERS = ("/social/", "/gz/webdevice/", "/deals/", "/universal-link", "/sec/")
TRACKING_QUERY_MARKERS = ("forceinapp=true", "?go=", "&go=")


def get_rules(platform: str) -> Optional[PlatformRules]:
    return PLATFORMS_BY_NAME.get(platform)
