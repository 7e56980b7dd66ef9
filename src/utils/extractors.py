"""
Извлечение идентификаторов товаров из URL (по одному экстрактору на платформу).

Каждый экстрактор проходит упорядоченный список регулярных выражений и
возвращает первый синтаксически валидный результат. Порядок правил важен:
более специфичные формы пути проверяются раньше общих, чтобы случайный
числовой сегмент не был принят за ID товара.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Pattern

from src.core.models import AmazonAsin, MagaluSku, MercadoLivreId, ShopeeIds

_ASIN = r"([A-Z0-9]{10})(?![A-Z0-9])"

AMAZON_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"/dp/" + _ASIN,
        r"/gp/product/" + _ASIN,
        r"/gp/aw/d/" + _ASIN,
        r"/exec/obidos/asin/" + _ASIN,
        r"/o/ASIN/" + _ASIN,
        r"/product/" + _ASIN,
        r"[?&]asin=" + _ASIN,
        # Последний сегмент пути из 10 символов; хотя бы одна цифра,
        # иначе под правило попадают обычные слова вроде /bestseller
        r"/(?=[A-Z0-9]{0,9}\d)([A-Z0-9]{10})/?(?:[?#]|$)",
    )
)
ASIN_RE = re.compile(r"^[A-Z0-9]{10}$")

SHOPEE_PATTERNS = (
    re.compile(r"/product/(\d+)/(\d+)", re.IGNORECASE),
    re.compile(r"/[^/]+/(\d+)/(\d+)"),
    re.compile(r"(?:\.i|-i)\.(\d+)\.(\d+)", re.IGNORECASE),
)
# Фолбэк для ссылок разных эпох: длина числовых ID Shopee не постоянна
SHOPEE_FALLBACK = re.compile(r"(\d{6,})\.(\d{6,})")

_MLB = r"MLB-?(\d{10,14})(?!\d)"

MERCADOLIVRE_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"/p/" + _MLB,
        r"/" + _MLB,
        r"/produto/(?:[^/?#]*/)?" + _MLB,
        r"/item/" + _MLB,
        r"[?&]id=" + _MLB,
        _MLB,
    )
)

_SKU = r"([a-z0-9]{6,20})(?![a-z0-9])"

MAGALU_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"/p/" + _SKU,
        r"/produto/" + _SKU,
        r"/[^/?#]+/p/" + _SKU,
        r"[?&]sku=" + _SKU,
    )
)


def _first_match(patterns: Iterable[Pattern[str]], url: str) -> Optional[re.Match]:
    for pattern in patterns:
        match = pattern.search(url)
        if match:
            return match
    return None


def extract_amazon_asin(url: str) -> Optional[AmazonAsin]:
    """
    Извлекает ASIN из URL Amazon.

    Поддерживаемые форматы:
    - https://www.amazon.com.br/Produto/dp/B08N5WRWNW/ref=...
    - https://www.amazon.com.br/gp/product/B08N5WRWNW
    - https://www.amazon.com/gp/aw/d/B08N5WRWNW
    - https://www.amazon.com/exec/obidos/ASIN/B08N5WRWNW
    - https://www.amazon.com/o/ASIN/B08N5WRWNW
    - https://www.amazon.com.br/s?asin=B08N5WRWNW
    - https://www.amazon.com.br/B08N5WRWNW

    Returns:
        Optional[AmazonAsin]: ASIN в верхнем регистре или None
    """
    if not url:
        return None

    match = _first_match(AMAZON_PATTERNS, url)
    if not match:
        return None

    asin = match.group(1).upper()
    if not ASIN_RE.match(asin):
        return None
    return AmazonAsin(asin=asin)


def extract_shopee_ids(url: str) -> Optional[ShopeeIds]:
    """
    Извлекает shop_id и item_id из URL Shopee.

    Поддерживаемые форматы:
    - https://shopee.com.br/product/123456/987654321
    - https://shopee.com.br/loja/123456/987654321
    - https://shopee.com.br/Nome-do-produto-i.123456.987654321

    Если ни один формат не подошёл, ищутся две длинные числовые группы
    ``A.B``: более длинная считается item_id (при равенстве первая).
    Это эвристика, результат не гарантирован.
    """
    if not url:
        return None

    clean = url.split("?")[0].split("#")[0]

    match = _first_match(SHOPEE_PATTERNS, clean)
    if match:
        return ShopeeIds(shop_id=match.group(1), item_id=match.group(2))

    match = SHOPEE_FALLBACK.search(clean)
    if match:
        first, second = match.group(1), match.group(2)
        if len(first) >= len(second):
            return ShopeeIds(shop_id=second, item_id=first)
        return ShopeeIds(shop_id=first, item_id=second)

    return None


def extract_mercadolivre_id(url: str) -> Optional[MercadoLivreId]:
    """
    Извлекает ID Mercado Livre (MLB + 10-14 цифр) из URL.

    Поддерживаемые форматы:
    - https://www.mercadolivre.com.br/produto-x/p/MLB1234567890
    - https://produto.mercadolivre.com.br/MLB-1234567890-produto-_JM
    - https://www.mercadolivre.com.br/item/MLB1234567890
    - https://www.mercadolivre.com.br/...?id=MLB1234567890

    Дефис после префикса убирается, результат всегда начинается с "MLB".
    """
    if not url:
        return None

    match = _first_match(MERCADOLIVRE_PATTERNS, url)
    if not match:
        return None
    return MercadoLivreId(mlb_id=f"MLB{match.group(1)}")


def extract_magalu_sku(url: str) -> Optional[MagaluSku]:
    """Извлекает SKU Magalu (6-20 символов, в нижнем регистре)."""
    if not url:
        return None

    match = _first_match(MAGALU_PATTERNS, url)
    if not match:
        return None
    return MagaluSku(sku=match.group(1).lower())
