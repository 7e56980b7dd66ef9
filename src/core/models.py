"""
Модели данных резолвера: идентификаторы товаров и итог разрешения ссылки.

Все объекты создаются заново на каждый запрос и неизменяемы.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Union


class Platform:
    """Константы для платформ электронной коммерции"""
    AMAZON = "amazon"
    SHOPEE = "shopee"
    MERCADOLIVRE = "mercadolivre"
    MAGALU = "magalu"
    UNKNOWN = "unknown"

    # Порядок проверки при классификации: первое совпадение побеждает
    SUPPORTED = (AMAZON, SHOPEE, MERCADOLIVRE, MAGALU)


@dataclass(frozen=True)
class AmazonAsin:
    """ASIN Amazon: 10 символов [A-Z0-9]."""
    platform: ClassVar[str] = Platform.AMAZON

    asin: str

    @property
    def product_id(self) -> str:
        return self.asin

    def to_dict(self) -> Dict[str, Any]:
        return {"asin": self.asin}


@dataclass(frozen=True)
class ShopeeIds:
    """Пара идентификаторов Shopee (магазин + товар)."""
    platform: ClassVar[str] = Platform.SHOPEE

    shop_id: str
    item_id: str

    @property
    def product_id(self) -> str:
        return self.item_id

    def to_dict(self) -> Dict[str, Any]:
        return {"shopId": self.shop_id, "itemId": self.item_id}


@dataclass(frozen=True)
class MercadoLivreId:
    """ID Mercado Livre в формате MLB + цифры."""
    platform: ClassVar[str] = Platform.MERCADOLIVRE

    mlb_id: str

    @property
    def product_id(self) -> str:
        return self.mlb_id

    def to_dict(self) -> Dict[str, Any]:
        return {"mlb_id": self.mlb_id}


@dataclass(frozen=True)
class MagaluSku:
    """SKU Magalu (строчные буквы и цифры)."""
    platform: ClassVar[str] = Platform.MAGALU

    sku: str

    @property
    def product_id(self) -> str:
        return self.sku

    def to_dict(self) -> Dict[str, Any]:
        return {"sku": self.sku}


PlatformIdentifier = Union[AmazonAsin, ShopeeIds, MercadoLivreId, MagaluSku]


class StopReason:
    """Причина остановки цикла разрешения ссылки"""
    RESOLVED = "resolved"  # достигнут URL с извлекаемым идентификатором
    SETTLED = "settled"  # адрес больше не требует разрешения, но ID не найден
    EXHAUSTED = "exhausted"  # исчерпан лимит шагов
    STALLED = "stalled"  # ни одна стратегия не продвинула состояние
    CYCLE = "cycle"  # повторный URL в цепочке
    NETWORK_ERROR = "network_error"  # GET и HEAD оба упали
    CANCELLED = "cancelled"
    DEADLINE = "deadline"


@dataclass(frozen=True)
class ResolveOutcome:
    """Результат LinkResolver.resolve(): лучший достигнутый URL и число шагов."""
    final_url: str
    hop_count: int
    stop_reason: str = StopReason.STALLED


@dataclass(frozen=True)
class ResolutionResult:
    """
    Итог resolve_and_identify: формируется один раз на запрос и
    возвращается вызывающему напрямую (без сохранения).
    """
    original_url: str
    final_url: str
    platform: str
    was_short_link: bool = False
    hop_count: int = 0
    identifier: Optional[PlatformIdentifier] = None
    ok: bool = False
    error: Optional[str] = None
    stop_reason: Optional[str] = field(default=None, compare=False)

    @property
    def product_id(self) -> Optional[str]:
        return self.identifier.product_id if self.identifier else None

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-представление для HTTP API.

        Поля идентификаторов всех платформ присутствуют всегда (None, если
        не относятся к платформе), чтобы клиенты могли читать их без проверок.
        """
        data: Dict[str, Any] = {
            "ok": self.ok,
            "platform": self.platform,
            "url_original": self.original_url,
            "url_resolved": self.final_url,
            "was_short_link": self.was_short_link,
            "hop_count": self.hop_count,
            "product_id": self.product_id,
            "asin": None,
            "shopId": None,
            "itemId": None,
            "mlb_id": None,
            "sku": None,
            "error": self.error,
        }
        if self.identifier is not None:
            data.update(self.identifier.to_dict())
        return data
