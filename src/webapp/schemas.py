"""
Pydantic схемы HTTP API резолвера.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ResolveRequest(BaseModel):
    """Запрос на разрешение ссылки."""
    url: Optional[str] = Field(None, description="Ссылка на товар (короткая, трекинговая или каноническая)")


class ResolveResponse(BaseModel):
    """Итог разрешения ссылки. Поля чужих платформ всегда присутствуют со значением None."""
    ok: bool
    platform: Optional[str] = None
    url_original: Optional[str] = None
    url_resolved: Optional[str] = None
    was_short_link: bool = False
    hop_count: int = 0
    product_id: Optional[str] = None
    asin: Optional[str] = None
    shopId: Optional[str] = None
    itemId: Optional[str] = None
    mlb_id: Optional[str] = None
    sku: Optional[str] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Проверка работоспособности API."""
    status: str = "ok"
    version: str
    services: List[str]
