"""
Affiliate Link Resolver - Source Code Package
=============================================
Разворачивание партнёрских ссылок Amazon, Shopee, Mercado Livre и Magalu
до канонического URL товара и извлечение ID (ASIN, shopId/itemId, MLB, SKU).

Структура:
- api/      - Исходящие HTTP-запросы (HttpFetcher)
- core/     - Резолвер, модели, конфигурация, логирование
- services/ - Сервис resolve_and_identify
- utils/    - Статический разбор URL, экстракторы, поиск редиректов в HTML
- webapp/   - HTTP API (FastAPI)
"""

__version__ = "2.0.0"
