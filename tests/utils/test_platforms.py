"""
test_platforms.py - unit-тесты для реестра платформ

Проверяет:
- Сопоставление домена только по хосту URL
- Карточку товара как сочетание домена и маркера пути
"""

import pytest

from src.utils.platforms import AMAZON, MAGALU, MERCADOLIVRE, SHOPEE


@pytest.mark.parametrize(
    "rules, url",
    [
        (AMAZON, "https://www.amazon.com.br/Produto/dp/B08N5WRWNW"),
        (SHOPEE, "https://shopee.com.br/Fone-i.123456.987654321"),
        (MERCADOLIVRE, "https://www.mercadolivre.com.br/celular/p/MLB1234567890"),
        (MAGALU, "https://www.magazineluiza.com.br/fone/p/abc123def/"),
    ],
)
def test_product_url_on_platform_host(rules, url):
    assert rules.is_product_url(url) is True


@pytest.mark.parametrize(
    "rules, url",
    [
        (MAGALU, "https://cdn.example.com/p/banner123.png"),
        (AMAZON, "https://blog.example.com/dp/B08N5WRWNW"),
        (AMAZON, "https://tracker.example.com/amazon.com.br/dp/B08N5WRWNW"),
        (MERCADOLIVRE, "https://news.example.com/p/MLB1234567890?from=mercadolivre.com.br"),
        (MAGALU, "https://www.magazineluiza.com.br/ofertas/"),
        (AMAZON, "/dp/B08N5WRWNW"),
        (AMAZON, "https://[broken/dp/B08N5WRWNW"),
    ],
)
def test_not_a_product_url(rules, url):
    assert rules.is_product_url(url) is False


def test_matches_host_ignores_path_and_query():
    assert AMAZON.matches_host("https://www.amazon.com.br/") is True
    assert AMAZON.matches_host("https://a.co/d/xyz") is True
    assert AMAZON.matches_host("https://example.com/?u=amazon.com.br") is False
    assert SHOPEE.matches_host("https://s.shopee.com.br/abc") is True
