"""
test_html_redirect.py - unit-тесты для поиска редиректа в HTML

Проверяет:
- Каждую стратегию по отдельности и их порядок
- Фильтр canonical/og:url по маркеру карточки товара
- Относительные адреса и экранирование в скриптах
- Отсутствие исключений на неожиданной разметке
"""

import pytest

from src.utils.html_redirect import scan_for_redirect
from src.utils.url_parser import Platform

PRODUCT_ML = "https://www.mercadolivre.com.br/celular/p/MLB1234567890"


def test_meta_refresh():
    html = '<html><head><meta http-equiv="refresh" content="0;url=https://shopee.com.br/product/1/2"></head></html>'
    assert scan_for_redirect(html, Platform.SHOPEE) == "https://shopee.com.br/product/1/2"


def test_meta_refresh_quoted_and_uppercase():
    html = "<META HTTP-EQUIV='Refresh' CONTENT=\"5; URL='https://www.amazon.com.br/dp/B08N5WRWNW'\">"
    assert scan_for_redirect(html, Platform.AMAZON) == "https://www.amazon.com.br/dp/B08N5WRWNW"


def test_meta_refresh_relative_uses_base_url():
    html = '<meta http-equiv="refresh" content="0;url=/p/MLB1234567890">'
    result = scan_for_redirect(html, Platform.MERCADOLIVRE, base_url="https://www.mercadolivre.com.br/go/abc")
    assert result == "https://www.mercadolivre.com.br/p/MLB1234567890"


@pytest.mark.parametrize(
    "script",
    [
        f'window.location = "{PRODUCT_ML}";',
        f"window.location.href='{PRODUCT_ML}'",
        f'location.href = "{PRODUCT_ML}"',
        f'location.replace("{PRODUCT_ML}")',
        'window.location.replace("https:\\/\\/www.mercadolivre.com.br\\/celular\\/p\\/MLB1234567890")',
    ],
)
def test_script_navigation(script):
    html = f"<html><body><script>{script}</script></body></html>"
    assert scan_for_redirect(html, Platform.MERCADOLIVRE) == PRODUCT_ML


def test_script_navigation_requires_scheme():
    html = '<script>window.location = "/somewhere/else";</script>'
    assert scan_for_redirect(html, Platform.MERCADOLIVRE) is None


def test_meta_refresh_wins_over_script():
    html = (
        '<meta http-equiv="refresh" content="0;url=https://first.example/a">'
        '<script>window.location = "https://second.example/b";</script>'
    )
    assert scan_for_redirect(html) == "https://first.example/a"


def test_canonical_with_product_marker():
    html = f'<html><head><link rel="canonical" href="{PRODUCT_ML}"></head></html>'
    assert scan_for_redirect(html, Platform.MERCADOLIVRE) == PRODUCT_ML


def test_canonical_without_marker_is_ignored():
    html = '<link rel="canonical" href="https://www.mercadolivre.com.br/ofertas">'
    assert scan_for_redirect(html, Platform.MERCADOLIVRE) is None


def test_og_url_with_product_marker():
    html = '<meta property="og:url" content="https://shopee.com.br/Fone-i.123456.987654321">'
    assert scan_for_redirect(html, Platform.SHOPEE) == "https://shopee.com.br/Fone-i.123456.987654321"


def test_canonical_wins_over_og_url():
    html = (
        '<link rel="canonical" href="https://www.amazon.com.br/dp/B08N5WRWNW">'
        '<meta property="og:url" content="https://www.amazon.com.br/dp/B000000001">'
    )
    assert scan_for_redirect(html, Platform.AMAZON) == "https://www.amazon.com.br/dp/B08N5WRWNW"


def test_raw_embedded_product_link():
    html = (
        '<div data-x="https://www.mercadolivre.com.br/ofertas"></div>'
        '<script>var state = {"permalink":"https:\\/\\/www.mercadolivre.com.br\\/celular\\/p\\/MLB1234567890"};</script>'
    )
    assert scan_for_redirect(html, Platform.MERCADOLIVRE) == PRODUCT_ML


def test_raw_link_html_entities_unescaped():
    html = '<a href="https://shopee.com.br/product/123456/987654321?a=1&amp;b=2">x</a>'
    assert scan_for_redirect(html, Platform.SHOPEE) == "https://shopee.com.br/product/123456/987654321?a=1&b=2"


def test_unknown_hint_accepts_any_platform_marker():
    html = '<link rel="canonical" href="https://www.amazon.com.br/dp/B08N5WRWNW">'
    assert scan_for_redirect(html) == "https://www.amazon.com.br/dp/B08N5WRWNW"
    assert scan_for_redirect(html, Platform.UNKNOWN) == "https://www.amazon.com.br/dp/B08N5WRWNW"


@pytest.mark.parametrize(
    "document",
    [
        None,
        "",
        b"<html></html>",
        "<<<>>><meta http-equiv=refresh content=><link rel=canonical>",
        "<html><head><title>Sem redirecionamento</title></head><body>ok</body></html>",
        "\x00\x01\x02 plain text without markup",
        "<script>window.location = </script>",
        '<meta property="og:url">',
    ],
)
def test_malformed_or_empty_returns_none(document):
    assert scan_for_redirect(document, Platform.MERCADOLIVRE) is None


@pytest.mark.parametrize(
    "document, hint",
    [
        ('<img src="https://cdn.example.com/p/banner123.png">', Platform.MAGALU),
        ('<link rel="canonical" href="https://blog.example.com/dp/B08N5WRWNW">', Platform.AMAZON),
        ('<meta property="og:url" content="https://news.example.com/p/MLB1234567890">', Platform.MERCADOLIVRE),
        ('<a href="https://cdn.example.com/img/p/abc123def.jpg">', None),
        ('<a href="https://tracker.example.com/amazon.com.br/dp/B08N5WRWNW">', Platform.AMAZON),
    ],
)
def test_product_marker_on_foreign_domain_is_ignored(document, hint):
    assert scan_for_redirect(document, hint) is None


def test_foreign_links_are_skipped_until_platform_link():
    html = (
        '<img src="https://cdn.example.com/p/banner123.png">'
        '<a href="https://www.magazineluiza.com.br/fone/p/abc123def/">Fone</a>'
    )
    assert scan_for_redirect(html, Platform.MAGALU) == "https://www.magazineluiza.com.br/fone/p/abc123def/"
