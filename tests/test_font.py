from __future__ import annotations

from urllib.parse import unquote

import pytest

from static_page_utils import StaticPageUtils
from static_page_utils.font import (
    BASIC_LATIN,
    PRECONNECT,
    FontStyle,
    character_text,
    google_fonts_url,
    styles_axis,
)


def test_styles_sorted_upright_first_then_weight():
    styles = [FontStyle(700, italic=True), FontStyle(700), FontStyle(300), FontStyle(400, italic=True)]

    assert styles_axis(styles) == "0,300;0,700;1,400;1,700"


def test_invalid_weight():
    with pytest.raises(ValueError):
        FontStyle(450)


def test_url_without_text():
    url = google_fonts_url("Open Sans", [FontStyle(400)])

    assert url == "https://fonts.googleapis.com/css2?family=Open+Sans:ital,wght@0,400&display=swap"


def test_url_with_character_sets():
    url = google_fonts_url("Inter", [FontStyle(400)], [(0x41, 0x43), (0x61, 0x61)])

    assert url.endswith("&display=swap&text=ABCa")


def test_character_text_is_inclusive():
    text = character_text([BASIC_LATIN])

    assert text[0] == " "
    assert text[-1] == "\x7f"
    assert len(text) == 0x7F - 0x20 + 1
    assert "%20" in google_fonts_url("Inter", [FontStyle(400)], [BASIC_LATIN])


def test_import_google_downloads_once_and_caches_on_disk(utils: StaticPageUtils, monkeypatch):
    downloads = []

    def fake_fetch(url, network):
        downloads.append(url)
        return "@font-face { font-family: 'Inter'; }"

    monkeypatch.setattr("static_page_utils.css.fetch_text", fake_fetch)

    html = utils.font.import_google("Inter", [FontStyle(400), FontStyle(700)])

    assert html.startswith(PRECONNECT)
    assert "@font-face" in html
    assert unquote(downloads[0]).startswith("https://fonts.googleapis.com/css2?family=Inter:ital,wght@0,400;0,700")

    fresh = StaticPageUtils(utils.settings)
    monkeypatch.setattr("static_page_utils.css.fetch_text", lambda url, network: pytest.fail("not cached"))
    assert fresh.font.import_google("Inter", [FontStyle(700), FontStyle(400)]) == html
    assert len(list((utils.settings.paths().cache / "fonts").glob("*.css"))) == 1


def test_character_sets_are_part_of_the_cache_key(utils: StaticPageUtils, monkeypatch):
    monkeypatch.setattr("static_page_utils.css.fetch_text", lambda url, network: url)

    full = utils.font.import_google("Inter", [FontStyle(400)])
    subset = utils.font.import_google("Inter", [FontStyle(400)], [BASIC_LATIN])

    assert full != subset
    assert "&text=" in subset


def test_requires_styles(utils: StaticPageUtils):
    with pytest.raises(ValueError):
        utils.font.import_google("Inter", [])
