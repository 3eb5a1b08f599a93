from __future__ import annotations

from pathlib import Path

from conftest import write_text
from static_page_utils import StaticPageUtils


def test_import_file(utils: StaticPageUtils, tmp_path: Path):
    script = write_text(tmp_path, "app.js", "console.log('hi');\n")

    assert utils.js.import_file(script) == "<script>\nconsole.log('hi');\n\n</script>"


def test_import_once(utils: StaticPageUtils, tmp_path: Path):
    script = write_text(tmp_path, "app.js", "run();")
    seen: set[str] = set()

    assert "run();" in utils.js.import_once(script, seen)
    assert utils.js.import_once(script, seen) == ""


def test_external_scripts_share_memory_cache_without_colliding_with_css(utils: StaticPageUtils, monkeypatch):
    monkeypatch.setattr("static_page_utils.js.fetch_text", lambda url, network: "var x = 1;")
    monkeypatch.setattr("static_page_utils.css.fetch_text", lambda url, network: "p{}")
    url = "https://cdn.example.com/asset"

    js_html = utils.js.import_external(url)
    css_html = utils.css.import_external(url)

    assert js_html == "<script>\nvar x = 1;\n</script>"
    assert css_html == "<style>\np{}\n</style>"
    assert utils.memory_cache["js:" + url] == js_html


def test_import_external_once(utils: StaticPageUtils, monkeypatch):
    downloads = []

    def fake_fetch(url, network):
        downloads.append(url)
        return "lib();"

    monkeypatch.setattr("static_page_utils.js.fetch_text", fake_fetch)
    url = "https://cdn.example.com/lib.js"
    first_page: set[str] = set()
    second_page: set[str] = set()

    assert utils.js.import_external_once(url, first_page)
    assert utils.js.import_external_once(url, first_page) == ""
    assert utils.js.import_external_once(url, second_page)
    assert downloads == [url]
