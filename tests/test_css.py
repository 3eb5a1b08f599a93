from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from conftest import write_text
from static_page_utils import Settings, StaticPageUtils
from static_page_utils.cache import DiskCache
from static_page_utils.css import CssPrefixer, read_browserslist
from static_page_utils.errors import DownloadError, ToolError


class FakePostcss:
    def __init__(self, returncode: int = 0, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.calls: list = []

    def __call__(self, command, **kwargs):
        self.calls.append((command, kwargs))
        prefixed = "-webkit-" + kwargs["input"]
        return subprocess.CompletedProcess(command, self.returncode, stdout=prefixed, stderr=self.stderr)


@pytest.fixture
def prefixing_settings(tmp_path: Path) -> Settings:
    return Settings(base_dir=tmp_path, css={"browserslist": ["last 2 versions"]})


def test_import_file_without_autoprefix(utils: StaticPageUtils, tmp_path: Path):
    css = write_text(tmp_path, "site.css", "a { color: red; }\n")

    html = utils.css.import_file(css)

    assert html.startswith("<style>")
    assert html.endswith("</style>")
    assert "a { color: red; }" in html
    assert not (tmp_path / "cache").exists()


def test_prefixer_runs_postcss_once_per_content(prefixing_settings: Settings, monkeypatch):
    fake = FakePostcss()
    monkeypatch.setattr(subprocess, "run", fake)
    prefixer = CssPrefixer(prefixing_settings, DiskCache(prefixing_settings.paths().cache))

    first = prefixer("display: flex;")
    second = prefixer("display: flex;")

    assert first == second == "-webkit-display: flex;"
    assert len(fake.calls) == 1
    command, kwargs = fake.calls[0]
    assert command[-2:] == ["--use", "autoprefixer"]
    assert kwargs["env"]["BROWSERSLIST"] == "last 2 versions"
    assert list((prefixing_settings.paths().cache / "css").glob("*.css"))


def test_prefixer_logs_warnings(prefixing_settings: Settings, monkeypatch, caplog):
    monkeypatch.setattr(subprocess, "run", FakePostcss(stderr="Gradient has outdated direction syntax\n"))
    prefixer = CssPrefixer(prefixing_settings, DiskCache(prefixing_settings.paths().cache))

    with caplog.at_level("WARNING", logger="static_page_utils.css"):
        prefixer("a{}")

    assert "outdated direction" in caplog.text


def test_prefixer_failure_raises_tool_error(prefixing_settings: Settings, monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakePostcss(returncode=1, stderr="CssSyntaxError"))
    prefixer = CssPrefixer(prefixing_settings, DiskCache(prefixing_settings.paths().cache))

    with pytest.raises(ToolError) as excinfo:
        prefixer("a{")

    assert excinfo.value.stderr == "CssSyntaxError"
    assert not (prefixing_settings.paths().cache / "css").exists()


def test_missing_postcss_binary(tmp_path: Path):
    settings = Settings(base_dir=tmp_path, css={"postcss_command": ["definitely-not-postcss-xyz"]})
    prefixer = CssPrefixer(settings, DiskCache(tmp_path / "cache"))

    with pytest.raises(ToolError, match="command not found"):
        prefixer("a{}")


def test_browserslist_file(tmp_path: Path):
    write_text(tmp_path, ".browserslistrc", "# comment\n\n> 1%\nlast 2 versions # trailing\n")

    assert read_browserslist(tmp_path / ".browserslistrc") == ["> 1%", "last 2 versions"]
    assert read_browserslist(tmp_path / "missing") == ["> 0.01%"]

    prefixer = CssPrefixer(Settings(base_dir=tmp_path), DiskCache(tmp_path / "cache"))
    assert prefixer.browsers == ["> 1%", "last 2 versions"]


def test_import_external_uses_memory_cache(utils: StaticPageUtils, monkeypatch):
    downloads = []

    def fake_fetch(url, network):
        downloads.append(url)
        return "body{margin:0}"

    monkeypatch.setattr("static_page_utils.css.fetch_text", fake_fetch)
    url = "https://cdn.example.com/reset.css"

    assert utils.css.import_external(url) == "<style>\nbody{margin:0}\n</style>"
    assert utils.css.import_external(url) == "<style>\nbody{margin:0}\n</style>"
    assert downloads == [url]


def test_import_external_once(utils: StaticPageUtils, monkeypatch):
    monkeypatch.setattr("static_page_utils.css.fetch_text", lambda url, network: "p{}")
    seen: set[str] = set()
    url = "https://cdn.example.com/p.css"

    assert utils.css.import_external_once(url, seen) != ""
    assert utils.css.import_external_once(url, seen) == ""


def test_import_once(utils: StaticPageUtils, tmp_path: Path):
    css = write_text(tmp_path, "a.css", "a{}")
    seen: set[str] = set()

    assert "a{}" in utils.css.import_once(css, seen)
    assert utils.css.import_once(css, seen) == ""


def test_download_errors_propagate(utils: StaticPageUtils, monkeypatch):
    def failing_fetch(url, network):
        raise DownloadError(url, "HTTP Error 404")

    monkeypatch.setattr("static_page_utils.css.fetch_text", failing_fetch)

    with pytest.raises(DownloadError, match="404"):
        utils.css.import_external("https://cdn.example.com/missing.css")
