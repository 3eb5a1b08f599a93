from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import write_image, write_text
from static_page_utils.cli import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    return write_text(tmp_path, "site.yml", "css:\n  autoprefix: false\n")


def test_js_command(config_file: Path, tmp_path: Path):
    script = write_text(tmp_path, "app.js", "go();")

    result = runner.invoke(app, ["js", str(script), "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "<script>\ngo();\n</script>" in result.output


def test_css_command(config_file: Path, tmp_path: Path):
    css = write_text(tmp_path, "a.css", "a{color:red}")

    result = runner.invoke(app, ["css", str(css), "-c", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "a{color:red}" in result.output


def test_img_command(config_file: Path, tmp_path: Path):
    photo = write_image(tmp_path, "p.png", 100, 50)

    result = runner.invoke(app, ["img", str(photo), "--alt", "Photo", "--ext", "png", "-c", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "<picture>" in result.output
    assert 'type="image/png"' in result.output
    assert list((tmp_path / "public" / "res").glob("*-640.png"))


def test_link_command(config_file: Path, tmp_path: Path):
    asset = write_text(tmp_path, "doc.txt", "hi")

    result = runner.invoke(app, ["link", str(asset), "-c", str(config_file)])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "/res/doc.txt"


def test_missing_file_is_rejected(config_file: Path, tmp_path: Path):
    result = runner.invoke(app, ["js", str(tmp_path / "missing.js"), "-c", str(config_file)])

    assert result.exit_code != 0


def test_relative_argument_is_taken_from_the_working_directory(tmp_path: Path, monkeypatch):
    config = write_text(tmp_path, "site/site.yml", "css:\n  autoprefix: false\n")
    write_text(tmp_path, "scripts/app.js", "go();")
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["js", "scripts/app.js", "-c", str(config)])

    assert result.exit_code == 0, result.output
    assert "go();" in result.output
