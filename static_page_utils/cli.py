from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import load_config
from .factory import StaticPageUtils
from .font import FontStyle

app = typer.Typer(help="Render asset imports as HTML fragments for static pages.")

ConfigOption = typer.Option(None, "--config", "-c", help="Path to static_page_utils config file.")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, markup=False)],
    )


def _utils(config_path: Optional[Path], verbose: bool) -> StaticPageUtils:
    _setup_logging(verbose)
    return StaticPageUtils(load_config(config_path))


@app.command()
def css(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Inline a CSS file after autoprefixing."""

    typer.echo(_utils(config_path, verbose).css.import_file(path))


@app.command()
def sass(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Compile and inline a SASS/SCSS file."""

    typer.echo(_utils(config_path, verbose).sass.import_file(path))


@app.command()
def js(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Inline a JavaScript file."""

    typer.echo(_utils(config_path, verbose).js.import_file(path))


@app.command()
def img(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True),
    alt: str = typer.Option(..., "--alt", help="Alternative text for the <img>."),
    width_ratio: Optional[float] = typer.Option(None, "--width-ratio", help="Fraction of the viewport width."),
    quality: Optional[int] = typer.Option(None, "--quality", "-q", min=1, max=100),
    force_size: bool = typer.Option(False, "--force-size", help="Crop to the exact aspect ratio."),
    extensions: Optional[List[str]] = typer.Option(None, "--ext", help="Output format; repeatable."),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Render responsive image sets and print the <picture> element."""

    utils = _utils(config_path, verbose)
    typer.echo(
        utils.img.import_image(
            path,
            alt,
            width_ratio=width_ratio,
            quality=quality,
            extensions=extensions or None,
            force_size=force_size,
        )
    )


@app.command()
def svg(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True),
    alt: Optional[str] = typer.Option(None, "--alt"),
    element_id: Optional[str] = typer.Option(None, "--id"),
    classes: Optional[List[str]] = typer.Option(None, "--class", help="CSS class; repeatable."),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Optimise and inline an SVG."""

    utils = _utils(config_path, verbose)
    typer.echo(utils.svg.import_svg(path, alt=alt, id=element_id, classes=classes))


@app.command("svg-data")
def svg_data(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Print an SVG as a base64 data URI."""

    typer.echo(_utils(config_path, verbose).svg.as_data_string(path))


@app.command()
def font(
    family: str = typer.Argument(...),
    weights: List[int] = typer.Option([400], "--weight", "-w", help="Font weight; repeatable."),
    italic: bool = typer.Option(False, "--italic", help="Also import italic variants."),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Inline a Google Fonts stylesheet."""

    styles = [FontStyle(weight) for weight in weights]
    if italic:
        styles.extend(FontStyle(weight, italic=True) for weight in weights)
    typer.echo(_utils(config_path, verbose).font.import_google(family, styles))


@app.command()
def link(
    path: Path = typer.Argument(..., exists=True, resolve_path=True),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Symlink a file into <webroot>/res and print its URL."""

    typer.echo(_utils(config_path, verbose).res.link(path))


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
