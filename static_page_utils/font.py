from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
from urllib.parse import quote

from .cache import DiskCache, digest
from .css import CssImporter

logger = logging.getLogger("static_page_utils.font")

CharacterSet = Tuple[int, int]

BASIC_LATIN: CharacterSet = (0x20, 0x7F)
ALL_LATIN: CharacterSet = (0x20, 0x24F)

CHARACTER_SETS = {
    "basic_latin": BASIC_LATIN,
    "all_latin": ALL_LATIN,
}

GOOGLE_FONTS_CSS = "https://fonts.googleapis.com/css2"
PRECONNECT = '<link rel="preconnect" href="https://fonts.gstatic.com">'
VALID_WEIGHTS = frozenset(range(100, 1000, 100))


@dataclass(frozen=True)
class FontStyle:
    weight: int
    italic: bool = False

    def __post_init__(self) -> None:
        if self.weight not in VALID_WEIGHTS:
            raise ValueError(f"Font weight must be one of 100..900 in steps of 100, got {self.weight}")


def styles_axis(styles: Sequence[FontStyle]) -> str:
    ordered = sorted(styles, key=lambda style: (style.italic, style.weight))
    return ";".join(f"{int(style.italic)},{style.weight}" for style in ordered)


def character_text(char_sets: Sequence[CharacterSet]) -> str:
    return "".join(chr(code) for start, end in char_sets for code in range(start, end + 1))


def google_fonts_url(family: str, styles: Sequence[FontStyle], char_sets: Optional[Sequence[CharacterSet]] = None) -> str:
    family_param = quote(family, safe="").replace("%20", "+")
    url = f"{GOOGLE_FONTS_CSS}?family={family_param}:ital,wght@{styles_axis(styles)}&display=swap"
    if char_sets is not None:
        text = quote(character_text(char_sets), safe="!'()*~")
        url += f"&text={text}"
    return url


class FontImporter:
    namespace = "fonts"

    def __init__(self, css: CssImporter, disk_cache: DiskCache) -> None:
        self.css = css
        self.disk_cache = disk_cache

    def import_google(
        self,
        family: str,
        styles: Sequence[FontStyle],
        char_sets: Optional[Sequence[CharacterSet]] = None,
    ) -> str:
        if not styles:
            raise ValueError("At least one font style is required.")
        sets_key = "" if char_sets is None else repr([tuple(item) for item in char_sets])
        key = digest(family, styles_axis(styles), sets_key)
        return self.disk_cache.get_or_create(
            self.namespace, key, ".css", lambda: self._download(family, styles, char_sets)
        )

    def _download(
        self,
        family: str,
        styles: Sequence[FontStyle],
        char_sets: Optional[Sequence[CharacterSet]],
    ) -> str:
        logger.debug("Importing Google Font: %s", family)
        url = google_fonts_url(family, styles, char_sets)
        logger.debug("Downloading font: %s", url)
        return f"{PRECONNECT}\n{self.css.import_external(url)}"
