from __future__ import annotations

from typing import Optional

from .cache import DiskCache, memory_cache
from .config import Settings
from .css import CssImporter, CssPrefixer
from .font import FontImporter
from .img import ImageImporter
from .js import JsImporter
from .pwa import PwaBuilder
from .res import ResourceLinker
from .sass import SassImporter
from .shell import PageShell, PageShellOptions
from .svg import SvgImporter


class ShellFactory:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def make(self, options: Optional[PageShellOptions] = None) -> PageShell:
        return PageShell(self.settings, options)


class StaticPageUtils:
    """All asset helpers for one build, sharing the same caches and prefixer."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.memory_cache = memory_cache(settings.network.memory_cache_bytes)
        self.disk_cache = DiskCache(settings.paths().cache)
        self.css_prefixer = CssPrefixer(settings, self.disk_cache)

        self.css = CssImporter(settings, self.css_prefixer, self.memory_cache)
        self.sass = SassImporter(settings, self.css_prefixer, self.disk_cache)
        self.js = JsImporter(settings, self.memory_cache)
        self.font = FontImporter(self.css, self.disk_cache)
        self.img = ImageImporter(settings)
        self.svg = SvgImporter(settings, self.disk_cache)
        self.res = ResourceLinker(settings)
        self.shell = ShellFactory(settings)
        self.pwa = PwaBuilder(settings)
