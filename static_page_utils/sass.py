from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import sass as libsass

from .cache import DiskCache, digest
from .config import Settings
from .css import CssPrefixer, style_tag
from .errors import SassCompileError
from .once import import_once, path_key_under

logger = logging.getLogger("static_page_utils.sass")


class SassImporter:
    namespace = "sass"

    def __init__(self, settings: Settings, prefixer: CssPrefixer, disk_cache: DiskCache) -> None:
        self.settings = settings
        self.sass_cfg = settings.sass
        self.prefixer = prefixer
        self.disk_cache = disk_cache
        self.import_once = import_once("sass", self.import_file, key=path_key_under(settings.paths().base))

    def _include_paths(self) -> List[str]:
        return [str(self.settings.resolve(p)) for p in self.sass_cfg.include_paths]

    def cache_key(self, text: str) -> str:
        # Partials pulled in by @import are not hashed; clear the cache after editing one.
        prefix = "\n".join(self.prefixer.browsers) if self.prefixer.css_cfg.autoprefix else ""
        return digest(text, self.sass_cfg.output_style, "\n".join(self._include_paths()), prefix)

    def import_file(self, path: Path | str) -> str:
        source = self.settings.resolve(path).resolve()
        key = self.cache_key(source.read_text(encoding="utf-8"))
        return style_tag(self.disk_cache.get_or_create(self.namespace, key, ".css", lambda: self._build(source)))

    def _build(self, source: Path) -> str:
        logger.debug("Compiling SASS: %s", source)
        return self.prefixer(self._compile(source))

    def _compile(self, source: Path) -> str:
        try:
            return libsass.compile(
                filename=str(source),
                include_paths=self._include_paths(),
                output_style=self.sass_cfg.output_style,
            )
        except libsass.CompileError as exc:
            logger.error("Error compiling SASS: %s\n%s", source, exc)
            raise SassCompileError(f"Failed to compile {source}: {exc}") from exc
