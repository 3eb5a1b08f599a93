from __future__ import annotations

import logging
from pathlib import Path

from cachetools import LRUCache

from .config import Settings
from .fetch import fetch_text
from .once import import_once, path_key_under, url_key

logger = logging.getLogger("static_page_utils.js")


def script_tag(source: str) -> str:
    return f"<script>\n{source}\n</script>"


def import_js(path: Path | str) -> str:
    return script_tag(Path(path).read_text(encoding="utf-8"))


class JsImporter:
    def __init__(self, settings: Settings, mem_cache: LRUCache) -> None:
        self.settings = settings
        self.mem_cache = mem_cache
        self.import_once = import_once("js", self.import_file, key=path_key_under(settings.paths().base))
        self.import_external_once = import_once("js-external", self.import_external, key=url_key)

    def import_file(self, path: Path | str) -> str:
        source = self.settings.resolve(path)
        logger.debug("Importing JS: %s", source)
        return import_js(source)

    def import_external(self, url: str) -> str:
        cache_key = f"js:{url}"
        cached = self.mem_cache.get(cache_key)
        if cached is not None:
            logger.debug("Using cached JS: %s", url)
            return cached
        logger.debug("Downloading JS: %s", url)
        html = script_tag(fetch_text(url, self.settings.network))
        try:
            self.mem_cache[cache_key] = html
        except ValueError:
            logger.debug("JS from %s exceeds the memory cache size; not cached.", url)
        return html
