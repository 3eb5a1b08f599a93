from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import List

from cachetools import LRUCache

from .cache import DiskCache, digest
from .config import Settings
from .errors import ToolError
from .fetch import fetch_text
from .once import import_once, path_key_under, url_key

logger = logging.getLogger("static_page_utils.css")

DEFAULT_BROWSERSLIST = ["> 0.01%"]


def read_browserslist(path: Path) -> List[str]:
    if not path.exists():
        return list(DEFAULT_BROWSERSLIST)
    queries: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.split("#", 1)[0].strip()
        if stripped:
            queries.append(stripped)
    return queries or list(DEFAULT_BROWSERSLIST)


class CssPrefixer:
    """Run CSS through postcss + autoprefixer, memoized by content hash."""

    namespace = "css"

    def __init__(self, settings: Settings, disk_cache: DiskCache) -> None:
        self.settings = settings
        self.css_cfg = settings.css
        self.disk_cache = disk_cache
        if self.css_cfg.browserslist:
            self.browsers = list(self.css_cfg.browserslist)
        else:
            self.browsers = read_browserslist(settings.resolve(".browserslistrc"))

    def __call__(self, css: str) -> str:
        if not self.css_cfg.autoprefix:
            return css
        key = digest(css, "\n".join(self.browsers))
        return self.disk_cache.get_or_create(self.namespace, key, ".css", lambda: self._run_postcss(css))

    def _run_postcss(self, css: str) -> str:
        logger.debug("Prefixing CSS")
        command = list(self.css_cfg.postcss_command)
        env = dict(os.environ, BROWSERSLIST=", ".join(self.browsers))
        try:
            result = subprocess.run(
                command,
                input=css,
                capture_output=True,
                text=True,
                timeout=self.css_cfg.timeout_s,
                env=env,
                cwd=str(self.settings.paths().base),
            )
        except FileNotFoundError as exc:
            logger.error("postcss is not available: %s", exc)
            raise ToolError(command, "command not found") from exc
        except subprocess.TimeoutExpired as exc:
            logger.error("postcss timed out after %.0fs", self.css_cfg.timeout_s)
            raise ToolError(command, "timed out") from exc
        if result.returncode != 0:
            logger.error("postcss failed: %s", result.stderr.strip())
            raise ToolError(command, f"exit status {result.returncode}", result.stderr)
        for warning in result.stderr.splitlines():
            if warning.strip():
                logger.warning("postcss: %s", warning.strip())
        return result.stdout


def style_tag(css: str) -> str:
    return f"<style>\n{css}\n</style>"


class CssImporter:
    def __init__(self, settings: Settings, prefixer: CssPrefixer, mem_cache: LRUCache) -> None:
        self.settings = settings
        self.prefixer = prefixer
        self.mem_cache = mem_cache
        self.import_once = import_once("css", self.import_file, key=path_key_under(settings.paths().base))
        self.import_external_once = import_once("css-external", self.import_external, key=url_key)

    def import_file(self, path: Path | str) -> str:
        source = self.settings.resolve(path)
        logger.debug("Importing CSS: %s", source)
        return style_tag(self.prefixer(source.read_text(encoding="utf-8")))

    def import_external(self, url: str) -> str:
        cache_key = f"css:{url}"
        cached = self.mem_cache.get(cache_key)
        if cached is not None:
            logger.debug("Using cached CSS: %s", url)
            return cached
        logger.debug("Downloading CSS: %s", url)
        html = style_tag(fetch_text(url, self.settings.network))
        try:
            self.mem_cache[cache_key] = html
        except ValueError:
            logger.debug("CSS from %s exceeds the memory cache size; not cached.", url)
        return html
