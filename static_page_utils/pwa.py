from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from markupsafe import escape
from pydantic import BaseModel

from .config import Settings
from .img import scale_images
from .paths import ensure_dir
from .shell import PageShell
from .svg import svg_dimensions

logger = logging.getLogger("static_page_utils.pwa")

ICON_SIZES = (16, 32, 72, 96, 128, 144, 152, 192, 384, 512)
MASKABLE_PURPOSE = "any maskable"

SERVICE_WORKER_SNIPPET = """<script>
  if ('serviceWorker' in navigator) {
    navigator.serviceWorker.register('/service-worker.js')
  }
</script>"""

FAVICON_LINKS = """
<link rel="icon" type="image/png" href="/res/pwa/icon-16x16.png" sizes="16x16">
<link rel="icon" type="image/png" href="/res/pwa/icon-32x32.png" sizes="32x32">
<link rel="icon" type="image/png" href="/res/pwa/icon-96x96.png" sizes="96x96">
<link rel="apple-touch-icon" type="image/png" href="/res/pwa/icon-192x192.png" sizes="192x192">
"""


class ProtocolHandler(BaseModel):
    protocol: str
    url: str


class RelatedApplication(BaseModel):
    platform: Literal["chrome_web_store", "play", "itunes", "webapp", "windows"]
    url: str
    id: Optional[str] = None


class Shortcut(BaseModel):
    name: str
    url: str
    short_name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None

    def to_manifest(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"name": self.name}
        if self.short_name is not None:
            entry["short_name"] = self.short_name
        if self.description is not None:
            entry["description"] = self.description
        entry["url"] = self.url
        if self.icon is not None:
            entry["icons"] = [{"src": self.icon}]
        return entry


class PwaIcon(BaseModel):
    svg: Optional[Path] = None
    png: Optional[Path] = None
    maskable_svg: Optional[Path] = None
    maskable_png: Optional[Path] = None


class PwaManifest(BaseModel):
    name: str
    icon: PwaIcon = PwaIcon()
    background_colour: Optional[str] = None
    categories: List[str] = []
    description: Optional[str] = None
    dir: Optional[Literal["auto", "ltr", "rtl"]] = None
    display: Optional[Literal["fullscreen", "standalone", "minimal-ui", "browser"]] = None
    iarc_rating_id: Optional[str] = None
    lang: Optional[str] = None
    orientation: Optional[
        Literal[
            "any",
            "natural",
            "landscape",
            "landscape-primary",
            "landscape-secondary",
            "portrait",
            "portrait-primary",
            "portrait-secondary",
        ]
    ] = None
    prefer_related_applications: Optional[bool] = None
    protocol_handlers: List[ProtocolHandler] = []
    related_applications: List[RelatedApplication] = []
    scope: Optional[str] = None
    screenshots: List[str] = []
    short_name: Optional[str] = None
    shortcuts: List[Shortcut] = []
    start_url: Optional[str] = None
    theme_colour: Optional[str] = None


class PwaBuilder:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _svg_icon(self, source: Path, pwa_dir: Path, name: str) -> Dict[str, Any]:
        source = self.settings.resolve(source)
        width, height = svg_dimensions(source)
        shutil.copyfile(source, pwa_dir / name)
        return {"src": f"/res/pwa/{name}", "sizes": f"{width}x{height}", "type": "image/svg+xml"}

    def _png_icons(self, source: Path, pwa_dir: Path, stem: str) -> List[Dict[str, Any]]:
        outputs = scale_images(
            self.settings.resolve(source),
            [(size, size) for size in ICON_SIZES],
            self.settings.image.icon_quality,
            pwa_dir,
            stem,
        )
        return [
            {"src": f"/res/pwa/{output.name}", "sizes": f"{size}x{size}", "type": "image/png"}
            for size, output in zip(ICON_SIZES, outputs)
        ]

    def _icons(self, icon: PwaIcon, page: PageShell) -> List[Dict[str, Any]]:
        pwa_dir = ensure_dir(self.settings.paths().pwa)
        icons: List[Dict[str, Any]] = []
        if icon.svg is not None:
            icons.append(self._svg_icon(icon.svg, pwa_dir, "icon.svg"))
        if icon.maskable_svg is not None:
            entry = self._svg_icon(icon.maskable_svg, pwa_dir, "maskable-icon.svg")
            entry["purpose"] = MASKABLE_PURPOSE
            icons.append(entry)
        if icon.png is not None:
            icons.extend(self._png_icons(icon.png, pwa_dir, "icon"))
            page.append_to_head(FAVICON_LINKS)
        if icon.maskable_png is not None:
            for entry in self._png_icons(icon.maskable_png, pwa_dir, "maskable-icon"):
                entry["purpose"] = MASKABLE_PURPOSE
                icons.append(entry)
        return icons

    def create_manifest(self, manifest: PwaManifest, page: PageShell) -> Dict[str, Any]:
        """Write ``<webroot>/manifest.json`` and link it (plus icons/theme) into ``page``."""

        logger.debug("Creating PWA Manifest")
        webroot = ensure_dir(self.settings.paths().webroot)
        data: Dict[str, Any] = {}

        if manifest.background_colour is not None:
            data["background_color"] = manifest.background_colour
        if manifest.categories:
            data["categories"] = list(manifest.categories)
        if manifest.description is not None:
            data["description"] = manifest.description
        if manifest.dir is not None:
            data["dir"] = manifest.dir
        if manifest.display is not None:
            data["display"] = manifest.display
        if manifest.iarc_rating_id is not None:
            data["iarc_rating_id"] = manifest.iarc_rating_id

        icons = self._icons(manifest.icon, page)
        if icons:
            data["icons"] = icons

        if manifest.lang is not None:
            data["lang"] = manifest.lang
        data["name"] = manifest.name
        if manifest.orientation is not None:
            data["orientation"] = manifest.orientation
        if manifest.prefer_related_applications is not None:
            data["prefer_related_applications"] = manifest.prefer_related_applications
        if manifest.protocol_handlers:
            data["protocol_handlers"] = [handler.model_dump() for handler in manifest.protocol_handlers]
        if manifest.related_applications:
            data["related_applications"] = [
                app.model_dump(exclude_none=True) for app in manifest.related_applications
            ]
        if manifest.scope is not None:
            data["scope"] = manifest.scope
        if manifest.screenshots:
            data["screenshots"] = [{"src": src} for src in manifest.screenshots]
        if manifest.short_name is not None:
            data["short_name"] = manifest.short_name
        if manifest.shortcuts:
            data["shortcuts"] = [shortcut.to_manifest() for shortcut in manifest.shortcuts]
        if manifest.start_url is not None:
            data["start_url"] = manifest.start_url
        if manifest.theme_colour is not None:
            data["theme_color"] = manifest.theme_colour
            colour = escape(manifest.theme_colour)
            page.append_to_head(
                f'\n<meta name="theme-color" content="{colour}">'
                f'\n<meta name="apple-mobile-web-app-status-bar" content="{colour}">\n'
            )

        (webroot / "manifest.json").write_text(json.dumps(data), encoding="utf-8")
        page.append_to_head('\n<link rel="manifest" href="/manifest.json">\n')
        return data

    def import_service_worker(self, path: Path | str) -> str:
        webroot = ensure_dir(self.settings.paths().webroot)
        shutil.copyfile(self.settings.resolve(path), webroot / "service-worker.js")
        logger.debug("Copied service worker %s", path)
        return SERVICE_WORKER_SNIPPET
