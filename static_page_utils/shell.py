from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .cache import digest
from .config import Settings
from .img import compress_image
from .paths import ensure_dir
from .rendering import render

logger = logging.getLogger("static_page_utils.shell")

SEO_IMAGE_WIDTH = 1200
SEO_IMAGE_HEIGHT = 630
SEO_IMAGE_ASPECT = 1.905
SEO_IMAGE_QUALITY = 65


@dataclass
class SEO:
    description: str
    keywords: List[str]
    author: str
    image: Optional[str] = None
    type: Optional[str] = None
    site_url: Optional[str] = None


@dataclass
class PageShellOptions:
    head: str = ""
    tail: str = ""
    body_classes: List[str] = field(default_factory=list)


class PageShell:
    def __init__(self, settings: Settings, options: Optional[PageShellOptions] = None) -> None:
        self.settings = settings
        self.options = options or PageShellOptions()

    def append_to_head(self, html: str) -> None:
        self.options.head += html

    def append_to_tail(self, html: str) -> None:
        self.options.tail += html

    def seo_image_url(self, seo: SEO) -> Optional[str]:
        """Render the wide social preview image once and return its URL."""

        if seo.image is None:
            return None
        seo_dir = ensure_dir(self.settings.paths().seo)
        image_hash = digest(seo.image)
        output_stem = seo_dir / f"{image_hash}-wide"
        if not output_stem.with_suffix(".jpg").exists():
            compress_image(
                self.settings.resolve(seo.image),
                output_stem,
                SEO_IMAGE_WIDTH,
                SEO_IMAGE_ASPECT,
                quality=SEO_IMAGE_QUALITY,
                extensions=("jpg",),
                force_size=True,
            )
        return f"{seo.site_url or ''}/res/seo/{image_hash}-wide.jpg"

    def render(self, title: str, body: str, seo: SEO, lang: str = "en") -> str:
        return render(
            "page.html",
            title=title,
            body=body,
            seo=seo,
            lang=lang,
            seo_image_url=self.seo_image_url(seo),
            seo_image_width=SEO_IMAGE_WIDTH,
            seo_image_height=SEO_IMAGE_HEIGHT,
            head=self.options.head,
            tail=self.options.tail,
            body_classes=self.options.body_classes,
        )
