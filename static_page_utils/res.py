from __future__ import annotations

import logging
from pathlib import Path

from .config import Settings
from .paths import ensure_dir

logger = logging.getLogger("static_page_utils.res")


class ResourceLinker:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def link(self, path: Path | str) -> str:
        """Symlink ``path`` into ``<webroot>/res`` and return its public URL."""

        source = self.settings.resolve(path).resolve()
        res_dir = ensure_dir(self.settings.paths().res)
        destination = res_dir / source.name
        if not destination.exists() and not destination.is_symlink():
            destination.symlink_to(source)
            logger.debug("Created symlink for resource: %s", source)
        return f"/res/{source.name}"
