from __future__ import annotations

import logging
import urllib.request

from .config import NetworkConfig
from .errors import DownloadError

logger = logging.getLogger("static_page_utils.fetch")


def fetch_text(url: str, network: NetworkConfig) -> str:
    """GET ``url`` and return the body decoded with its declared charset (UTF-8 if none)."""

    request = urllib.request.Request(url, headers={"User-Agent": network.user_agent})
    try:
        with urllib.request.urlopen(request, timeout=network.timeout_s) as response:
            charset = response.headers.get_content_charset() or "utf-8"
            return response.read().decode(charset)
    except OSError as exc:
        logger.error("Error downloading %s: %s", url, exc)
        raise DownloadError(url, exc) from exc
