"""Content-hash keyed caches shared by the asset importers.

``DiskCache`` stores text results as ``<root>/<namespace>/<key><suffix>`` so a
rebuild only re-runs an external tool when the input actually changed.
``memory_cache`` holds downloaded resources for the lifetime of one process.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional

from cachetools import LRUCache

from .paths import ensure_dir

logger = logging.getLogger("static_page_utils.cache")


def digest(*parts: str | bytes) -> str:
    hasher = hashlib.md5()
    for part in parts:
        hasher.update(part.encode("utf-8") if isinstance(part, str) else part)
    return hasher.hexdigest()


def memory_cache(max_bytes: int) -> LRUCache:
    return LRUCache(maxsize=max_bytes, getsizeof=len)


class DiskCache:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path(self, namespace: str, key: str, suffix: str) -> Path:
        return self.root / namespace / f"{key}{suffix}"

    def get(self, namespace: str, key: str, suffix: str) -> Optional[str]:
        target = self.path(namespace, key, suffix)
        if not target.exists():
            return None
        return target.read_text(encoding="utf-8")

    def put(self, namespace: str, key: str, suffix: str, text: str) -> Path:
        target = self.path(namespace, key, suffix)
        ensure_dir(target.parent)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            Path(tmp_name).replace(target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return target

    def get_or_create(self, namespace: str, key: str, suffix: str, producer: Callable[[], str]) -> str:
        cached = self.get(namespace, key, suffix)
        if cached is not None:
            logger.debug("Using cached %s entry %s", namespace, key)
            return cached
        value = producer()
        self.put(namespace, key, suffix, value)
        return value
