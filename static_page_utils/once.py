from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, MutableSet, Optional

logger = logging.getLogger("static_page_utils.once")

Importer = Callable[..., str]
OnceImporter = Callable[..., str]
KeyFunc = Callable[[str, Path | str], str]


def path_key(kind: str, source: Path | str) -> str:
    return f"{kind}-{Path(source).resolve()}"


def path_key_under(base: Path) -> KeyFunc:
    """Like ``path_key`` but relative sources are taken from ``base``."""

    def key(kind: str, source: Path | str) -> str:
        return path_key(kind, Path(base) / source)

    return key


def url_key(kind: str, source: Path | str) -> str:
    return f"{kind}-{source}"


def import_once(
    kind: str,
    importer: Importer,
    key: Optional[KeyFunc] = None,
) -> OnceImporter:
    """Wrap ``importer`` so each resource is emitted once per render pass.

    The returned callable takes ``(source, seen, **kwargs)``. ``seen`` is a
    set owned by the caller for the page being rendered; a source whose key is
    already in it yields an empty string.
    """

    make_key = key or path_key

    def wrapper(source: Path | str, seen: MutableSet[str], **kwargs) -> str:
        resource_key = make_key(kind, source)
        if resource_key in seen:
            logger.debug("Skipping already imported %s: %s", kind, source)
            return ""
        seen.add(resource_key)
        return importer(source, **kwargs)

    wrapper.__name__ = f"{getattr(importer, '__name__', 'import')}_once"
    wrapper.__doc__ = importer.__doc__
    return wrapper
