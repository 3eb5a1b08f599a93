from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("static_page_utils.paths")


def ensure_dir(path: Path) -> Path:
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
        logger.debug("Created directory: %s", path)
    return path


@dataclass(frozen=True)
class AssetPaths:
    base: Path
    webroot: Path
    res: Path
    seo: Path
    pwa: Path
    cache: Path


def _under(base: Path, value: Path | str) -> Path:
    candidate = Path(value)
    return candidate if candidate.is_absolute() else (base / candidate)


def resolve_asset_paths(base_dir: Path | str, webroot: Path | str, cache_dir: Path | str) -> AssetPaths:
    base = Path(base_dir).resolve()
    root = _under(base, webroot).resolve()
    res = root / "res"
    return AssetPaths(
        base=base,
        webroot=root,
        res=res,
        seo=res / "seo",
        pwa=res / "pwa",
        cache=_under(base, cache_dir).resolve(),
    )
