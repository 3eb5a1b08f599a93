from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .paths import AssetPaths, resolve_asset_paths

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0 Safari/537.36"
)


class ImageConfig(BaseModel):
    quality: int = Field(default=65, ge=1, le=100)
    extensions: list[str] = Field(
        default_factory=lambda: ["webp", "jpg"],
        description="Output formats, in <source> emission order. The last one is the <img> fallback.",
    )
    cache_age: int = Field(default=604800, ge=0, description="Value of the ?cache-age= query on image URLs.")
    icon_quality: int = Field(default=90, ge=1, le=100)

    @field_validator("extensions")
    @classmethod
    def _validate_extensions(cls, value: list[str]) -> list[str]:
        cleaned = [ext.lower().lstrip(".") for ext in value]
        if not cleaned:
            raise ValueError("At least one image extension is required.")
        return cleaned


class CssConfig(BaseModel):
    autoprefix: bool = True
    browserslist: Optional[list[str]] = None
    postcss_command: list[str] = Field(
        default_factory=lambda: ["npx", "--no-install", "postcss", "--no-map", "--use", "autoprefixer"]
    )
    timeout_s: float = Field(default=60.0, gt=0)


class SassConfig(BaseModel):
    include_paths: list[Path] = Field(default_factory=list)
    output_style: str = "expanded"

    @field_validator("output_style")
    @classmethod
    def _validate_output_style(cls, value: str) -> str:
        if value not in {"nested", "expanded", "compact", "compressed"}:
            raise ValueError(f"Unknown SASS output style: {value}")
        return value


class NetworkConfig(BaseModel):
    timeout_s: float = Field(default=30.0, gt=0)
    memory_cache_bytes: int = Field(default=100 * 1024 * 1024, ge=0)
    user_agent: str = DEFAULT_USER_AGENT


class Settings(BaseModel):
    base_dir: Path = Path(".")
    webroot: Path = Path("public")
    cache_dir: Path = Path("cache")
    image: ImageConfig = ImageConfig()
    css: CssConfig = CssConfig()
    sass: SassConfig = SassConfig()
    network: NetworkConfig = NetworkConfig()

    def paths(self) -> AssetPaths:
        return resolve_asset_paths(self.base_dir, self.webroot, self.cache_dir)

    def resolve(self, path: Path | str) -> Path:
        value = Path(path)
        return value if value.is_absolute() else (Path(self.base_dir) / value)


def _load_from_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix == ".json":
        return json.loads(text)
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping: {path}")
        return data
    raise ValueError(f"Unsupported config extension: {path}")


def load_config(explicit_path: Optional[Path] = None) -> Settings:
    """Load settings from file or environment."""

    candidate: Optional[Path] = explicit_path
    if candidate is None:
        env_path = os.environ.get("STATIC_PAGE_UTILS_CONFIG")
        if env_path:
            candidate = Path(env_path)
    if candidate is None:
        candidate = Path("configs/static_page_utils.yml")
    data = _load_from_file(candidate) if candidate.exists() else {}
    raw_base_dir = data.get("base_dir") or os.environ.get("STATIC_PAGE_UTILS_BASE", ".")
    base_path = Path(raw_base_dir)
    if not base_path.is_absolute():
        base_root = candidate.parent if candidate.exists() else Path.cwd()
        base_path = (base_root / base_path).resolve()
    else:
        base_path = base_path.resolve()
    data["base_dir"] = str(base_path)
    return Settings(**data)
