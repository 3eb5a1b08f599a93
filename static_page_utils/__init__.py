"""Asset import helpers for static site generation."""

from __future__ import annotations

from .config import Settings, load_config  # noqa: F401
from .factory import StaticPageUtils  # noqa: F401
from .paths import AssetPaths  # noqa: F401
