from __future__ import annotations

from typing import Sequence


class AssetError(Exception):
    """Base class for failures while importing an asset."""


class ToolError(AssetError, RuntimeError):
    def __init__(self, command: Sequence[str], message: str, stderr: str = "") -> None:
        self.command = list(command)
        self.stderr = stderr
        super().__init__(f"{' '.join(self.command)}: {message}")


class DownloadError(AssetError, OSError):
    def __init__(self, url: str, reason: object) -> None:
        self.url = url
        super().__init__(f"Failed to download {url}: {reason}")


class SvgParseError(AssetError, ValueError):
    pass


class ImageProcessingError(AssetError, RuntimeError):
    pass


class SassCompileError(AssetError, RuntimeError):
    pass
