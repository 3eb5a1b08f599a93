from __future__ import annotations

import textwrap
from pathlib import Path

import cv2
import numpy as np
import pytest

from static_page_utils import Settings, StaticPageUtils


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(base_dir=tmp_path, css={"autoprefix": False})


@pytest.fixture
def utils(settings: Settings) -> StaticPageUtils:
    return StaticPageUtils(settings)


def write_text(root: Path, name: str, content: str) -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


def write_image(root: Path, name: str, width: int, height: int, channels: int = 3) -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    image = np.zeros((height, width, channels), dtype=np.uint8)
    image[:, : width // 2] = 200
    assert cv2.imwrite(str(path), image)
    return path


def image_size(path: Path) -> tuple[int, int]:
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    assert image is not None, path
    height, width = image.shape[:2]
    return width, height
