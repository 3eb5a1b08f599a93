"""Responsive ``<picture>`` generation backed by OpenCV.

Every imported image is rendered at six standard breakpoints. Each
``<source>`` then points the browser at larger renditions for high-density
screens via the table in ``RESPONSIVE_IMAGE_SET``.
"""

from __future__ import annotations

import logging
import math
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

import cv2
import numpy as np

from .cache import digest
from .config import Settings
from .errors import ImageProcessingError
from .paths import ensure_dir
from .rendering import render

logger = logging.getLogger("static_page_utils.img")

mimetypes.add_type("image/webp", ".webp")
mimetypes.add_type("image/avif", ".avif")

STANDARD_IMAGE_DIMENSIONS: Tuple[int, ...] = (640, 960, 1280, 1920, 2560, 3840)

# breakpoint -> rendition widths for 1x, 1.5x, 2x, 2.5x, 3x
RESPONSIVE_IMAGE_SET: Dict[int, Tuple[int, int, int, int, int]] = {
    640: (640, 960, 1280, 1920, 1920),
    960: (960, 1920, 1920, 2560, 3840),
    1280: (1280, 1920, 2560, 3840, 3840),
    1920: (1920, 2560, 3840, 3840, 3840),
    2560: (2560, 3840, 3840, 3840, 3840),
    3840: (3840, 3840, 3840, 3840, 3840),
}
DENSITIES = ("1x", "1.5x", "2x", "2.5x", "3x")

SUPPORTED_EXTENSIONS = frozenset({"jpg", "jpeg", "webp", "png"})


def mime_type(extension: str) -> str:
    guessed, _ = mimetypes.guess_type(f"image.{extension}")
    return guessed or "application/octet-stream"


def decode_image(data: bytes, source: Path) -> np.ndarray:
    image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    if image is None or image.size == 0:
        raise ImageProcessingError(f"Unable to decode image: {source}")
    return image


def read_image(path: Path | str) -> np.ndarray:
    source = Path(path).resolve()
    return decode_image(source.read_bytes(), source)


def fit_within(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Shrink to fit inside width x height; never enlarges."""

    src_h, src_w = image.shape[:2]
    if src_w <= width and src_h <= height:
        return image
    scale = min(width / src_w, height / src_h)
    size = (max(1, round(src_w * scale)), max(1, round(src_h * scale)))
    return cv2.resize(image, size, interpolation=cv2.INTER_AREA)


def cover_and_crop(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Scale to cover width x height, then crop the centre to exactly that size."""

    src_h, src_w = image.shape[:2]
    scale = max(width / src_w, height / src_h)
    new_w = max(width, math.ceil(src_w * scale))
    new_h = max(height, math.ceil(src_h * scale))
    interpolation = cv2.INTER_AREA if scale < 1 else cv2.INTER_CUBIC
    resized = cv2.resize(image, (new_w, new_h), interpolation=interpolation)
    x = (new_w - width) // 2
    y = (new_h - height) // 2
    return resized[y : y + height, x : x + width]


def _flatten_alpha(image: np.ndarray) -> np.ndarray:
    if image.ndim != 3 or image.shape[2] != 4:
        return image
    alpha = image[:, :, 3:4].astype(np.float32) / 255.0
    colour = image[:, :, :3].astype(np.float32)
    flattened = colour * alpha + 255.0 * (1.0 - alpha)
    return np.clip(flattened, 0, 255).astype(np.uint8)


def _encode_params(extension: str, quality: int) -> List[int]:
    if extension in {"jpg", "jpeg"}:
        return [
            cv2.IMWRITE_JPEG_QUALITY,
            quality,
            cv2.IMWRITE_JPEG_PROGRESSIVE,
            1,
            cv2.IMWRITE_JPEG_SAMPLING_FACTOR,
            cv2.IMWRITE_JPEG_SAMPLING_FACTOR_420,
        ]
    if extension == "webp":
        return [cv2.IMWRITE_WEBP_QUALITY, quality]
    if extension == "png":
        return [cv2.IMWRITE_PNG_COMPRESSION, 9]
    raise ValueError(f"Unsupported image extension: {extension}")


def write_image(path: Path, image: np.ndarray, quality: int) -> Path:
    extension = path.suffix.lower().lstrip(".")
    params = _encode_params(extension, quality)
    if extension in {"jpg", "jpeg"}:
        image = _flatten_alpha(image)
    ensure_dir(path.parent)
    try:
        ok = cv2.imwrite(str(path), image, params)
    except cv2.error as exc:
        raise ImageProcessingError(f"Error writing image {path}: {exc}") from exc
    if not ok:
        raise ImageProcessingError(f"Error writing image {path}")
    return path


def _render_variants(
    image: np.ndarray,
    source: Path,
    output_stem: Path,
    width: int,
    aspect_ratio: float,
    quality: int,
    extensions: Sequence[str],
    force_size: bool,
) -> List[Path]:
    height = max(1, round(width / aspect_ratio))
    if force_size:
        resized = cover_and_crop(image, width, height)
    else:
        resized = fit_within(image, width, height)
    written: List[Path] = []
    for ext in extensions:
        output = Path(f"{output_stem}.{ext}")
        try:
            write_image(output, resized, quality)
        except (ImageProcessingError, ValueError) as exc:
            logger.error("Error processing image: %s\n%s", source, exc)
            raise
        logger.info("Processed image: %s -> %s", source, output)
        written.append(output)
    return written


def compress_image(
    source: Path | str,
    output_stem: Path | str,
    width: int,
    aspect_ratio: float,
    *,
    quality: int = 65,
    extensions: Sequence[str] = ("jpg",),
    force_size: bool = False,
) -> List[Path]:
    """Write ``<output_stem>.<ext>`` for every extension at the given width."""

    src = Path(source).resolve()
    return _render_variants(
        read_image(src), src, Path(output_stem), width, aspect_ratio, quality, extensions, force_size
    )


def scale_images(
    source: Path | str,
    dimensions: Sequence[Tuple[int, int]],
    quality: int,
    output_dir: Path,
    output_name: str,
) -> List[Path]:
    """Shrink ``source`` into ``<output_name>-<w>x<h><ext>`` for each size, skipping existing files."""

    src = Path(source).resolve()
    image: Optional[np.ndarray] = None
    outputs: List[Path] = []
    for width, height in dimensions:
        output = output_dir / f"{output_name}-{width}x{height}{src.suffix.lower()}"
        outputs.append(output)
        if output.exists():
            continue
        if image is None:
            image = read_image(src)
        write_image(output, fit_within(image, width, height), quality)
        logger.info("Processed image: %s", output)
    return outputs


@dataclass(frozen=True)
class PictureSource:
    type: str
    breakpoint: int
    srcset: str


class ImageImporter:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.image_cfg = settings.image

    def url(self, output_name: str, size: int, extension: str) -> str:
        path = quote(f"/res/{output_name}-{size}.{extension}", safe="/")
        return f"{path}?cache-age={self.image_cfg.cache_age}"

    def import_image(
        self,
        path: Path | str,
        alt: str,
        *,
        width_ratio: Optional[float] = None,
        height_ratio: Optional[float] = None,
        quality: Optional[int] = None,
        id: Optional[str] = None,
        classes: Optional[Sequence[str]] = None,
        extensions: Optional[Sequence[str]] = None,
        force_size: bool = False,
    ) -> str:
        source = self.settings.resolve(path).resolve()
        logger.debug("Importing image: %s", source)
        exts = [ext.lower().lstrip(".") for ext in (extensions or self.image_cfg.extensions)]
        unsupported = [ext for ext in exts if ext not in SUPPORTED_EXTENSIONS]
        if unsupported:
            raise ValueError(f"Unsupported image extension(s): {', '.join(unsupported)}")
        quality = self.image_cfg.quality if quality is None else quality

        data = source.read_bytes()
        image = decode_image(data, source)
        src_h, src_w = image.shape[:2]
        aspect_ratio = src_w / src_h

        if width_ratio is None and height_ratio is None:
            width_ratio = 1.0
        elif width_ratio is None:
            width_ratio = aspect_ratio * height_ratio
        if width_ratio <= 0:
            raise ValueError(f"width_ratio must be positive, got {width_ratio}")

        output_name = f"{digest(data)}-{width_ratio:g}"
        paths = self.settings.paths()
        ensure_dir(paths.res)
        output_base = paths.res / output_name

        processed = all(
            Path(f"{output_base}-{dimension}.{ext}").exists()
            for dimension in STANDARD_IMAGE_DIMENSIONS
            for ext in exts
        )
        if processed:
            logger.debug("Images already processed: %s", source)
        else:
            for dimension in STANDARD_IMAGE_DIMENSIONS:
                _render_variants(
                    image,
                    source,
                    Path(f"{output_base}-{dimension}"),
                    max(1, round(dimension * width_ratio)),
                    aspect_ratio,
                    quality,
                    exts,
                    force_size,
                )

        sources = [
            PictureSource(
                type=mime_type(ext),
                breakpoint=breakpoint,
                srcset=", ".join(
                    f"{self.url(output_name, size, ext)} {density}"
                    for size, density in zip(RESPONSIVE_IMAGE_SET[breakpoint], DENSITIES)
                ),
            )
            for breakpoint in STANDARD_IMAGE_DIMENSIONS
            for ext in exts
        ]
        return render(
            "picture.html",
            sources=sources,
            fallback=self.url(output_name, STANDARD_IMAGE_DIMENSIONS[0], exts[-1]),
            alt=alt,
            id=id,
            classes=list(classes or []),
        )
