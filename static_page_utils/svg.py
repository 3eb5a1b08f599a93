from __future__ import annotations

import base64
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from xml.parsers.expat import ExpatError

from scour import scour as scour_lib

from .cache import DiskCache, digest
from .config import Settings
from .errors import SvgParseError

logger = logging.getLogger("static_page_utils.svg")

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

_LENGTH = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$")
TEXT_ELEMENTS = frozenset({"text", "tspan", "textPath"})


def _scour_options(id_prefix: str):
    options = scour_lib.sanitizeOptions()
    options.strip_xml_prolog = True
    options.strip_comments = True
    options.remove_metadata = True
    options.remove_descriptive_elements = True
    options.strip_xml_space_attribute = True
    options.shorten_ids = True
    options.shorten_ids_prefix = id_prefix
    options.indent_type = "none"
    options.newlines = False
    options.quiet = True
    return options


def parse_svg(text: str, source: Path | str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        logger.error("Failed to parse SVG: %s", source)
        raise SvgParseError(f"Failed to parse SVG: {source}") from exc


def _local_name(tag: object) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _is_blank(value: Optional[str]) -> bool:
    return value is not None and not value.strip()


def compact(root: ET.Element) -> ET.Element:
    """Drop indentation whitespace, keeping it inside text content elements."""

    def walk(element: ET.Element, in_text: bool) -> None:
        in_text = in_text or _local_name(element.tag) in TEXT_ELEMENTS
        if not in_text and _is_blank(element.text):
            element.text = None
        for child in element:
            walk(child, in_text)
            if not in_text and _is_blank(child.tail):
                child.tail = None

    walk(root, False)
    if _is_blank(root.tail):
        root.tail = None
    return root


def strip_svg_namespace(root: ET.Element) -> ET.Element:
    prefix = f"{{{SVG_NS}}}"
    for element in root.iter():
        if isinstance(element.tag, str) and element.tag.startswith(prefix):
            element.tag = element.tag[len(prefix) :]
    return root


def svg_dimensions(path: Path | str) -> Tuple[int, int]:
    """Intrinsic width and height from the root attributes, falling back to viewBox."""

    source = Path(path)
    root = parse_svg(source.read_text(encoding="utf-8"), source)
    width = _LENGTH.match(root.get("width", ""))
    height = _LENGTH.match(root.get("height", ""))
    if width and height:
        return round(float(width.group(1))), round(float(height.group(1)))
    view_box = root.get("viewBox")
    if view_box:
        parts = re.split(r"[\s,]+", view_box.strip())
        if len(parts) == 4:
            return round(float(parts[2])), round(float(parts[3]))
    raise SvgParseError(f"SVG has no usable width/height or viewBox: {source}")


def as_data_string(path: Path | str) -> str:
    source = Path(path)
    root = compact(parse_svg(source.read_text(encoding="utf-8"), source))
    markup = ET.tostring(root, encoding="unicode")
    return "data:image/svg+xml;base64," + base64.b64encode(markup.encode("utf-8")).decode("ascii")


class SvgImporter:
    namespace = "svg"

    def __init__(self, settings: Settings, disk_cache: DiskCache) -> None:
        self.settings = settings
        self.disk_cache = disk_cache

    def as_data_string(self, path: Path | str) -> str:
        return as_data_string(self.settings.resolve(path))

    def import_svg(
        self,
        path: Path | str,
        *,
        alt: Optional[str] = None,
        id: Optional[str] = None,
        classes: Optional[Sequence[str]] = None,
    ) -> str:
        source = self.settings.resolve(path).resolve()
        text = source.read_text(encoding="utf-8")
        class_list = list(classes or [])
        key = digest(text, repr((alt, id, class_list)))
        return self.disk_cache.get_or_create(
            self.namespace, key, ".svg", lambda: self._inline(source, text, alt, id, class_list)
        )

    def _inline(self, source: Path, text: str, alt: Optional[str], id: Optional[str], class_list: List[str]) -> str:
        logger.debug("Inlining SVG: %s", source)
        try:
            optimised = scour_lib.scourString(text, _scour_options(f"{source.stem}-"))
        except ExpatError as exc:
            logger.error("Failed to parse SVG: %s", source)
            raise SvgParseError(f"Failed to parse SVG: {source}") from exc

        root = strip_svg_namespace(compact(parse_svg(optimised, source)))
        if id is not None:
            root.set("id", id)
        if class_list:
            root.set("class", " ".join(class_list))
        if alt is not None:
            title = ET.Element("title")
            title.text = alt
            root.insert(0, title)
        return ET.tostring(root, encoding="unicode")
