# pyright: reportUnknownVariableType=false, reportUnknownMemberType=false
# pyright: reportUnknownArgumentType=false, reportAttributeAccessIssue=false
# pyright: reportMissingImports=false
# pyright: reportMissingTypeStubs=false

"""Font resources used when rasterizing preview images."""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Callable

from fontTools.ttLib import TTFont as FontFile
from fontTools.varLib import instancer
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont as ReportLabTTFont

logger = logging.getLogger(__name__)

FONTS_DIR = Path(__file__).resolve().parent / "fonts"
DEFAULT_REGULAR_FONT = FONTS_DIR / "Inter-Regular.ttf"
DEFAULT_BOLD_FONT = FONTS_DIR / "Inter-Bold.ttf"

REGULAR_FONT_NAME = "OgSans"
BOLD_FONT_NAME = "OgSans-Bold"
BOLD_WEIGHT = 600


class FontLoadFailed(RuntimeError):
    """Raised when a font file cannot be read or registered."""


@dataclass(frozen=True)
class FontFiles:
    regular: Path
    bold: Path | None = None


@dataclass(frozen=True)
class FontResources:
    """Registered ReportLab font names for regular and bold text."""

    regular: str
    bold: str
    embedded: bool

    def font_for_weight(self, weight: float) -> str:
        return self.bold if weight >= BOLD_WEIGHT else self.regular


SYSTEM_FONTS = FontResources(regular="Helvetica", bold="Helvetica-Bold", embedded=False)


def _read_font(path: Path) -> tuple[FontFile, bytes]:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise FontLoadFailed(f"Font file '{path}' could not be read: {exc}") from exc
    try:
        font = FontFile(BytesIO(data))
    except Exception as exc:
        raise FontLoadFailed(f"Font file '{path}' is not a valid font: {exc}") from exc
    if "glyf" not in font:
        raise FontLoadFailed(
            f"Font file '{path}' uses CFF outlines, which ReportLab cannot embed."
        )
    return font, data


def _weight_axis(font: FontFile) -> tuple[float, float] | None:
    if "fvar" not in font:
        return None
    for axis in font["fvar"].axes:
        if axis.axisTag == "wght":
            return float(axis.minValue), float(axis.maxValue)
    return None


def _instantiate(data: bytes, family: str, weight: float) -> BytesIO:
    """Pin every variation axis, using ``weight`` for ``wght``."""

    font = FontFile(BytesIO(data))
    location = {axis.axisTag: axis.defaultValue for axis in font["fvar"].axes}
    location["wght"] = weight
    instancer.instantiateVariableFont(font, location, inplace=True)
    _ensure_unique_ps_name(font, family, weight)
    buffer = BytesIO()
    font.save(buffer)
    buffer.seek(0)
    return buffer


def _ensure_unique_ps_name(font: FontFile, family: str, weight: float) -> None:
    """Give each instance its own PostScript name so embedded subsets differ."""

    nm = font["name"]
    target_ps = re.sub(r"[^A-Za-z0-9-]", "", f"{family}-W{int(round(weight))}")[:63]
    for plat, enc, lang in ((3, 1, 0x409), (1, 0, 0)):
        nm.setName(target_ps, 6, plat, enc, lang)
        nm.setName(f"{family} {int(round(weight))}", 4, plat, enc, lang)


def _register(font_name: str, source: BytesIO) -> str:
    try:
        pdfmetrics.registerFont(ReportLabTTFont(font_name, source))
    except Exception as exc:
        raise FontLoadFailed(f"ReportLab rejected font '{font_name}': {exc}") from exc
    return font_name


def load_font_resources(files: FontFiles) -> FontResources:
    """Register the regular face and, when possible, a bold face.

    The regular font is required. Bold comes from ``files.bold`` when it loads,
    otherwise from the regular font's ``wght`` axis when it is a variable font,
    otherwise bold text reuses the regular face.
    """

    regular_font, regular_data = _read_font(files.regular)
    axis = _weight_axis(regular_font)
    if axis is not None:
        weight = min(max(400.0, axis[0]), axis[1])
        regular = _register(
            REGULAR_FONT_NAME, _instantiate(regular_data, REGULAR_FONT_NAME, weight)
        )
    else:
        regular = _register(REGULAR_FONT_NAME, BytesIO(regular_data))

    bold = regular
    if files.bold is not None:
        try:
            _, bold_data = _read_font(files.bold)
            bold = _register(BOLD_FONT_NAME, BytesIO(bold_data))
        except FontLoadFailed as exc:
            logger.info("Bold font unavailable: %s", exc)
    if bold == regular and axis is not None and axis[0] <= 700 <= axis[1]:
        bold = _register(
            BOLD_FONT_NAME, _instantiate(regular_data, BOLD_FONT_NAME, 700)
        )

    return FontResources(regular=regular, bold=bold, embedded=True)


class LazyFontResources:
    """Load font resources once per process; failures resolve to system fonts."""

    def __init__(
        self,
        files: FontFiles | None,
        loader: Callable[[FontFiles], FontResources] = load_font_resources,
    ) -> None:
        self._files = files
        self._loader = loader
        self._lock = threading.Lock()
        self._value: FontResources | None = None

    def get(self) -> FontResources:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = self._load()
            return self._value

    def _load(self) -> FontResources:
        if self._files is None:
            return SYSTEM_FONTS
        try:
            return self._loader(self._files)
        except FontLoadFailed as exc:
            logger.warning("Using system fonts: %s", exc)
            return SYSTEM_FONTS


__all__ = [
    "FontFiles",
    "FontLoadFailed",
    "FontResources",
    "LazyFontResources",
    "SYSTEM_FONTS",
    "load_font_resources",
]
