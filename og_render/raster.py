# pyright: reportUnknownMemberType=false, reportMissingTypeStubs=false

"""Rasterize plain preview SVG documents to PNG."""

from __future__ import annotations

import re
from io import BytesIO
from typing import Dict, List, Tuple
from xml.etree import ElementTree

import fitz
from reportlab.lib import colors
from reportlab.pdfgen import canvas

from fonts import SYSTEM_FONTS, FontResources
from .layout import HEIGHT, WIDTH

_RGBA = re.compile(
    r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)"
)
_TRANSLATE = re.compile(r"translate\(\s*([-\d.]+)\s*[, ]\s*([-\d.]+)\s*\)")
_GRADIENT_REF = re.compile(r"url\(#([^)]+)\)")

Gradient = List[Tuple[float, colors.Color]]


class RasterizationFailed(RuntimeError):
    """Raised when a document cannot be turned into a bitmap."""


def rasterize(
    document: str,
    fonts: FontResources | None = None,
    width: int = WIDTH,
    height: int = HEIGHT,
) -> bytes:
    """Return PNG bytes for a plain-mode SVG ``document``.

    The document is replayed on a ReportLab canvas whose points map one to one
    onto output pixels, then rasterized with PyMuPDF on a white background.
    """

    fonts = fonts or SYSTEM_FONTS
    try:
        root = ElementTree.fromstring(document.encode("utf-8"))
        pdf_bytes = _draw_pdf(root, fonts, width, height)
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            page = doc.load_page(0)
            pix = page.get_pixmap(dpi=72, alpha=False)
            return pix.tobytes("png")
    except Exception as exc:
        raise RasterizationFailed(f"Could not rasterize preview: {exc}") from exc


def parse_color(value: str) -> colors.Color:
    """Parse ``#rgb``, ``#rrggbb`` and ``rgb()``/``rgba()`` color strings."""

    value = value.strip()
    match = _RGBA.fullmatch(value)
    if match:
        red, green, blue = (float(match.group(i)) / 255.0 for i in (1, 2, 3))
        alpha = float(match.group(4)) if match.group(4) is not None else 1.0
        return colors.Color(red, green, blue, alpha=alpha)
    if re.fullmatch(r"#[0-9a-fA-F]{3}", value):
        value = "#" + "".join(ch * 2 for ch in value[1:])
    if not re.fullmatch(r"#[0-9a-fA-F]{6}", value):
        raise ValueError(f"Unsupported color '{value}'")
    return colors.HexColor(value)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _num(element: ElementTree.Element, name: str, default: float = 0.0) -> float:
    raw = element.get(name)
    if raw is None:
        return default
    return float(raw)


def _draw_pdf(
    root: ElementTree.Element,
    fonts: FontResources,
    width: int,
    height: int,
) -> bytes:
    buffer = BytesIO()
    canvas_obj = canvas.Canvas(buffer, pagesize=(width, height))
    canvas_obj.setFillColor(colors.white)
    canvas_obj.rect(0, 0, width, height, stroke=0, fill=1)

    gradients: Dict[str, Gradient] = {}
    _draw_children(canvas_obj, root, fonts, gradients, (width, height), 0.0, 0.0)

    canvas_obj.showPage()
    canvas_obj.save()
    return buffer.getvalue()


def _draw_children(
    canvas_obj: canvas.Canvas,
    parent: ElementTree.Element,
    fonts: FontResources,
    gradients: Dict[str, Gradient],
    page: Tuple[int, int],
    dx: float,
    dy: float,
) -> None:
    for element in parent:
        tag = _local(element.tag)
        if tag == "defs":
            _collect_gradients(element, gradients)
        elif tag == "rect":
            _draw_rect(canvas_obj, element, gradients, page, dx, dy)
        elif tag == "text":
            _draw_text(canvas_obj, element, fonts, page, dx, dy)
        elif tag == "g":
            offset_x, offset_y = 0.0, 0.0
            match = _TRANSLATE.search(element.get("transform", ""))
            if match:
                offset_x, offset_y = float(match.group(1)), float(match.group(2))
            _draw_children(
                canvas_obj, element, fonts, gradients, page, dx + offset_x, dy + offset_y
            )


def _collect_gradients(defs: ElementTree.Element, gradients: Dict[str, Gradient]) -> None:
    for element in defs.iter():
        if _local(element.tag) != "linearGradient":
            continue
        stops: Gradient = []
        for stop in element:
            if _local(stop.tag) != "stop":
                continue
            offset = stop.get("offset", "0").strip()
            position = float(offset[:-1]) / 100.0 if offset.endswith("%") else float(offset)
            stops.append((position, parse_color(stop.get("stop-color", "#000000"))))
        gradients[element.get("id", "")] = stops


def _draw_rect(
    canvas_obj: canvas.Canvas,
    element: ElementTree.Element,
    gradients: Dict[str, Gradient],
    page: Tuple[int, int],
    dx: float,
    dy: float,
) -> None:
    page_w, page_h = page
    fill = element.get("fill", "#000000")
    ref = _GRADIENT_REF.fullmatch(fill.strip())
    if ref:
        # only full-canvas diagonal backgrounds use gradients
        stops = gradients.get(ref.group(1))
        if stops:
            canvas_obj.linearGradient(
                0,
                page_h,
                page_w,
                0,
                [color for _, color in stops],
                positions=[position for position, _ in stops],
                extend=True,
            )
        return

    x = dx + _num(element, "x")
    y = dy + _num(element, "y")
    w = _num(element, "width")
    h = _num(element, "height")
    radius = _num(element, "rx")
    color = parse_color(fill)
    canvas_obj.setFillColor(color)
    canvas_obj.setFillAlpha(color.alpha)
    bottom = page_h - y - h
    if radius > 0:
        canvas_obj.roundRect(x, bottom, w, h, radius, stroke=0, fill=1)
    else:
        canvas_obj.rect(x, bottom, w, h, stroke=0, fill=1)


def _draw_text(
    canvas_obj: canvas.Canvas,
    element: ElementTree.Element,
    fonts: FontResources,
    page: Tuple[int, int],
    dx: float,
    dy: float,
) -> None:
    text = "".join(element.itertext())
    if not text.strip():
        return
    x = dx + _num(element, "x")
    baseline = page[1] - (dy + _num(element, "y"))
    weight = _num(element, "font-weight", 400)
    color = parse_color(element.get("fill", "#000000"))

    canvas_obj.setFillColor(color)
    canvas_obj.setFillAlpha(color.alpha)
    canvas_obj.setFont(fonts.font_for_weight(weight), _num(element, "font-size", 16))
    anchor = element.get("text-anchor", "start")
    if anchor == "end":
        canvas_obj.drawRightString(x, baseline, text)
    elif anchor == "middle":
        canvas_obj.drawCentredString(x, baseline, text)
    else:
        canvas_obj.drawString(x, baseline, text)
