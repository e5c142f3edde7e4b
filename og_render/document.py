"""Serialize composed primitives into SVG documents."""

from __future__ import annotations

from enum import StrEnum
from typing import Iterable, List, Sequence

from .layout import HEIGHT, WIDTH, escape_markup
from .primitives import BadgeRun, Primitive, QrBlock, Role, RoundedRect, TextRun

FONT_STACK = "Inter, -apple-system, system-ui, sans-serif"
SVG_NS = "http://www.w3.org/2000/svg"
XHTML_NS = "http://www.w3.org/1999/xhtml"

GRADIENT_STOPS = (
    ("#ecfdf5", "0%"),
    ("#d1fae5", "50%"),
    ("#bfdbfe", "100%"),
)

_RICH_CSS = """
    .wrap {{ font-family: {font}; width: {width}px; height: {height}px; display: flex; flex-direction: column; padding: 60px 80px; box-sizing: border-box; justify-content: space-between; }}
    .top {{ max-width: 900px; }}
    h1 {{ margin: 0 0 24px 0; font-size: 72px; line-height: 1.05; letter-spacing: -1px; font-weight: 700; color: #0f172a; }}
    h2 {{ margin: 0 0 18px 0; font-size: 36px; line-height: 1.2; font-weight: 400; color: #334155; }}
    .addr {{ font-size: 30px; line-height: 1.25; font-weight: 400; color: #475569; margin: 0 0 28px 0; }}
    .badges {{ display: flex; gap: 12px; flex-wrap: wrap; }}
    .badge {{ font-size: 28px; line-height: 1; padding: 14px 26px; border-radius: 40px; font-weight: 500; }}
    .footer {{ font-size: 30px; color: #334155; display: flex; align-items: center; gap: 32px; }}
    .brand {{ display: flex; align-items: center; gap: 18px; font-weight: 600; }}
    .brand-icon {{ width: 56px; height: 56px; background: #0f766e; color: #fff; border-radius: 16px; display: flex; align-items: center; justify-content: center; font-size: 34px; font-weight: 700; }}
"""


class RenderMode(StrEnum):
    RICH = "rich"
    PLAIN = "plain"


def render_vector(
    primitives: Sequence[Primitive],
    mode: RenderMode = RenderMode.PLAIN,
    width: int = WIDTH,
    height: int = HEIGHT,
) -> str:
    """Return a complete SVG document for ``primitives``.

    ``RICH`` wraps the text in an XHTML flow container styled with CSS and is
    meant for browsers. ``PLAIN`` emits only ``rect``/``text``/``g`` elements
    and is the input format of :func:`og_render.raster.rasterize`.
    """

    title = " ".join(_texts(primitives, Role.TITLE))
    gradient_id = "g" if mode is RenderMode.RICH else "gPlain"

    defs = [_gradient(gradient_id)]
    if mode is RenderMode.RICH:
        css = _RICH_CSS.format(font=FONT_STACK, width=width, height=height)
        defs.append(f"<style>{css}</style>")
        body = _rich_body(primitives)
    else:
        body = "\n  ".join(_plain_element(p) for p in primitives)

    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg width="{width}" height="{height}" viewBox="0 0 {width} {height}" '
        f'xmlns="{SVG_NS}" role="img" aria-label="{escape_markup(title)}">\n'
        f"  <defs>\n    {''.join(defs)}\n  </defs>\n"
        f'  <rect fill="url(#{gradient_id})" x="0" y="0" width="100%" height="100%" />\n'
        f"  {body}\n"
        "</svg>"
    )


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def _texts(primitives: Iterable[Primitive], role: Role) -> List[str]:
    return [p.text for p in primitives if isinstance(p, TextRun) and p.role is role]


def _gradient(gradient_id: str) -> str:
    stops = "".join(
        f'<stop stop-color="{color}" offset="{offset}" />'
        for color, offset in GRADIENT_STOPS
    )
    return (
        f'<linearGradient id="{gradient_id}" x1="0" y1="0" x2="1" y2="1">'
        f"{stops}</linearGradient>"
    )


def _text(run: TextRun) -> str:
    anchor = f' text-anchor="{run.anchor}"' if run.anchor != "start" else ""
    return (
        f'<text x="{_fmt(run.x)}" y="{_fmt(run.y)}"{anchor} '
        f'font-size="{_fmt(run.font_size)}" font-weight="{run.weight}" '
        f'font-family="{FONT_STACK}" fill="{run.fill}">'
        f"{escape_markup(run.text)}</text>"
    )


def _rect(rect: RoundedRect) -> str:
    return (
        f'<rect x="{_fmt(rect.x)}" y="{_fmt(rect.y)}" rx="{_fmt(rect.radius)}" '
        f'ry="{_fmt(rect.radius)}" width="{_fmt(rect.width)}" '
        f'height="{_fmt(rect.height)}" fill="{rect.fill}" />'
    )


def _qr(block: QrBlock) -> str:
    cell = block.cell_size
    cells: List[str] = []
    count = block.matrix.module_count
    for row in range(count):
        for col in range(count):
            if block.matrix.is_dark(row, col):
                cells.append(
                    f'<rect x="{col * cell:.2f}" y="{row * cell:.2f}" '
                    f'width="{cell:.2f}" height="{cell:.2f}" fill="{block.fill}"/>'
                )
    return (
        f'<g aria-label="QR code" role="img" '
        f'transform="translate({_fmt(block.x)},{_fmt(block.y)})">'
        f"<title>{escape_markup(block.payload)}</title>{''.join(cells)}</g>"
    )


def _plain_element(primitive: Primitive) -> str:
    if isinstance(primitive, TextRun):
        return _text(primitive)
    if isinstance(primitive, BadgeRun):
        return f"<g>{_rect(primitive.box)}{_text(primitive.label)}</g>"
    return _qr(primitive)


def _rich_body(primitives: Sequence[Primitive]) -> str:
    title = " ".join(_texts(primitives, Role.TITLE))
    subtitle = " ".join(_texts(primitives, Role.SUBTITLE))
    address = " ".join(_texts(primitives, Role.ADDRESS))
    brand = " ".join(_texts(primitives, Role.FOOTER))
    badges = [p for p in primitives if isinstance(p, BadgeRun)]
    overlays = [
        p
        for p in primitives
        if isinstance(p, QrBlock)
        or (isinstance(p, TextRun) and p.role is Role.SOBER_TIME)
    ]
    links = [p.payload.split("://", 1)[-1] for p in primitives if isinstance(p, QrBlock)]

    top = [f"<h1>{escape_markup(title)}</h1>"]
    if subtitle:
        top.append(f"<h2>{escape_markup(subtitle)}</h2>")
    if address:
        top.append(f'<div class="addr">{escape_markup(address)}</div>')
    if badges:
        spans = "".join(
            f'<span class="badge" style="background: {b.box.fill}; color: {b.label.fill};">'
            f"{escape_markup(b.label.text)}</span>"
            for b in badges
        )
        top.append(f'<div class="badges">{spans}</div>')

    footer = [
        f'<div class="brand"><div class="brand-icon">M</div> {escape_markup(brand)}</div>'
    ]
    footer.extend(f"<div>{escape_markup(link)}</div>" for link in links)

    parts = [
        '<foreignObject x="0" y="0" width="100%" height="100%">',
        f'<div xmlns="{XHTML_NS}" class="wrap">',
        f'<div class="top">{"".join(top)}</div>',
        f'<div class="footer">{"".join(footer)}</div>',
        "</div>",
        "</foreignObject>",
    ]
    parts.extend(_plain_element(p) for p in overlays)
    return "\n  ".join(parts)
