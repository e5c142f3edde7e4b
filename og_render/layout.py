"""Compose preview views into positioned draw primitives."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List

from markupsafe import escape

from domain_types import AttendanceView, MeetingView, PreviewView
from .primitives import BadgeRun, Primitive, QrBlock, Role, RoundedRect, TextRun
from .qr_matrix import PayloadTooLarge, encode
from .text_metrics import measure_line, wrap

logger = logging.getLogger(__name__)

WIDTH = 1200
HEIGHT = 630
MARGIN_X = 60

TITLE_TOP = 120
TITLE_SIZE = 64
TITLE_LINE_GAP = 10
SUBTITLE_GAP = 10
SUBTITLE_SIZE = 44
SUBTITLE_LINE_GAP = 6
ADDRESS_GAP = 4
ADDRESS_SIZE = 39
ADDRESS_LINE_GAP = 4
ADDRESS_BOTTOM_MARGIN = 10

BADGE_TOP_MARGIN = 39
BADGE_SIZE = 36
BADGE_PAD_X = 23
BADGE_PAD_Y = 16
BADGE_GAP = 18
BADGE_RADIUS = 20
BADGE_RIGHT_MARGIN = 80
BADGE_TEXT_LIFT = 7

FOOTER_OFFSET = 30
FOOTER_SIZE = 34
SOBER_SIZE = 40
SOBER_LIFT = 20
QR_SIZE = 140

INK = "#0f172a"
SLATE = "#334155"
MUTED = "#475569"
BRAND = "MyMeetings"
PLACEHOLDER_TITLE = "Meeting"

_NEUTRAL = ("rgba(209,213,219,0.3)", "#222")
DEFAULT_BADGE_COLORS = ("#e2e8f0", "#1e293b")

# label -> (background, foreground)
BADGE_COLORS: dict[str, tuple[str, str]] = {
    "Beginner": ("rgba(34,197,94,0.3)", "#22c55e"),
    "Big Book": ("rgba(20,184,166,0.3)", "#14b8a6"),
    "Closed": ("rgba(239,68,68,0.3)", "#ef4444"),
    "Discussion": ("rgba(251,146,60,0.3)", "#fb923c"),
    "English": _NEUTRAL,
    "Grapevine": _NEUTRAL,
    "Literature": _NEUTRAL,
    "Men": ("rgba(37,99,235,0.3)", "#2563eb"),
    "Open": ("rgba(6,182,212,0.3)", "#06b6d4"),
    "Step": _NEUTRAL,
    "Speaker": ("rgba(153,246,228,0.3)", "#14b8a6"),
    "Step/Tradition": _NEUTRAL,
    "Tradition": _NEUTRAL,
    "Women": ("rgba(236,72,153,0.3)", "#ec4899"),
    "Wheelchair Access": _NEUTRAL,
    "Young People": ("rgba(253,224,71,0.3)", "#fde047"),
}


@dataclass(frozen=True)
class Badge:
    label: str
    background: str
    foreground: str
    width: int
    height: int


def escape_markup(text: str) -> str:
    """Escape ``& < > " '`` so ``text`` can be embedded in SVG/XHTML markup."""

    return str(escape(text))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def measure_badge(label: str) -> Badge:
    """Size a badge box around ``label`` and resolve its colors."""

    text_width = measure_line(label, BADGE_SIZE)
    # trailing room grows with label length, capped at one em
    trailing = min(36, 8 + _round_half_up(len(label) * BADGE_SIZE * 0.15 / 4))
    background, foreground = BADGE_COLORS.get(label, DEFAULT_BADGE_COLORS)
    return Badge(
        label=label,
        background=background,
        foreground=foreground,
        width=_round_half_up(text_width + BADGE_PAD_X * 2 + trailing),
        height=BADGE_SIZE + BADGE_PAD_Y * 2,
    )


def compose(
    view: PreviewView,
    width: int = WIDTH,
    height: int = HEIGHT,
) -> List[Primitive]:
    """Lay out ``view`` top to bottom and return its draw primitives."""

    primitives: List[Primitive] = []
    text_width = width - 2 * MARGIN_X

    y = TITLE_TOP
    title = view.title.strip() or PLACEHOLDER_TITLE
    for line in wrap(title, TITLE_SIZE, text_width):
        primitives.append(
            TextRun(MARGIN_X, y, line.text, TITLE_SIZE, 700, INK, Role.TITLE)
        )
        y += TITLE_SIZE + TITLE_LINE_GAP

    subtitle_lines = wrap(view.subtitle, SUBTITLE_SIZE, text_width)
    if subtitle_lines:
        y += SUBTITLE_GAP
    for line in subtitle_lines:
        primitives.append(
            TextRun(MARGIN_X, y, line.text, SUBTITLE_SIZE, 400, SLATE, Role.SUBTITLE)
        )
        y += SUBTITLE_SIZE + SUBTITLE_LINE_GAP

    address_lines = wrap(view.address, ADDRESS_SIZE, text_width)
    if address_lines:
        y += ADDRESS_GAP
        for line in address_lines:
            primitives.append(
                TextRun(MARGIN_X, y, line.text, ADDRESS_SIZE, 400, MUTED, Role.ADDRESS)
            )
            y += ADDRESS_SIZE + ADDRESS_LINE_GAP
        y += ADDRESS_BOTTOM_MARGIN

    if view.types:
        _flow_badges(view.types, y, width, primitives)

    footer_y = height - FOOTER_OFFSET
    if isinstance(view, AttendanceView):
        if view.sober_time:
            primitives.append(
                TextRun(
                    width - MARGIN_X,
                    footer_y - SOBER_LIFT,
                    f"{view.sober_time} sober",
                    SOBER_SIZE,
                    600,
                    INK,
                    Role.SOBER_TIME,
                    anchor="end",
                )
            )
    elif isinstance(view, MeetingView) and view.share_url:
        block = _qr_block(view.share_url, width, footer_y)
        if block is not None:
            primitives.append(block)

    primitives.append(
        TextRun(MARGIN_X, footer_y, BRAND, FOOTER_SIZE, 600, SLATE, Role.FOOTER)
    )
    return primitives


def _flow_badges(
    labels: tuple[str, ...],
    baseline: float,
    width: int,
    primitives: List[Primitive],
) -> None:
    """Append badges to ``primitives`` left to right, wrapping full rows."""

    y = baseline + BADGE_TOP_MARGIN
    x = MARGIN_X
    row_end = MARGIN_X + (width - MARGIN_X - BADGE_RIGHT_MARGIN)
    for label in labels:
        badge = measure_badge(label)
        if x > MARGIN_X and x + badge.width > row_end:
            x = MARGIN_X
            y += badge.height + BADGE_GAP
        primitives.append(
            BadgeRun(
                box=RoundedRect(
                    x,
                    y - BADGE_SIZE - BADGE_PAD_Y,
                    badge.width,
                    badge.height,
                    BADGE_RADIUS,
                    badge.background,
                ),
                label=TextRun(
                    x + BADGE_PAD_X,
                    y - BADGE_TEXT_LIFT,
                    label,
                    BADGE_SIZE,
                    500,
                    badge.foreground,
                    Role.BADGE,
                ),
            )
        )
        x += badge.width + BADGE_GAP


def _qr_block(url: str, width: int, footer_y: float) -> QrBlock | None:
    try:
        matrix = encode(url)
    except PayloadTooLarge as exc:
        logger.warning("Omitting QR code for %r: %s", url, exc)
        return None
    return QrBlock(
        x=width - MARGIN_X - QR_SIZE,
        y=footer_y - QR_SIZE,
        size=QR_SIZE,
        payload=url,
        matrix=matrix,
        fill=INK,
    )
