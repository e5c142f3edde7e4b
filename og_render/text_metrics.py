"""Approximate glyph metrics and greedy word wrapping for OG layouts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

_WIDE = re.compile(r"[MW@#]")
_THIN = re.compile(r"[ilI'`.:;|]")
_NARROW = re.compile(r"[fjt!l]")
_FULL = re.compile(r"[0-9A-Z]")


@dataclass(frozen=True)
class Line:
    """A wrapped line and its approximate rendered width in pixels."""

    text: str
    width: float


def measure_char(ch: str, font_size: float) -> float:
    """Return the approximate advance width of ``ch`` at ``font_size``."""

    base = font_size * 0.5
    if _WIDE.match(ch):
        return base * 1.25
    if _THIN.match(ch):
        return base * 0.45
    if _NARROW.match(ch):
        return base * 0.55
    if _FULL.match(ch):
        return base * 1.0
    return base * 0.9


def measure_line(text: str, font_size: float) -> float:
    return sum(measure_char(ch, font_size) for ch in text)


def wrap(text: str, font_size: float, max_width: float) -> List[Line]:
    """Greedily wrap ``text`` into lines no wider than ``max_width``.

    Words are never split: a single word wider than ``max_width`` is
    emitted on its own line.
    """

    words = (text or "").split()
    if not words:
        return []

    lines: List[Line] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if current and measure_line(candidate, font_size) > max_width:
            lines.append(Line(current, measure_line(current, font_size)))
            current = word
        else:
            current = candidate

    if current:
        lines.append(Line(current, measure_line(current, font_size)))
    return lines
