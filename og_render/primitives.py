"""Positioned draw primitives produced by the layout composer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Union

from .qr_matrix import QrMatrix


class Role(StrEnum):
    TITLE = "title"
    SUBTITLE = "subtitle"
    ADDRESS = "address"
    BADGE = "badge"
    FOOTER = "footer"
    SOBER_TIME = "sober-time"


@dataclass(frozen=True)
class TextRun:
    """Single line of text; ``y`` is the baseline."""

    x: float
    y: float
    text: str
    font_size: float
    weight: int
    fill: str
    role: Role
    anchor: str = "start"


@dataclass(frozen=True)
class RoundedRect:
    x: float
    y: float
    width: float
    height: float
    radius: float
    fill: str


@dataclass(frozen=True)
class BadgeRun:
    """Type badge: a rounded box with its label drawn on top."""

    box: RoundedRect
    label: TextRun


@dataclass(frozen=True)
class QrBlock:
    """QR matrix placed with its top-left corner at ``(x, y)``."""

    x: float
    y: float
    size: float
    payload: str
    matrix: QrMatrix
    fill: str = "#0f172a"

    @property
    def cell_size(self) -> float:
        return self.size / self.matrix.module_count


Primitive = Union[TextRun, BadgeRun, QrBlock]
