"""QR matrix encoding for the meeting preview QR block."""

from __future__ import annotations

from dataclasses import dataclass

import qrcode
from qrcode.constants import ERROR_CORRECT_L
from qrcode.exceptions import DataOverflowError


class PayloadTooLarge(ValueError):
    """Raised when the payload does not fit in a version 40 QR code."""


@dataclass(frozen=True)
class QrMatrix:
    """Square grid of QR modules, ``True`` for dark cells."""

    modules: tuple[tuple[bool, ...], ...]

    @property
    def module_count(self) -> int:
        return len(self.modules)

    def is_dark(self, row: int, col: int) -> bool:
        if not (0 <= row < self.module_count and 0 <= col < self.module_count):
            raise IndexError(f"Module ({row}, {col}) outside {self.module_count}x{self.module_count} grid")
        return self.modules[row][col]


def encode(text: str) -> QrMatrix:
    """Encode ``text`` at error-correction level L using the smallest version."""

    qr = qrcode.QRCode(version=None, error_correction=ERROR_CORRECT_L, border=0)
    qr.add_data(text)
    # newer qrcode releases report overflow as an invalid version 41
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as exc:
        raise PayloadTooLarge(
            f"Payload of {len(text.encode('utf-8'))} bytes exceeds QR capacity"
        ) from exc

    return QrMatrix(
        modules=tuple(
            tuple(bool(cell) for cell in row) for row in qr.get_matrix()
        )
    )
