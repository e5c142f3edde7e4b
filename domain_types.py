from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Union


class Variant(StrEnum):
    MEETING = "meeting"
    ATTENDANCE = "attendance"


class OutputFormat(StrEnum):
    SVG = "svg"
    PNG = "png"


class MissingIdentifier(ValueError):
    """Raised when a render request carries no entity identifier."""


@dataclass(frozen=True)
class RenderRequest:
    entity_id: str
    variant: Variant = Variant.MEETING
    output_format: OutputFormat = OutputFormat.PNG

    @classmethod
    def parse(
        cls,
        entity_id: str | None,
        format_param: str | None = None,
        type_param: str | None = None,
    ) -> RenderRequest:
        """Build a request from the path id and ``format``/``type`` parameters."""

        entity_id = (entity_id or "").strip()
        if not entity_id:
            raise MissingIdentifier("Missing id")
        output_format = (
            OutputFormat.SVG
            if (format_param or "").lower() == "svg"
            else OutputFormat.PNG
        )
        variant = (
            Variant.ATTENDANCE if type_param == "attendance" else Variant.MEETING
        )
        return cls(entity_id=entity_id, variant=variant, output_format=output_format)


@dataclass(frozen=True)
class MeetingView:
    variant: ClassVar[Variant] = Variant.MEETING

    title: str
    subtitle: str = ""
    address: str = ""
    types: tuple[str, ...] = ()
    share_url: str = ""


@dataclass(frozen=True)
class AttendanceView:
    variant: ClassVar[Variant] = Variant.ATTENDANCE

    title: str
    subtitle: str = ""
    address: str = ""
    types: tuple[str, ...] = ()
    sober_time: str | None = None


PreviewView = Union[MeetingView, AttendanceView]
