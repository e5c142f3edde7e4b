"""Project upstream meeting/attendance payloads into preview views."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional
from urllib.parse import quote

from domain_types import AttendanceView, MeetingView, PreviewView, Variant

__all__ = [
    "attendance_view",
    "compute_sober_time",
    "day_of_week",
    "error_view",
    "format_time",
    "meeting_url",
    "meeting_view",
    "parse_types",
    "truncate",
]

TITLE_MAX = 70
SUBTITLE_MAX = 110
ADDRESS_MAX = 110
BADGE_MAX = 40
MAX_TYPES = 5

DAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
ELLIPSIS = "…"
# URI marks kept literal in the share link path
_URL_SAFE = "!~*'()"


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + ELLIPSIS


def _as_str(value: Any) -> str:
    if isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def day_of_week(value: Any) -> str:
    """Map ``0``-``6`` (or its string form) to ``Sun``-``Sat``."""

    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < len(DAYS):
        return DAYS[value]
    return ""


def format_time(value: Any) -> str:
    """Turn ``HH:MM`` into ``H:MMAM``/``H:MMPM``; unparsable hours pass through."""

    text = _as_str(value)
    if not text:
        return ""
    hour_text, _, rest = text.partition(":")
    try:
        hour = int(hour_text)
    except ValueError:
        return text
    minutes = rest.split(":", 1)[0] or "00"
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minutes}{suffix}"


def parse_types(value: Any) -> tuple[str, ...]:
    """Split a comma separated type list, keeping the first five unique names."""

    if isinstance(value, str):
        raw = value.split(",")
    elif isinstance(value, (list, tuple)):
        raw = [_as_str(item) for item in value]
    else:
        return ()

    types: list[str] = []
    seen: set[str] = set()
    for item in raw:
        name = truncate(item.strip(), BADGE_MAX)
        if not name or name in seen:
            continue
        seen.add(name)
        types.append(name)
        if len(types) == MAX_TYPES:
            break
    return tuple(types)


def _parse_date(value: Any) -> Optional[datetime]:
    text = _as_str(value)
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _plural(count: int, word: str) -> str:
    return f"{count} {word if count == 1 else word + 's'}"


def compute_sober_time(sober_date: Any, reference_date: Any) -> Optional[str]:
    """Describe the time between two dates as years/months/days.

    Uses whole elapsed days with 365-day years and 30-day months. Returns
    ``None`` for missing or invalid dates, or when the reference date
    precedes the sober date.
    """

    start = _parse_date(sober_date)
    end = _parse_date(reference_date)
    if start is None or end is None or end < start:
        return None

    total_days = (end - start) // timedelta(days=1)
    years, remaining = divmod(total_days, 365)
    months, days = divmod(remaining, 30)

    if years > 0:
        if months > 0:
            return f"{_plural(years, 'year')} {_plural(months, 'month')}"
        return _plural(years, "year")
    if months > 0:
        if days > 0:
            return f"{_plural(months, 'month')} {_plural(days, 'day')}"
        return _plural(months, "month")
    return _plural(total_days, "day")


def meeting_url(site_url: str, entity_id: str) -> str:
    base = site_url.rstrip("/")
    if not entity_id:
        return f"{base}/meeting"
    return f"{base}/meeting/{quote(entity_id, safe=_URL_SAFE)}"


def _listing_fields(meeting: Mapping[str, Any]) -> tuple[str, str, tuple[str, ...]]:
    """Return ``(subtitle, address, types)`` shared by both variants."""

    address = _as_str(meeting.get("formatted_address"))
    location = _as_str(meeting.get("location")) or address
    day = day_of_week(meeting.get("day"))
    start = format_time(meeting.get("time"))
    end = format_time(meeting.get("end_time"))

    schedule = ""
    if day and start:
        schedule = f"{day} {start}" + (f" - {end}" if end else "")
    subtitle = " • ".join(part for part in (location, schedule) if part)
    return (
        truncate(subtitle, SUBTITLE_MAX),
        truncate(address, ADDRESS_MAX),
        parse_types(meeting.get("types")),
    )


def meeting_view(payload: Mapping[str, Any], entity_id: str, site_url: str) -> MeetingView:
    payload = _as_mapping(payload)
    subtitle, address, types = _listing_fields(payload)
    return MeetingView(
        title=truncate(_as_str(payload.get("name")) or "Meeting", TITLE_MAX),
        subtitle=subtitle,
        address=address,
        types=types,
        share_url=meeting_url(site_url, entity_id),
    )


def attendance_view(payload: Mapping[str, Any]) -> AttendanceView:
    payload = _as_mapping(payload)
    meeting = _as_mapping(payload.get("Meeting"))
    user = _as_mapping(payload.get("User"))

    username = _as_str(user.get("username")) or "Someone"
    meeting_name = _as_str(meeting.get("name")) or "a meeting"
    subtitle, address, types = _listing_fields(meeting)
    return AttendanceView(
        title=truncate(f"{username} went to {meeting_name}", TITLE_MAX),
        subtitle=subtitle,
        address=address,
        types=types,
        sober_time=compute_sober_time(user.get("soberDate"), payload.get("attendanceDate")),
    )


def error_view(variant: Variant, message: str, site_url: str) -> PreviewView:
    """Placeholder view shown when the upstream entity cannot be fetched."""

    subtitle = truncate(message.strip(), SUBTITLE_MAX)
    if variant is Variant.ATTENDANCE:
        return AttendanceView(title="Attendance Not Found", subtitle=subtitle)
    return MeetingView(
        title="Meeting Not Found",
        subtitle=subtitle,
        share_url=meeting_url(site_url, ""),
    )
