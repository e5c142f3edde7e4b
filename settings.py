"""Environment-driven configuration for the preview service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from fonts import DEFAULT_BOLD_FONT, DEFAULT_REGULAR_FONT, FontFiles
from meetings_api import DEFAULT_API_URL
from og_service import DEFAULT_SITE_URL
from response_cache import DEFAULT_MAX_ENTRIES, DEFAULT_TTL_SECONDS


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    site_url: str = DEFAULT_SITE_URL
    api_timeout: float | None = None
    font_files: FontFiles = FontFiles(DEFAULT_REGULAR_FONT, DEFAULT_BOLD_FONT)
    cache_ttl_seconds: float = DEFAULT_TTL_SECONDS
    cache_max_entries: int = DEFAULT_MAX_ENTRIES

    @classmethod
    def from_env(cls) -> Settings:
        """Read settings from the environment (and a ``.env`` file if present)."""

        load_dotenv()
        timeout_raw = os.getenv("MEETINGS_API_TIMEOUT", "").strip()
        bold_raw = os.getenv("OG_FONT_BOLD")
        return cls(
            api_url=os.getenv("MEETINGS_API_URL", DEFAULT_API_URL),
            site_url=os.getenv("MEETINGS_SITE_URL", DEFAULT_SITE_URL),
            api_timeout=_number("MEETINGS_API_TIMEOUT", timeout_raw) if timeout_raw else None,
            font_files=FontFiles(
                regular=Path(os.getenv("OG_FONT_REGULAR", str(DEFAULT_REGULAR_FONT))),
                bold=Path(bold_raw) if bold_raw else DEFAULT_BOLD_FONT,
            ),
            cache_ttl_seconds=_number(
                "OG_CACHE_TTL_SECONDS",
                os.getenv("OG_CACHE_TTL_SECONDS", str(DEFAULT_TTL_SECONDS)),
            ),
            cache_max_entries=int(
                _number(
                    "OG_CACHE_MAX_ENTRIES",
                    os.getenv("OG_CACHE_MAX_ENTRIES", str(DEFAULT_MAX_ENTRIES)),
                )
            ),
        )


def _number(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid {name} '{raw}': expected a number") from exc
    if value <= 0:
        raise RuntimeError(f"Invalid {name} '{raw}': must be positive")
    return value
