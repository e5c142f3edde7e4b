"""Meetings API client used to fetch entities for preview images."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.gskis.com/api"


class UpstreamFetchFailed(RuntimeError):
    """Raised when a meeting or attendance cannot be fetched."""


@dataclass
class MeetingsApiClient:
    """Read-only client for the meetings JSON API.

    ``timeout`` is in seconds; ``None`` waits for the upstream indefinitely.
    """

    base_url: str = DEFAULT_API_URL
    timeout: float | None = None
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        base_clean = (self.base_url or "").rstrip("/")
        if not base_clean:
            raise RuntimeError("Meetings API base URL is required.")
        self.base_url = base_clean
        self._client = httpx.Client(
            base_url=base_clean,
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
            headers={"Accept": "application/json"},
        )

    def get_meeting(self, meeting_id: str) -> dict[str, Any]:
        """Fetch a meeting by id."""

        return self._get_json(f"/meetings/{quote(meeting_id, safe='')}")

    def get_attendance(self, attendance_hash: str) -> dict[str, Any]:
        """Fetch a meeting attendance by its share hash."""

        return self._get_json(
            f"/meeting-attendances/hash/{quote(attendance_hash, safe='')}"
        )

    def close(self) -> None:
        self._client.close()

    def _get_json(self, path: str) -> dict[str, Any]:
        try:
            response = self._client.get(path)
        except httpx.HTTPError as exc:
            logger.warning("Request to %s%s failed: %s", self.base_url, path, exc)
            raise UpstreamFetchFailed(str(exc) or exc.__class__.__name__) from exc

        if response.status_code == HTTPStatus.NOT_FOUND:
            raise UpstreamFetchFailed("Not found")
        if not response.is_success:
            raise UpstreamFetchFailed(f"Upstream returned {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamFetchFailed("Upstream returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise UpstreamFetchFailed("Upstream returned an unexpected payload")
        return payload
