"""Request orchestration for OG preview images."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus

from domain_data import attendance_view, error_view, meeting_view
from domain_types import OutputFormat, PreviewView, RenderRequest, Variant
from fonts import LazyFontResources
from meetings_api import MeetingsApiClient, UpstreamFetchFailed
from og_render import RasterizationFailed, RenderMode, compose, rasterize, render_vector
from response_cache import CacheKey, ResponseCache

logger = logging.getLogger(__name__)

DEFAULT_SITE_URL = "https://gskis.com"
CACHE_CONTROL = "public, max-age=300, s-maxage=300, stale-while-revalidate=600"
CONTENT_TYPES = {
    OutputFormat.SVG: "image/svg+xml; charset=utf-8",
    OutputFormat.PNG: "image/png",
}


@dataclass(frozen=True)
class OgResponse:
    status: int
    body: bytes
    content_type: str | None = None
    etag: str | None = None

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Cache-Control": CACHE_CONTROL}
        if self.etag:
            headers["ETag"] = self.etag
        return headers


class OgImageService:
    """Fetch, lay out, render and cache preview images."""

    def __init__(
        self,
        api: MeetingsApiClient,
        cache: ResponseCache,
        fonts: LazyFontResources,
        site_url: str = DEFAULT_SITE_URL,
    ) -> None:
        self.api = api
        self.cache = cache
        self.fonts = fonts
        self.site_url = site_url.rstrip("/")

    def handle(self, request: RenderRequest, if_none_match: str | None = None) -> OgResponse:
        """Serve ``request`` from the cache or render and cache it."""

        key = CacheKey(request.entity_id, request.output_format.value, request.variant.value)
        cached = self.cache.get(key, if_none_match)
        if cached is not None:
            entry = cached.entry
            if cached.not_modified:
                return OgResponse(HTTPStatus.NOT_MODIFIED, b"", etag=entry.etag)
            return OgResponse(entry.status, entry.body, entry.content_type, entry.etag)

        try:
            status, body = self.render(request)
        except RasterizationFailed as exc:
            logger.error("Rasterizing %s failed: %s", key, exc)
            return OgResponse(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                b"Failed to render image",
                "text/plain; charset=utf-8",
            )

        content_type = CONTENT_TYPES[request.output_format]
        etag = self.cache.put(key, body, status=status, content_type=content_type)
        return OgResponse(status, body, content_type, etag)

    def render(self, request: RenderRequest) -> tuple[int, bytes]:
        """Render ``request`` without consulting the cache.

        Returns ``(status, body)``; the status is 404 when the upstream entity
        could not be fetched and a placeholder image was rendered instead.
        """

        view, status = self._load_view(request)
        primitives = compose(view)
        if request.output_format is OutputFormat.SVG:
            return status, render_vector(primitives, RenderMode.RICH).encode("utf-8")
        document = render_vector(primitives, RenderMode.PLAIN)
        return status, rasterize(document, self.fonts.get())

    def _load_view(self, request: RenderRequest) -> tuple[PreviewView, int]:
        try:
            if request.variant is Variant.ATTENDANCE:
                payload = self.api.get_attendance(request.entity_id)
                return attendance_view(payload), HTTPStatus.OK
            payload = self.api.get_meeting(request.entity_id)
            return meeting_view(payload, request.entity_id, self.site_url), HTTPStatus.OK
        except UpstreamFetchFailed as exc:
            logger.info(
                "Rendering placeholder for %s %s: %s",
                request.variant,
                request.entity_id,
                exc,
            )
            return error_view(request.variant, str(exc), self.site_url), HTTPStatus.NOT_FOUND
