import unittest
from typing import Any, cast
from unittest.mock import patch
from xml.etree import ElementTree

from flask import Flask
from flask.testing import FlaskClient

from domain_types import RenderRequest
from fonts import LazyFontResources
from meetings_api import MeetingsApiClient, UpstreamFetchFailed
from og_render import RasterizationFailed
from og_service import CACHE_CONTROL, OgImageService
from og_web import create_app
from response_cache import ResponseCache

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

DOWNTOWN = {
    "name": "Downtown Group",
    "day": 1,
    "time": "19:00",
    "formatted_address": "123 Main St",
    "types": "Open,Discussion",
}


class _FakeApi:
    def __init__(self) -> None:
        self.meetings: dict[str, dict[str, Any]] = {"123": DOWNTOWN}
        self.attendances: dict[str, dict[str, Any]] = {
            "abc": {
                "Meeting": DOWNTOWN,
                "User": {"username": "sam", "soberDate": "2020-01-01"},
                "attendanceDate": "2021-06-15",
            }
        }
        self.calls: list[str] = []

    def get_meeting(self, meeting_id: str) -> dict[str, Any]:
        self.calls.append(f"meeting:{meeting_id}")
        if meeting_id not in self.meetings:
            raise UpstreamFetchFailed("Not found")
        return self.meetings[meeting_id]

    def get_attendance(self, attendance_hash: str) -> dict[str, Any]:
        self.calls.append(f"attendance:{attendance_hash}")
        if attendance_hash not in self.attendances:
            raise UpstreamFetchFailed("Not found")
        return self.attendances[attendance_hash]


class OgWebTests(unittest.TestCase):
    def setUp(self) -> None:
        self.api = _FakeApi()
        self.cache = ResponseCache()
        self.service = OgImageService(
            api=cast(MeetingsApiClient, self.api),
            cache=self.cache,
            fonts=LazyFontResources(None),
            site_url="https://gskis.com",
        )
        self.app: Flask = create_app(self.service)
        self.app.config["TESTING"] = True
        self.client: FlaskClient = self.app.test_client()

    def test_meeting_svg(self) -> None:
        response = self.client.get("/og/123?format=svg")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["Content-Type"].startswith("image/svg+xml"))
        self.assertEqual(response.headers["Cache-Control"], CACHE_CONTROL)
        self.assertIn("ETag", response.headers)

        body = response.get_data(as_text=True)
        ElementTree.fromstring(body.encode("utf-8"))
        self.assertIn("<h1>Downtown Group</h1>", body)
        self.assertIn('class="badge"', body)
        self.assertIn(">Open</span>", body)
        self.assertIn(">Discussion</span>", body)
        self.assertIn("123 Main St", body)
        self.assertIn("<title>https://gskis.com/meeting/123</title>", body)

    def test_meeting_png_is_default(self) -> None:
        response = self.client.get("/og/123")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["Content-Type"], "image/png")
        self.assertTrue(response.data.startswith(PNG_SIGNATURE))

    def test_attendance_not_found(self) -> None:
        response = self.client.get("/og/999?type=attendance")
        self.assertEqual(response.status_code, 404)
        self.assertTrue(response.data.startswith(PNG_SIGNATURE))
        self.assertIn("ETag", response.headers)

        svg = self.client.get("/og/999?type=attendance&format=svg")
        self.assertEqual(svg.status_code, 404)
        body = svg.get_data(as_text=True)
        self.assertIn("<h1>Attendance Not Found</h1>", body)
        self.assertIn("<h2>Not found</h2>", body)

    def test_not_found_placeholder_is_cached(self) -> None:
        first = self.client.get("/og/999?format=svg")
        second = self.client.get("/og/999?format=svg")
        self.assertEqual((first.status_code, second.status_code), (404, 404))
        self.assertEqual(self.api.calls, ["meeting:999"])

    def test_attendance_sober_time(self) -> None:
        response = self.client.get("/og/abc?type=attendance&format=svg")
        self.assertEqual(response.status_code, 200)
        body = response.get_data(as_text=True)
        self.assertIn("sam went to Downtown Group", body)
        self.assertIn(">1 year 5 months sober</text>", body)
        self.assertNotIn('aria-label="QR code"', body)

    def test_repeat_request_uses_cache_and_etag(self) -> None:
        first = self.client.get("/og/123")
        second = self.client.get("/og/123")
        etag = first.headers["ETag"]
        self.assertEqual(second.headers["ETag"], etag)
        self.assertEqual(second.data, first.data)
        self.assertEqual(self.api.calls, ["meeting:123"])

        conditional = self.client.get("/og/123", headers={"If-None-Match": etag})
        self.assertEqual(conditional.status_code, 304)
        self.assertEqual(conditional.data, b"")
        self.assertEqual(conditional.headers["ETag"], etag)
        self.assertEqual(conditional.headers["Cache-Control"], CACHE_CONTROL)

    def test_formats_and_variants_cached_separately(self) -> None:
        self.client.get("/og/123")
        self.client.get("/og/123?format=svg")
        self.client.get("/og/123?format=SVG")
        self.assertEqual(self.api.calls, ["meeting:123", "meeting:123"])
        self.assertEqual(len(self.cache), 2)

    def test_missing_id(self) -> None:
        response = self.client.get("/og/")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.headers["Cache-Control"], CACHE_CONTROL)
        self.assertEqual(self.api.calls, [])

    def test_blank_id(self) -> None:
        response = self.client.get("/og/%20")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.headers["Cache-Control"], CACHE_CONTROL)

    def test_share_url_too_long_for_qr_still_renders(self) -> None:
        long_id = "m" * 3000
        self.api.meetings[long_id] = DOWNTOWN
        with self.assertLogs("og_render.layout", level="WARNING"):
            response = self.client.get(f"/og/{long_id}?format=svg")
        self.assertEqual(response.status_code, 200)
        body = response.get_data(as_text=True)
        self.assertIn("<h1>Downtown Group</h1>", body)
        self.assertNotIn('aria-label="QR code"', body)

    def test_rasterization_failure(self) -> None:
        with patch("og_service.rasterize", side_effect=RasterizationFailed("boom")):
            with self.assertLogs("og_service", level="ERROR"):
                response = self.client.get("/og/123")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(len(self.cache), 0)

        recovered = self.client.get("/og/123")
        self.assertEqual(recovered.status_code, 200)

    def test_unexpected_error_is_contained(self) -> None:
        with patch.object(self.api, "get_meeting", side_effect=KeyError("boom")):
            with self.assertLogs("og_web", level="ERROR"):
                response = self.client.get("/og/123")
        self.assertEqual(response.status_code, 500)
        self.assertNotIn("Traceback", response.get_data(as_text=True))


class OgServiceRenderTests(unittest.TestCase):
    def test_render_bypasses_cache(self) -> None:
        api = _FakeApi()
        cache = ResponseCache()
        service = OgImageService(
            api=cast(MeetingsApiClient, api),
            cache=cache,
            fonts=LazyFontResources(None),
        )
        status, body = service.render(RenderRequest.parse("123", "svg"))
        self.assertEqual(status, 200)
        self.assertIn(b"Downtown Group", body)
        self.assertEqual(len(cache), 0)


if __name__ == "__main__":
    unittest.main()
