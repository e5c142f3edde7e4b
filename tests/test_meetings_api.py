import unittest

import httpx

from meetings_api import MeetingsApiClient, UpstreamFetchFailed


def _client(handler) -> MeetingsApiClient:
    return MeetingsApiClient(
        base_url="https://api.test/api/",
        transport=httpx.MockTransport(handler),
    )


class MeetingsApiTests(unittest.TestCase):
    def test_requires_base_url(self) -> None:
        with self.assertRaises(RuntimeError):
            MeetingsApiClient(base_url="")

    def test_get_meeting(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"name": "Downtown Group"})

        payload = _client(handler).get_meeting("123")
        self.assertEqual(payload, {"name": "Downtown Group"})
        self.assertEqual(seen, ["/api/meetings/123"])

    def test_get_attendance_quotes_hash(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path.decode("ascii"))
            return httpx.Response(200, json={"User": {"username": "sam"}})

        _client(handler).get_attendance("ab/cd")
        self.assertEqual(seen, ["/api/meeting-attendances/hash/ab%2Fcd"])

    def test_not_found(self) -> None:
        client = _client(lambda request: httpx.Response(404, json={"error": "nope"}))
        with self.assertRaises(UpstreamFetchFailed) as ctx:
            client.get_meeting("999")
        self.assertEqual(str(ctx.exception), "Not found")

    def test_server_error(self) -> None:
        client = _client(lambda request: httpx.Response(502))
        with self.assertRaises(UpstreamFetchFailed) as ctx:
            client.get_meeting("1")
        self.assertEqual(str(ctx.exception), "Upstream returned 502")

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertLogs("meetings_api", level="WARNING"):
            with self.assertRaises(UpstreamFetchFailed) as ctx:
                _client(handler).get_meeting("1")
        self.assertEqual(str(ctx.exception), "connection refused")

    def test_invalid_json(self) -> None:
        client = _client(lambda request: httpx.Response(200, content=b"<html>"))
        with self.assertRaises(UpstreamFetchFailed):
            client.get_meeting("1")

    def test_non_object_payload(self) -> None:
        client = _client(lambda request: httpx.Response(200, json=[1, 2]))
        with self.assertRaises(UpstreamFetchFailed):
            client.get_meeting("1")


if __name__ == "__main__":
    unittest.main()
