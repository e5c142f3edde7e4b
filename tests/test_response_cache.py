import unittest

from response_cache import CacheKey, ResponseCache, make_etag


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class ResponseCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.cache = ResponseCache(ttl_seconds=600, max_entries=100, clock=self.clock)
        self.key = CacheKey("123", "png", "meeting")

    def test_miss(self) -> None:
        self.assertIsNone(self.cache.get(self.key))

    def test_put_then_get(self) -> None:
        etag = self.cache.put(self.key, b"image-bytes")
        lookup = self.cache.get(self.key)
        self.assertIsNotNone(lookup)
        assert lookup is not None
        self.assertFalse(lookup.not_modified)
        self.assertEqual(lookup.entry.body, b"image-bytes")
        self.assertEqual(lookup.entry.etag, etag)
        self.assertEqual(self.cache.get(self.key).entry.etag, etag)

    def test_etag_is_weak_validator(self) -> None:
        etag = self.cache.put(self.key, b"body")
        self.assertTrue(etag.startswith('W/"') and etag.endswith('"'))
        self.assertEqual(etag, make_etag(b"body"))
        self.assertNotEqual(etag, make_etag(b"other body"))

    def test_matching_validator_is_not_modified(self) -> None:
        etag = self.cache.put(self.key, b"body")
        lookup = self.cache.get(self.key, etag)
        assert lookup is not None
        self.assertTrue(lookup.not_modified)

    def test_stale_validator_returns_entry(self) -> None:
        self.cache.put(self.key, b"body")
        lookup = self.cache.get(self.key, 'W/"something-else"')
        assert lookup is not None
        self.assertFalse(lookup.not_modified)
        self.assertEqual(lookup.entry.body, b"body")

    def test_entries_expire(self) -> None:
        self.cache.put(self.key, b"body")
        self.clock.now += 600
        self.assertIsNotNone(self.cache.get(self.key))
        self.clock.now += 1
        self.assertIsNone(self.cache.get(self.key))
        self.assertEqual(len(self.cache), 0)

    def test_capacity_is_bounded(self) -> None:
        for i in range(101):
            self.cache.put(CacheKey(str(i), "png", "meeting"), b"x")
        self.assertEqual(len(self.cache), 100)
        self.assertIsNone(self.cache.get(CacheKey("0", "png", "meeting")))
        self.assertIsNotNone(self.cache.get(CacheKey("100", "png", "meeting")))

    def test_replacing_key_does_not_evict(self) -> None:
        small = ResponseCache(max_entries=2, clock=self.clock)
        small.put(CacheKey("a", "png", "meeting"), b"1")
        small.put(CacheKey("b", "png", "meeting"), b"2")
        small.put(CacheKey("a", "png", "meeting"), b"3")
        self.assertEqual(len(small), 2)
        self.assertEqual(small.get(CacheKey("a", "png", "meeting")).entry.body, b"3")

    def test_keys_distinguish_format_and_variant(self) -> None:
        self.cache.put(CacheKey("1", "png", "meeting"), b"png")
        self.assertIsNone(self.cache.get(CacheKey("1", "svg", "meeting")))
        self.assertIsNone(self.cache.get(CacheKey("1", "png", "attendance")))

    def test_status_is_kept(self) -> None:
        self.cache.put(self.key, b"missing", status=404, content_type="image/svg+xml")
        entry = self.cache.get(self.key).entry
        self.assertEqual(entry.status, 404)
        self.assertEqual(entry.content_type, "image/svg+xml")

    def test_clear(self) -> None:
        self.cache.put(self.key, b"body")
        self.cache.clear()
        self.assertIsNone(self.cache.get(self.key))

    def test_rejects_zero_capacity(self) -> None:
        with self.assertRaises(ValueError):
            ResponseCache(max_entries=0)


if __name__ == "__main__":
    unittest.main()
