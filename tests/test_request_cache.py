import unittest

from uvguard.request_cache import RequestCache, cache_key
from tests._fixtures import make_uv_response


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestCacheKey(unittest.TestCase):
    def test_rounds_to_four_decimals(self):
        self.assertEqual(cache_key(37.7749, -122.4194), "37.7749,-122.4194")

    def test_nearby_coordinates_collide(self):
        self.assertEqual(cache_key(37.77491, -122.41941), cache_key(37.77492, -122.41939))
        self.assertEqual(cache_key(37.77491, -122.41941), "37.7749,-122.4194")

    def test_distant_coordinates_do_not_collide(self):
        self.assertNotEqual(cache_key(37.7749, -122.4194), cache_key(37.7751, -122.4194))


class TestRequestCache(unittest.TestCase):
    def test_get_missing_returns_none(self):
        self.assertIsNone(RequestCache().get(0.0, 0.0))

    def test_fresh_entry_is_returned(self):
        clock = FakeClock()
        cache = RequestCache(ttl_seconds=300, clock=clock)
        payload = make_uv_response()
        cache.put(37.7749, -122.4194, payload)
        clock.now += 299
        self.assertIs(cache.get(37.7749, -122.4194), payload)

    def test_stale_entry_is_absent_but_not_evicted(self):
        clock = FakeClock()
        cache = RequestCache(ttl_seconds=300, clock=clock)
        cache.put(37.7749, -122.4194, make_uv_response())
        clock.now += 300
        self.assertIsNone(cache.get(37.7749, -122.4194))
        self.assertEqual(len(cache), 1)
        self.assertIn("37.7749,-122.4194", cache)

    def test_put_overwrites_and_refreshes(self):
        clock = FakeClock()
        cache = RequestCache(ttl_seconds=300, clock=clock)
        cache.put(37.7749, -122.4194, make_uv_response(uv=1.0))
        clock.now += 400
        newer = make_uv_response(uv=2.0)
        cache.put(37.77491, -122.41941, newer)
        self.assertIs(cache.get(37.7749, -122.4194), newer)
        self.assertEqual(len(cache), 1)

    def test_max_entries_evicts_oldest(self):
        cache = RequestCache(max_entries=2)
        cache.put(1.0, 1.0, make_uv_response(lat=1.0, lng=1.0))
        cache.put(2.0, 2.0, make_uv_response(lat=2.0, lng=2.0))
        cache.put(3.0, 3.0, make_uv_response(lat=3.0, lng=3.0))
        self.assertEqual(len(cache), 2)
        self.assertIsNone(cache.get(1.0, 1.0))
        self.assertIsNotNone(cache.get(3.0, 3.0))

    def test_clear(self):
        cache = RequestCache()
        cache.put(1.0, 1.0, make_uv_response())
        cache.clear()
        self.assertEqual(len(cache), 0)


if __name__ == "__main__":
    unittest.main()
