import threading
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

from redis import exceptions as redis_exceptions

from portfolio_api.rate_limit import InMemoryRateLimiter, RedisRateLimiter


class InMemoryRateLimiterTests(unittest.TestCase):
    def setUp(self):
        self.now = 0.0
        self.limiter = InMemoryRateLimiter(limit=2, window_seconds=60, clock=lambda: self.now)

    def test_limits_per_key(self):
        self.assertTrue(self.limiter.hit("a"))
        self.assertTrue(self.limiter.hit("a"))
        self.assertFalse(self.limiter.hit("a"))
        self.assertTrue(self.limiter.hit("b"))

    def test_rejected_hits_do_not_extend_the_window(self):
        self.limiter.hit("a")
        self.now = 30
        self.limiter.hit("a")
        self.now = 59
        self.assertFalse(self.limiter.hit("a"))
        self.now = 60
        self.assertTrue(self.limiter.hit("a"))
        self.assertFalse(self.limiter.hit("a"))
        self.now = 90
        self.assertTrue(self.limiter.hit("a"))

    def test_expired_keys_are_evicted(self):
        for i in range(1000):
            self.limiter.hit(f"10.0.{i // 256}.{i % 256}")
        self.assertEqual(len(self.limiter.hits), 1000)

        self.now = 600
        self.assertTrue(self.limiter.hit("192.0.2.1"))
        self.assertEqual(list(self.limiter.hits), ["192.0.2.1"])

    def test_key_is_dropped_once_its_window_empties(self):
        self.limiter.hit("a")
        self.limiter.hit("b")
        self.now = 30
        self.limiter.hit("b")
        self.now = 61
        self.assertTrue(self.limiter.hit("b"))
        self.assertNotIn("a", self.limiter.hits)
        self.assertEqual(len(self.limiter.hits["b"]), 2)

    def test_reset(self):
        self.limiter.hit("a")
        self.limiter.hit("a")
        self.limiter.reset()
        self.assertTrue(self.limiter.hit("a"))

    def test_concurrent_hits_never_exceed_limit(self):
        limiter = InMemoryRateLimiter(limit=3, window_seconds=900)
        start = threading.Barrier(16)

        def submit(_):
            start.wait()
            return limiter.hit("10.0.0.1")

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(submit, range(16)))
        self.assertEqual(results.count(True), 3)


class RedisRateLimiterTests(unittest.TestCase):
    @patch("portfolio_api.rate_limit.redis.Redis.from_url")
    def test_allows_and_records_hit(self, from_url):
        pipe = from_url.return_value.pipeline.return_value
        pipe.execute.side_effect = [[0, 1], [1, True]]
        limiter = RedisRateLimiter(url="redis://localhost:6379/0", limit=3)

        self.assertTrue(limiter.hit("10.0.0.1"))
        from_url.assert_called_once_with("redis://localhost:6379/0")
        pipe.zadd.assert_called_once()
        self.assertEqual(pipe.zadd.call_args[0][0], "portfolio:contact:10.0.0.1")
        pipe.expire.assert_called_once_with("portfolio:contact:10.0.0.1", 901)

    @patch("portfolio_api.rate_limit.redis.Redis.from_url")
    def test_rejects_when_window_is_full(self, from_url):
        pipe = from_url.return_value.pipeline.return_value
        pipe.execute.side_effect = [[0, 3]]
        limiter = RedisRateLimiter(url="redis://localhost:6379/0", limit=3)

        self.assertFalse(limiter.hit("10.0.0.1"))
        pipe.zadd.assert_not_called()

    @patch("portfolio_api.rate_limit.redis.Redis.from_url")
    def test_connection_loss_fails_open_and_reconnects(self, from_url):
        from_url.return_value.pipeline.side_effect = redis_exceptions.ConnectionError("reset")
        limiter = RedisRateLimiter(url="redis://localhost:6379/0")

        with self.assertLogs("portfolio_api.rate_limit", level="WARNING"):
            self.assertTrue(limiter.hit("10.0.0.1"))
        self.assertEqual(from_url.call_count, 2)


if __name__ == "__main__":
    unittest.main()
