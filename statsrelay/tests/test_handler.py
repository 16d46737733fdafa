import unittest
from unittest.mock import MagicMock, patch

import requests

from statsrelay.cache import InMemoryStatsCache
from statsrelay.handler import RequestHandler
from statsrelay.tests.test_cache import FakeClock
from statsrelay.types import DownloadStats
from statsrelay.upstream import PypistatsClient

TRUSTED = "https://pypi.org/project/numpy/"
EIGHT_HOURS = 8 * 60 * 60


class FakeClient:
    """Returns queued results in order and records the identifiers it saw."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def fetch(self, package_id):
        self.calls.append(package_id)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _stats(package_id="numpy", day=100000, week=700000, month=3000000):
    return DownloadStats(package_id, day, week, month)


class RequestHandlerTests(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = InMemoryStatsCache(clock=self.clock)

    def _handler(self, client, **kwargs):
        return RequestHandler(self.cache, client, **kwargs)

    def test_numpy_scenario(self):
        client = FakeClient(_stats())
        result = self._handler(client).handle("numpy", TRUSTED)
        self.assertEqual(
            result,
            DownloadStats(
                package_id="numpy",
                downloads_lastday=100000,
                downloads_lastweek=700000,
                downloads_lastmonth=3000000,
            ),
        )
        self.assertEqual(client.calls, ["numpy"])

    def test_empty_or_whitespace_package_id(self):
        client = FakeClient()
        handler = self._handler(client, enforce_referrer=False)
        self.cache.set(" ", _stats(" "), EIGHT_HOURS)
        for package_id in ("", "   ", "\t", None):
            self.assertIsNone(handler.handle(package_id, TRUSTED))
        self.assertEqual(client.calls, [])

    def test_untrusted_referrer_rejected_before_cache(self):
        self.cache.set("foo", _stats("foo"), EIGHT_HOURS)
        client = FakeClient()
        handler = self._handler(client)
        for referrer in ("https://evil.com", "", "   ", None, "http://pypi.org"):
            self.assertIsNone(handler.handle("foo", referrer))
        self.assertEqual(client.calls, [])
        self.assertIsNotNone(handler.handle("foo", TRUSTED))

    def test_referrer_check_bypassed_in_development(self):
        client = FakeClient(_stats())
        handler = self._handler(client, enforce_referrer=False)
        self.assertEqual(handler.handle("numpy", None), _stats())

    def test_custom_trusted_origin(self):
        client = FakeClient(_stats())
        handler = self._handler(client, trusted_origin="https://test.pypi.org")
        self.assertIsNone(handler.handle("numpy", TRUSTED))
        self.assertIsNotNone(handler.handle("numpy", "https://test.pypi.org/x"))

    def test_cache_hit_suppresses_second_fetch(self):
        first = _stats(day=1)
        client = FakeClient(first, _stats(day=2))
        handler = self._handler(client)

        self.assertEqual(handler.handle("requests", TRUSTED), first)
        self.clock.advance(EIGHT_HOURS - 1)
        self.assertEqual(handler.handle("requests", TRUSTED), first)
        self.assertEqual(len(client.calls), 1)

    def test_expired_entry_triggers_fresh_fetch(self):
        client = FakeClient(_stats(day=1), _stats(day=2))
        handler = self._handler(client)

        handler.handle("requests", TRUSTED)
        self.clock.advance(EIGHT_HOURS)
        result = handler.handle("requests", TRUSTED)

        self.assertEqual(result.downloads_lastday, 2)
        self.assertEqual(len(client.calls), 2)

    def test_upstream_failure_does_not_populate_cache(self):
        client = FakeClient(None, _stats())
        handler = self._handler(client)

        self.assertIsNone(handler.handle("numpy", TRUSTED))
        self.assertIsNone(self.cache.get("numpy"))
        self.assertEqual(len(self.cache), 0)
        # Next request goes upstream again.
        self.assertEqual(handler.handle("numpy", TRUSTED), _stats())

    @patch("statsrelay.upstream.requests.Session")
    def test_transport_failing_every_attempt_leaves_cache_empty(
        self, mock_session_cls
    ):
        session = mock_session_cls.return_value.__enter__.return_value
        session.get.side_effect = requests.ConnectionError("unreachable")
        sleep = MagicMock()
        handler = self._handler(PypistatsClient(sleep=sleep))

        self.assertIsNone(handler.handle("numpy", TRUSTED))
        self.assertEqual(session.get.call_count, 3)
        self.assertEqual(sleep.call_count, 3)
        self.assertEqual(len(self.cache), 0)

    def test_unexpected_client_error_is_contained(self):
        client = FakeClient(RuntimeError("boom"))
        handler = self._handler(client)
        self.assertIsNone(handler.handle("numpy", TRUSTED))
        self.assertEqual(len(self.cache), 0)

    def test_raw_identifier_is_cache_key_and_trimmed_goes_upstream(self):
        client = FakeClient(_stats(), _stats())
        handler = self._handler(client)

        handler.handle(" numpy ", TRUSTED)
        self.assertIsNotNone(self.cache.get(" numpy "))
        self.assertIsNone(self.cache.get("numpy"))

        handler.handle("numpy", TRUSTED)
        self.assertEqual(client.calls, ["numpy", "numpy"])
        self.assertEqual(len(self.cache), 2)

    def test_configured_ttl_is_used(self):
        client = FakeClient(_stats(), _stats(day=5))
        handler = self._handler(client, ttl_seconds=60)
        handler.handle("numpy", TRUSTED)
        self.clock.advance(60)
        self.assertEqual(handler.handle("numpy", TRUSTED).downloads_lastday, 5)


if __name__ == "__main__":
    unittest.main()
