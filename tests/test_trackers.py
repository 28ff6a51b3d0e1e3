from __future__ import annotations

"""Tests for the tracker list cache, without bothering GitHub."""

import threading
import unittest
from unittest.mock import MagicMock

import requests

from stream_scraper.config import TrackerConfig
from stream_scraper.models import Degraded, Success
from stream_scraper.trackers import FALLBACK_TRACKERS, TrackerCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _response(text: str, status: int = 200) -> MagicMock:
    return MagicMock(status_code=status, text=text)


class TrackerCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = MagicMock()
        self.clock = FakeClock()
        self.cache = TrackerCache(TrackerConfig(url="http://trackers.example/list.txt"), self.session, self.clock)

    def test_cold_cache_fetches_and_strips_blank_lines(self) -> None:
        self.session.get.return_value = _response("udp://a:1/announce\n\n  udp://b:2/announce  \n")
        self.assertEqual(self.cache.get_endpoints(), ["udp://a:1/announce", "udp://b:2/announce"])
        self.session.get.assert_called_once_with("http://trackers.example/list.txt", timeout=3.0)

    def test_fresh_cache_is_reused(self) -> None:
        self.session.get.return_value = _response("udp://a:1/announce\n")
        self.cache.get_endpoints()
        self.clock.now += 14 * 60
        self.cache.get_endpoints()
        self.assertEqual(self.session.get.call_count, 1)

    def test_stale_cache_refreshes(self) -> None:
        self.session.get.return_value = _response("udp://a:1/announce\n")
        self.cache.get_endpoints()
        self.clock.now += 15 * 60 + 1
        self.session.get.return_value = _response("udp://c:3/announce\n")
        self.assertEqual(self.cache.get_endpoints(), ["udp://c:3/announce"])
        self.assertEqual(self.session.get.call_count, 2)

    def test_unreachable_source_on_cold_cache_uses_fallback(self) -> None:
        self.session.get.side_effect = requests.Timeout("too slow")
        endpoints = self.cache.get_endpoints()
        self.assertEqual(endpoints, list(FALLBACK_TRACKERS))
        self.assertGreaterEqual(len(endpoints), 3)

    def test_failure_keeps_stale_data(self) -> None:
        self.session.get.return_value = _response("udp://a:1/announce\n")
        self.cache.get_endpoints()
        self.clock.now += 16 * 60
        self.session.get.side_effect = requests.ConnectionError("down")
        self.assertEqual(self.cache.get_endpoints(), ["udp://a:1/announce"])

    def test_refresh_reports_outcome(self) -> None:
        self.session.get.return_value = _response("", status=200)
        self.assertIsInstance(self.cache.refresh(), Degraded)
        self.session.get.return_value = _response("oops", status=503)
        self.assertIsInstance(self.cache.refresh(), Degraded)
        self.session.get.return_value = _response("udp://a:1/announce")
        outcome = self.cache.refresh()
        self.assertIsInstance(outcome, Success)
        self.assertEqual(outcome.data, ("udp://a:1/announce",))

    def test_html_body_keeps_existing_trackers(self) -> None:
        self.session.get.return_value = _response("udp://good:1/announce\n")
        self.cache.get_endpoints()
        self.clock.now += 16 * 60
        self.session.get.return_value = _response("<html>\n<body>Rate limit exceeded</body>\n</html>")
        self.assertIsInstance(self.cache.refresh(), Degraded)
        self.assertEqual(self.cache.get_endpoints(), ["udp://good:1/announce"])

    def test_lines_without_announce_scheme_are_dropped(self) -> None:
        self.session.get.return_value = _response(
            "# comment\nudp://a:1/announce\nnot a tracker\nhttps://b.example/announce\nwss://c.example/announce\n"
        )
        self.assertEqual(
            self.cache.get_endpoints(),
            ["udp://a:1/announce", "https://b.example/announce", "wss://c.example/announce"],
        )

    def test_fallback_does_not_count_as_fresh(self) -> None:
        self.session.get.side_effect = requests.ConnectionError("down")
        self.cache.get_endpoints()
        self.assertTrue(self.cache.is_stale())


def test_sessions_are_thread_local_without_injection() -> None:
    cache = TrackerCache()
    sessions = []

    def grab_session() -> None:
        sessions.append(cache._get_session())

    threads = [threading.Thread(target=grab_session) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(sessions) == 2
    assert sessions[0] is not sessions[1]
    assert cache._get_session() is cache._get_session()


def test_injected_session_is_shared() -> None:
    session = MagicMock()
    cache = TrackerCache(session=session)
    assert cache._get_session() is session


if __name__ == "__main__":
    unittest.main()
