from __future__ import annotations

"""
Tracker list cache.

Keeps a list of public tracker announce URLs around for the life of the
process, refreshing it from a remote text file every so often. The list only
adds peer hints to magnet links, so a stale copy is fine and an unreachable
source just means we carry on with what we have, or with a built-in list.
"""

import logging
import threading
import time
from typing import Callable, List, Optional, Tuple, Union

import requests

from .config import TrackerConfig
from .models import Degraded, Success

ANNOUNCE_SCHEMES = ("udp://", "http://", "https://", "wss://")

FALLBACK_TRACKERS: Tuple[str, ...] = (
    "udp://tracker.opentrackr.org:1337/announce",
    "udp://9.rarbg.com:2810/announce",
    "udp://tracker.openbittorrent.com:80/announce",
    "udp://tracker.torrent.eu.org:451/announce",
    "udp://open.stealth.si:80/announce",
    "udp://vibe.sleepyinternetfun.xyz:1738/announce",
    "udp://tracker1.bt.moack.co.kr:80/announce",
    "udp://tracker.zerobytes.xyz:1337/announce",
    "udp://explodie.org:6969/announce",
    "udp://tracker.leechers-paradise.org:6969/announce",
)


class TrackerCache:
    """Process-wide, time-boxed copy of the public tracker list."""

    def __init__(
        self,
        config: Optional[TrackerConfig] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Parameters
        ----------
        config : TrackerConfig, optional
            Source URL, fetch timeout and freshness window.
        session : requests.Session, optional
            HTTP session to fetch with. When omitted, each thread gets its own.
        clock : callable, optional
            Seconds counter, swappable so tests can fast-forward time.
        """

        self.config = config or TrackerConfig()
        self._session = session
        self._session_local = threading.local()
        self._clock = clock
        self._lock = threading.Lock()
        self._endpoints: Tuple[str, ...] = ()
        self._refreshed_at: Optional[float] = None

    @property
    def endpoints(self) -> Tuple[str, ...]:
        return self._endpoints

    def is_stale(self) -> bool:
        """``True`` when the cache is empty or older than the freshness window."""

        if not self._endpoints or self._refreshed_at is None:
            return True
        return self._clock() - self._refreshed_at > self.config.freshness_seconds

    def get_endpoints(self) -> List[str]:
        """
        Return the tracker list, refreshing it first when stale.

        Returns
        -------
        list[str]
            Never empty: fresh, stale, or fallback trackers.
        """

        if self.is_stale():
            self.refresh()
        return list(self._endpoints)

    def _get_session(self) -> requests.Session:
        """
        Return the injected session, or a thread-local one.
        """

        if self._session is not None:
            return self._session
        session = getattr(self._session_local, "session", None)
        if session is None:
            session = requests.Session()
            self._session_local.session = session
        return session

    def refresh(self) -> Union[Success[Tuple[str, ...]], Degraded]:
        """
        Fetch the remote list once and store it.

        Returns
        -------
        Success | Degraded
            ``Success`` with the new list, or ``Degraded`` when the fetch failed
            and the cache kept (or fell back to) what it could.
        """

        outcome = self._fetch()
        with self._lock:
            if isinstance(outcome, Success):
                self._endpoints = outcome.data
                self._refreshed_at = self._clock()
                logging.info("Updated trackers: %d found", len(outcome.data))
            else:
                logging.warning("Tracker fetch failed (%s). Using fallbacks.", outcome.reason)
                if not self._endpoints:
                    self._endpoints = FALLBACK_TRACKERS
        return outcome

    def _fetch(self) -> Union[Success[Tuple[str, ...]], Degraded]:
        logging.debug("Fetching trackers from %s", self.config.url)
        try:
            response = self._get_session().get(self.config.url, timeout=self.config.request_timeout)
        except requests.RequestException as exc:
            return Degraded(f"request failed: {exc}")

        if response.status_code != 200:
            return Degraded(f"status {response.status_code}")

        lines = [line.strip() for line in response.text.splitlines() if line.strip()]
        if not lines:
            return Degraded("empty tracker list")
        endpoints = tuple(line for line in lines if line.lower().startswith(ANNOUNCE_SCHEMES))
        if not endpoints:
            return Degraded("malformed tracker list")
        if len(endpoints) < len(lines):
            logging.debug("Dropped %d tracker lines without an announce scheme", len(lines) - len(endpoints))
        return Success(endpoints)
