from __future__ import annotations

"""
High-level stream lookup.

Takes a media identifier and the user's preferences, asks the index, filters,
ranks, and turns the winners into playable links.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from .accelerator import PassthroughAccelerator
from .apibay import ApibayClient
from .config import DEFAULT_TRACKER_LIMIT, ScraperConfig
from .filters import filter_records
from .magnet import build_magnet
from .models import Degraded, MediaRequest, StreamResult
from .ranking import rank
from .resolution import classify
from .trackers import TrackerCache


class StreamFinder:
    """Wires the index client, tracker cache and ranking into one call."""

    def __init__(
        self,
        index_client: ApibayClient,
        tracker_cache: TrackerCache,
        accelerator: Optional[PassthroughAccelerator] = None,
        tracker_limit: int = DEFAULT_TRACKER_LIMIT,
    ):
        """
        Parameters
        ----------
        index_client : ApibayClient
            Upstream torrent index.
        tracker_cache : TrackerCache
            Shared tracker list; one instance per process.
        accelerator : PassthroughAccelerator, optional
            Receives magnets when the user configured an accelerator key.
        tracker_limit : int, optional
            Trackers embedded per magnet link.
        """

        self._index = index_client
        self._trackers = tracker_cache
        self._accelerator = accelerator or PassthroughAccelerator()
        self._tracker_limit = tracker_limit

    def query_streams(self, media_type: str, identifier: str, config: ScraperConfig) -> List[StreamResult]:
        """
        Find ranked streams for one title.

        Parameters
        ----------
        media_type : str
            ``"movie"`` or ``"series"``.
        identifier : str
            ``tt0133093`` or ``tt0944947:2:5``.
        config : ScraperConfig
            The user's filter preferences.

        Returns
        -------
        list[StreamResult]
            Ranked streams; empty when nothing usable turned up, including when
            the index is down.
        """

        request = MediaRequest.parse(media_type, identifier)
        if not request.is_catalog_key:
            logging.debug("Ignoring non-catalog identifier %r", identifier)
            return []

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="trackers") as pool:
            trackers_future = pool.submit(self._trackers.get_endpoints)
            outcome = self._index.search(request.title_key)
            if isinstance(outcome, Degraded):
                logging.info("No streams for %s: %s", request.title_key, outcome.reason)
                return []

            admitted = filter_records(outcome.data, config, request)
            ranked = rank(admitted, config)
            trackers = trackers_future.result()

        results = []
        for record in ranked:
            uri = build_magnet(record, trackers, self._tracker_limit)
            if config.accelerator_key:
                uri = self._accelerator.resolve(uri, config.accelerator_key)
            results.append(StreamResult.from_record(record, uri, classify(record.name)))

        logging.info("[APIBay] Returning %d streams", len(results))
        return results
