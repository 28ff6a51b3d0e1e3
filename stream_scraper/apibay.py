from __future__ import annotations

"""
Apibay client logic.

Sends the catalog key to the index, then runs whatever comes back through a
strict parser so the rest of the pipeline only ever sees well-formed records.
"""

import logging
import re
import threading
from typing import Any, Iterable, List, Optional, Union

import requests

from .config import IndexConfig
from .models import CandidateRecord, Degraded, Success

SENTINEL_ID = "0"
_INFO_HASH = re.compile(r"^[0-9a-fA-F]{40}$")


def _safe_int(value: Any) -> Optional[int]:
    """
    Coerce a value into an integer, shrugging off commas and weird types.

    Parameters
    ----------
    value : Any
        Size or seed count from the index, number or numeric string.

    Returns
    -------
    int | None
        Parsed integer, or ``None`` if it wasn't meant to be.
    """

    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip().replace(",", ""))
    except ValueError:
        return None


def is_sentinel(payload: Any) -> bool:
    """``True`` when the index answered with its one-item "no results" placeholder."""

    if not isinstance(payload, list) or not payload:
        return False
    first = payload[0]
    return isinstance(first, dict) and str(first.get("id")) == SENTINEL_ID


def parse_record(item: Any) -> Optional[CandidateRecord]:
    """
    Validate one raw index item.

    Parameters
    ----------
    item : Any
        Decoded JSON element. Expected keys: ``name``, ``info_hash``,
        ``size``, ``seeders`` and ``id``.

    Returns
    -------
    CandidateRecord | None
        The record, or ``None`` if any required field is missing or bogus.
    """

    if not isinstance(item, dict):
        return None

    record_id = str(item.get("id", ""))
    if record_id == SENTINEL_ID:
        return None

    name = item.get("name")
    info_hash = item.get("info_hash")
    if not isinstance(name, str) or not name.strip():
        return None
    if not isinstance(info_hash, str) or not _INFO_HASH.match(info_hash):
        return None

    size_bytes = _safe_int(item.get("size"))
    seeders = _safe_int(item.get("seeders"))
    if size_bytes is None or seeders is None or size_bytes < 0 or seeders < 0:
        return None

    return CandidateRecord(
        name=name.strip(),
        info_hash=info_hash,
        size_bytes=size_bytes,
        seeders=seeders,
        record_id=record_id,
    )


def parse_records(payload: Iterable[Any]) -> List[CandidateRecord]:
    """Parse every item, quietly dropping the ones that don't hold up."""

    records: List[CandidateRecord] = []
    for item in payload:
        record = parse_record(item)
        if record is None:
            logging.debug("Skipping malformed index item: %r", item)
            continue
        records.append(record)
    return records


class ApibayClient:
    """Thin wrapper around requests.Session dedicated to the apibay JSON API."""

    def __init__(self, config: Optional[IndexConfig] = None):
        """
        Parameters
        ----------
        config : IndexConfig, optional
            Endpoint, User-Agent and timeout. Defaults to the public apibay.
        """

        self.config = config or IndexConfig()
        self._session_local = threading.local()

    def _make_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({"User-Agent": self.config.user_agent, "Accept": "application/json"})
        return session

    def _get_session(self) -> requests.Session:
        """
        Return a thread-local session instance.
        """

        session = getattr(self._session_local, "session", None)
        if session is None:
            session = self._make_session()
            self._session_local.session = session
        return session

    def search(self, query: str) -> Union[Success[List[CandidateRecord]], Degraded]:
        """
        Ask the index for torrents matching ``query``.

        Parameters
        ----------
        query : str
            Usually a catalog key such as ``tt0133093``.

        Returns
        -------
        Success | Degraded
            Parsed records, or the reason nothing usable came back.
        """

        logging.info("[APIBay] Searching: %s", query)
        try:
            response = self._get_session().get(
                self.config.url,
                params={"q": query, "cat": self.config.category},
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as exc:
            logging.error("APIBay request failed: %s", exc)
            return Degraded(f"request failed: {exc}")

        if response.status_code != 200:
            logging.warning("APIBay status %s, head: %r", response.status_code, response.text[:200])
            return Degraded(f"status {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            logging.warning("APIBay non-JSON head: %r", response.text[:200])
            return Degraded("non-JSON response")

        if not isinstance(payload, list) or not payload or is_sentinel(payload):
            logging.info("[APIBay] No results found.")
            return Degraded("no results")

        records = parse_records(payload)
        logging.debug("APIBay returned %d items, %d usable", len(payload), len(records))
        return Success(records)
