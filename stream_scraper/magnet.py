from __future__ import annotations

"""Magnet link assembly."""

from typing import Sequence
from urllib.parse import quote

from .config import DEFAULT_TRACKER_LIMIT
from .models import CandidateRecord


def build_magnet(record: CandidateRecord, trackers: Sequence[str], limit: int = DEFAULT_TRACKER_LIMIT) -> str:
    """
    Build a magnet URI for ``record``.

    Parameters
    ----------
    record : CandidateRecord
        Supplies the info hash and the display name.
    trackers : Sequence[str]
        Tracker announce URLs, best first.
    limit : int, optional
        How many trackers to embed; keeps the link short enough for clients.

    Returns
    -------
    str
        ``magnet:?xt=urn:btih:<hash>&dn=<name>&tr=...`` with every value
        percent-encoded as UTF-8.
    """

    parts = [f"magnet:?xt=urn:btih:{record.info_hash}", f"dn={quote(record.name, safe='')}"]
    parts.extend(f"tr={quote(tracker, safe='')}" for tracker in trackers[: max(limit, 0)])
    return "&".join(parts)
