from __future__ import annotations

"""
Admission rules for upstream records.

A record gets in if it has enough seeds, is not too fat, and, for episode
lookups, looks like it belongs to the right episode. The episode check is an
OR of loose patterns: a bare "Season 2" pack passes for any episode of
season 2, and so does "Season 20". That looseness is accepted.
"""

import logging
import re
from typing import Iterable, List

from .config import ScraperConfig
from .models import CandidateRecord, MediaRequest


def episode_patterns(season: int, episode: int) -> List[re.Pattern[str]]:
    """
    Build the patterns a release name may match for ``season``/``episode``.

    Returns
    -------
    list[re.Pattern]
        ``S02E05`` style, ``2x05`` style, and a bare ``Season 2`` mention.
    """

    return [
        re.compile(rf"S0?{season}\s?E0?{episode}", re.IGNORECASE),
        re.compile(rf"{season}x0?{episode}", re.IGNORECASE),
        re.compile(rf"Season\s?{season}", re.IGNORECASE),
    ]


def matches_episode(name: str, season: int, episode: int) -> bool:
    return any(pattern.search(name) for pattern in episode_patterns(season, episode))


def is_admissible(record: CandidateRecord, config: ScraperConfig, request: MediaRequest) -> bool:
    """
    Decide whether ``record`` survives the user's filters.

    Parameters
    ----------
    record : CandidateRecord
        Parsed upstream record.
    config : ScraperConfig
        Seed floor and size ceiling.
    request : MediaRequest
        Episode information for series lookups.

    Returns
    -------
    bool
        ``True`` when every rule lets the record through.
    """

    if record.seeders < config.min_seeds:
        return False
    if record.size_gb > config.max_size_gb:
        return False
    if request.wants_episode and not matches_episode(record.name, request.season, request.episode):
        return False
    return True


def filter_records(
    records: Iterable[CandidateRecord], config: ScraperConfig, request: MediaRequest
) -> List[CandidateRecord]:
    """Keep the admissible records, in their original order."""

    records = list(records)
    kept = [record for record in records if is_admissible(record, config, request)]
    logging.debug("Filter kept %d of %d records", len(kept), len(records))
    return kept
