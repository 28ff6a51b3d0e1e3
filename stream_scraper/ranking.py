from __future__ import annotations

"""
Ranking and quota engine.

Groups records per quality tier, lets the best-seeded ones float to the top
of each tier and cuts every tier to the user's quota.
"""

import logging
from typing import Dict, Iterable, List

from .config import ScraperConfig
from .models import CandidateRecord, QualityTier
from .resolution import classify


def group_by_tier(
    records: Iterable[CandidateRecord], allowed: Iterable[QualityTier]
) -> Dict[QualityTier, List[CandidateRecord]]:
    """
    Bucket records by classified tier, dropping tiers that are not allowed.

    Returns
    -------
    dict[QualityTier, list[CandidateRecord]]
        One list per allowed tier, records kept in input order.
    """

    allowed = set(allowed)
    groups: Dict[QualityTier, List[CandidateRecord]] = {tier: [] for tier in QualityTier.ordered() if tier in allowed}
    for record in records:
        tier = classify(record.name)
        if tier in groups:
            groups[tier].append(record)
    return groups


def rank(records: Iterable[CandidateRecord], config: ScraperConfig) -> List[CandidateRecord]:
    """
    Order records tier by tier, best seeded first, within the per-tier quota.

    Parameters
    ----------
    records : Iterable[CandidateRecord]
        Records that already passed the filters.
    config : ScraperConfig
        Allowed tiers and the per-tier quota.

    Returns
    -------
    list[CandidateRecord]
        4K first, then 1080p, 720p and SD. Ties keep their input order.

    Raises
    ------
    ValueError
        If the quota is below one, which no valid config can produce.
    """

    quota = config.max_results_per_resolution
    if quota < 1:
        raise ValueError(f"Per-tier quota must be positive, got {quota}")

    ranked: List[CandidateRecord] = []
    for tier, group in group_by_tier(records, config.allowed_resolutions).items():
        if not group:
            continue
        best = sorted(group, key=lambda record: record.seeders, reverse=True)[:quota]
        logging.debug("Tier %s: %d candidates, keeping %d", tier.value, len(group), len(best))
        ranked.extend(best)
    return ranked
