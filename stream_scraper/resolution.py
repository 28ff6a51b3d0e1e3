from __future__ import annotations

"""Guess the resolution tier of a release from its title."""

from typing import Tuple

from .models import QualityTier

# First hit wins, so a title tagged both 2160p and 1080p counts as 4K.
_MARKERS: Tuple[Tuple[Tuple[str, ...], QualityTier], ...] = (
    (("2160P", "4K"), QualityTier.UHD),
    (("1080P",), QualityTier.FHD),
    (("720P",), QualityTier.HD),
)


def classify(title: str) -> QualityTier:
    """
    Map a free-text release title to a quality tier.

    Parameters
    ----------
    title : str
        Release name, e.g. ``"Movie.Title.2160p.BluRay"``.

    Returns
    -------
    QualityTier
        The first tier whose marker appears in the title, ``SD`` otherwise.
    """

    upper = title.upper()
    for markers, tier in _MARKERS:
        if any(marker in upper for marker in markers):
            return tier
    return QualityTier.SD
