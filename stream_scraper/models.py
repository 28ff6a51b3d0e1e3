from __future__ import annotations

"""
Data models for Stream Scraper.

Small value objects that travel between the index client, the filters,
the ranking engine and the HTTP shim. Nothing in here talks to the network.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

CATALOG_PREFIX = "tt"
BYTES_PER_GB = 1024 ** 3
DISPLAY_NAME_LENGTH = 20

T = TypeVar("T")


class QualityTier(Enum):
    """Coarse resolution buckets, declared in output priority order."""

    UHD = "4K"
    FHD = "1080p"
    HD = "720p"
    SD = "SD"

    @classmethod
    def ordered(cls) -> Tuple["QualityTier", ...]:
        """Return every tier in the order results are emitted."""

        return (cls.UHD, cls.FHD, cls.HD, cls.SD)

    @classmethod
    def from_tag(cls, tag: Any) -> Optional["QualityTier"]:
        """
        Look up a tier by its tag, ignoring case.

        Parameters
        ----------
        tag : Any
            Tag as sent by the configuration form, e.g. ``"1080p"`` or ``"4k"``.

        Returns
        -------
        QualityTier | None
            Matching tier, or ``None`` when the tag is unknown.
        """

        if not isinstance(tag, str):
            return None
        wanted = tag.strip().lower()
        for tier in cls:
            if tier.value.lower() == wanted:
                return tier
        return None


@dataclass(frozen=True)
class MediaRequest:
    """What the streaming client asked for, split into its parts."""

    media_type: str
    title_key: str
    season: Optional[int] = None
    episode: Optional[int] = None

    @classmethod
    def parse(cls, media_type: str, identifier: str) -> "MediaRequest":
        """
        Split a Stremio identifier into catalog key, season and episode.

        Parameters
        ----------
        media_type : str
            ``"movie"`` or ``"series"``.
        identifier : str
            Either a bare catalog key (``tt0133093``) or ``key:season:episode``.

        Returns
        -------
        MediaRequest
            Parsed request. Season and episode stay ``None`` unless they are
            positive integers.
        """

        title_key = identifier
        season = episode = None
        if media_type == "series" or ":" in identifier:
            parts = identifier.split(":")
            title_key = parts[0]
            season = _positive_int(parts[1]) if len(parts) > 1 else None
            episode = _positive_int(parts[2]) if len(parts) > 2 else None
        return cls(media_type=media_type, title_key=title_key, season=season, episode=episode)

    @property
    def is_catalog_key(self) -> bool:
        return self.title_key.startswith(CATALOG_PREFIX)

    @property
    def wants_episode(self) -> bool:
        """``True`` for series lookups that pinned down a season and an episode."""

        return self.media_type == "series" and self.season is not None and self.episode is not None


def _positive_int(value: str) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


@dataclass(frozen=True)
class CandidateRecord:
    """A validated torrent record from the upstream index."""

    name: str
    info_hash: str
    size_bytes: int
    seeders: int
    record_id: str = ""

    @property
    def size_gb(self) -> float:
        return self.size_bytes / BYTES_PER_GB


@dataclass(frozen=True)
class StreamResult:
    """One playable entry handed back to the streaming client."""

    display_name: str
    detail_line: str
    uri: str
    tier: QualityTier

    @classmethod
    def from_record(cls, record: CandidateRecord, uri: str, tier: QualityTier) -> "StreamResult":
        """Build the user-facing labels for ``record``."""

        return cls(
            display_name=f"[{record.seeders}] {record.name[:DISPLAY_NAME_LENGTH]}",
            detail_line=f"{record.name}\nS:{record.seeders} | {record.size_gb:.1f}GB",
            uri=uri,
            tier=tier,
        )

    def to_stremio(self) -> Dict[str, Any]:
        """Render the stream object in the shape Stremio expects."""

        return {
            "name": self.display_name,
            "title": self.detail_line,
            "url": self.uri,
            "behaviorHints": {"bingeGroup": f"res-{self.tier.value}"},
        }


@dataclass(frozen=True)
class Success(Generic[T]):
    """A network call that delivered."""

    data: T


@dataclass(frozen=True)
class Degraded:
    """A network call that did not deliver, with a short human reason."""

    reason: str
