from __future__ import annotations

"""
Convenience imports for the Stream Scraper package.

Reach the important stuff so downstream code can grab it
without complaining.
"""

from .apibay import ApibayClient
from .config import ConfigError, ConfigLoader, ScraperConfig, ServiceConfig
from .finder import StreamFinder
from .models import QualityTier, StreamResult
from .trackers import TrackerCache

__all__ = [
    "ApibayClient",
    "ConfigError",
    "ConfigLoader",
    "ScraperConfig",
    "ServiceConfig",
    "StreamFinder",
    "QualityTier",
    "StreamResult",
    "TrackerCache",
]
