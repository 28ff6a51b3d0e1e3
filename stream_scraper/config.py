from __future__ import annotations

"""
Configuration plumbing for Stream Scraper.

Two flavours live here. ``ScraperConfig`` is the per-installation filter
choice that arrives inside every request URL and must never break a request.
``ServiceConfig`` is the process-level setup read once at start-up, and that
one flips tables if anything looks shady.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, FrozenSet, Iterable, Optional

from .config_token import decode_config, encode_config
from .models import QualityTier

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_INDEX_URL = "https://apibay.org/q.php"
DEFAULT_INDEX_TIMEOUT = 8.0
DEFAULT_INDEX_CATEGORY = "0"
DEFAULT_TRACKER_LIST_URL = "https://raw.githubusercontent.com/ngosang/trackerslist/master/trackers_all.txt"
DEFAULT_TRACKER_TIMEOUT = 3.0
DEFAULT_TRACKER_FRESHNESS = 15 * 60.0
DEFAULT_TRACKER_LIMIT = 15

DEFAULT_MIN_SEEDS = 0
DEFAULT_MAX_SIZE_GB = 10.0
DEFAULT_RESOLUTIONS: FrozenSet[QualityTier] = frozenset({QualityTier.FHD, QualityTier.HD, QualityTier.UHD})
DEFAULT_MAX_RESULTS_PER_RESOLUTION = 5

_NOT_A_NUMBER = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d+)?|\.\d+")


class ConfigError(Exception):
    """Raised when the service configuration faceplants."""


@dataclass(frozen=True)
class ScraperConfig:
    """
    Filter preferences chosen by one user for one installation.

    Constructing it directly with out-of-range values is a programming error
    and raises ``ValueError``. Untrusted input should go through
    :meth:`from_dict` or :meth:`from_token`, which fall back to defaults.
    """

    min_seeds: int = DEFAULT_MIN_SEEDS
    max_size_gb: float = DEFAULT_MAX_SIZE_GB
    allowed_resolutions: FrozenSet[QualityTier] = DEFAULT_RESOLUTIONS
    max_results_per_resolution: int = DEFAULT_MAX_RESULTS_PER_RESOLUTION
    accelerator_key: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.min_seeds < 0:
            raise ValueError(f"min_seeds must be >= 0, got {self.min_seeds}")
        if self.max_size_gb <= 0:
            raise ValueError(f"max_size_gb must be > 0, got {self.max_size_gb}")
        if not self.allowed_resolutions:
            raise ValueError("allowed_resolutions must not be empty")
        if self.max_results_per_resolution < 1:
            raise ValueError(f"max_results_per_resolution must be >= 1, got {self.max_results_per_resolution}")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ScraperConfig":
        """
        Build a config from the decoded form payload.

        Parameters
        ----------
        data : dict[str, Any] | None
            Keys as written by the configuration form: ``minSeeds``,
            ``maxSize``, ``res``, ``maxResultsPerRes`` and ``rdKey``.

        Returns
        -------
        ScraperConfig
            Config where every malformed field quietly became its default.
        """

        data = data or {}
        key = data.get("rdKey")
        return cls(
            min_seeds=_parse_min_seeds(data.get("minSeeds")),
            max_size_gb=_parse_max_size(data.get("maxSize")),
            allowed_resolutions=_parse_resolutions(data.get("res")),
            max_results_per_resolution=_parse_quota(data.get("maxResultsPerRes")),
            accelerator_key=key if isinstance(key, str) and key else None,
        )

    @classmethod
    def from_token(cls, token: str | None) -> "ScraperConfig":
        return cls.from_dict(decode_config(token))

    def to_dict(self) -> dict[str, Any]:
        """Serialise back to the form's key names."""

        data: dict[str, Any] = {
            "minSeeds": self.min_seeds,
            "maxSize": f"{self.max_size_gb:g}",
            "res": [tier.value for tier in QualityTier.ordered() if tier in self.allowed_resolutions],
            "maxResultsPerRes": self.max_results_per_resolution,
        }
        if self.accelerator_key:
            data["rdKey"] = self.accelerator_key
        return data

    def to_token(self) -> str:
        return encode_config(self.to_dict())


def _parse_min_seeds(value: Any) -> int:
    try:
        seeds = int(value)
    except (TypeError, ValueError):
        return DEFAULT_MIN_SEEDS
    return seeds if seeds >= 0 else DEFAULT_MIN_SEEDS


def _parse_max_size(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return DEFAULT_MAX_SIZE_GB
    match = _LEADING_NUMBER.match(_NOT_A_NUMBER.sub("", str(value)))
    if match is None:
        logging.debug("Ignoring unparseable maxSize %r", value)
        return DEFAULT_MAX_SIZE_GB
    size = float(match.group())
    return size if size > 0 else DEFAULT_MAX_SIZE_GB


def _parse_resolutions(value: Any) -> FrozenSet[QualityTier]:
    if isinstance(value, str):
        tags: Iterable[Any] = [value]
    elif isinstance(value, (list, tuple, set, frozenset)):
        tags = value
    else:
        return DEFAULT_RESOLUTIONS

    tiers = frozenset(tier for tier in (QualityTier.from_tag(tag) for tag in tags) if tier is not None)
    return tiers or DEFAULT_RESOLUTIONS


def _parse_quota(value: Any) -> int:
    try:
        quota = int(value)
    except (TypeError, ValueError):
        return DEFAULT_MAX_RESULTS_PER_RESOLUTION
    return quota if quota >= 1 else DEFAULT_MAX_RESULTS_PER_RESOLUTION


@dataclass
class IndexConfig:
    """Settings for the upstream torrent index."""

    url: str = DEFAULT_INDEX_URL
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = DEFAULT_INDEX_TIMEOUT
    category: str = DEFAULT_INDEX_CATEGORY

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "IndexConfig":
        """
        Build an instance from raw configuration data.

        Parameters
        ----------
        data : dict[str, Any] | None
            Chunk of config JSON scoped to the index. ``None`` means defaults.

        Returns
        -------
        IndexConfig
            Config object ready for that first HTTP handshake.

        Raises
        ------
        ConfigError
            If the timeout is not a number.
        """

        data = data or {}
        return cls(
            url=str(data.get("url", DEFAULT_INDEX_URL)),
            user_agent=str(data.get("user_agent", DEFAULT_USER_AGENT)),
            request_timeout=_float_setting(data, "request_timeout", DEFAULT_INDEX_TIMEOUT),
            category=str(data.get("category", DEFAULT_INDEX_CATEGORY)),
        )


@dataclass
class TrackerConfig:
    """Where the tracker list lives and how long a copy stays fresh."""

    url: str = DEFAULT_TRACKER_LIST_URL
    request_timeout: float = DEFAULT_TRACKER_TIMEOUT
    freshness_seconds: float = DEFAULT_TRACKER_FRESHNESS
    limit: int = DEFAULT_TRACKER_LIMIT

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TrackerConfig":
        data = data or {}
        limit = data.get("limit", DEFAULT_TRACKER_LIMIT)
        try:
            limit = int(limit)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid trackers.limit: {limit!r}") from exc
        return cls(
            url=str(data.get("url", DEFAULT_TRACKER_LIST_URL)),
            request_timeout=_float_setting(data, "request_timeout", DEFAULT_TRACKER_TIMEOUT),
            freshness_seconds=_float_setting(data, "freshness_seconds", DEFAULT_TRACKER_FRESHNESS),
            limit=limit,
        )


@dataclass
class AddonConfig:
    """Manifest identity plus where the HTTP shim listens."""

    id: str = "org.community.cloud.scraper"
    version: str = "1.2.3"
    name: str = "Cloud Stream Scraper"
    description: str = "Configurable Cloud Scraper with RD Support"
    host: str = "0.0.0.0"
    port: int = 7000

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AddonConfig":
        data = data or {}
        defaults = cls()
        try:
            port = int(data.get("port", defaults.port))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid addon.port: {data.get('port')!r}") from exc
        return cls(
            id=str(data.get("id", defaults.id)),
            version=str(data.get("version", defaults.version)),
            name=str(data.get("name", defaults.name)),
            description=str(data.get("description", defaults.description)),
            host=str(data.get("host", defaults.host)),
            port=port,
        )


@dataclass
class LoggingConfig:
    """Lightweight logging configuration for when INFO just isn't loud enough."""

    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "LoggingConfig":
        """
        Create a logging config from a dict.

        Parameters
        ----------
        data : dict[str, Any] | None
            Optional logging section. ``None`` means we stick with INFO.

        Returns
        -------
        LoggingConfig
            The final logging level wrapped in a dataclass hug.
        """

        if data is None:
            return cls()
        return cls(level=str(data.get("level", "INFO")).upper())


@dataclass
class ServiceConfig:
    """Aggregate process configuration: index, trackers, addon and logging."""

    index: IndexConfig = field(default_factory=IndexConfig)
    trackers: TrackerConfig = field(default_factory=TrackerConfig)
    addon: AddonConfig = field(default_factory=AddonConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServiceConfig":
        """
        Stitch together the full configuration set from JSON.

        Parameters
        ----------
        data : dict[str, Any]
            Entire configuration payload. Every section is optional.

        Returns
        -------
        ServiceConfig
            Everything the service needs to know, tied up in a dataclass bow.

        Raises
        ------
        ConfigError
            If the payload or one of its sections is not a JSON object.
        """

        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a JSON object")
        for section in ("index", "trackers", "addon", "logging"):
            if section in data and not isinstance(data[section], dict):
                raise ConfigError(f"Section '{section}' must be a JSON object")

        return cls(
            index=IndexConfig.from_dict(data.get("index")),
            trackers=TrackerConfig.from_dict(data.get("trackers")),
            addon=AddonConfig.from_dict(data.get("addon")),
            logging=LoggingConfig.from_dict(data.get("logging")),
        )


def _float_setting(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {key}: {value!r}") from exc


class ConfigLoader:
    """Loads service configuration from JSON files and delivers it."""

    def __init__(self, path: str | Path):
        """
        Parameters
        ----------
        path : str | Path
            File system path where the config JSON resides.
        """

        self.path = Path(path)

    def load(self) -> ServiceConfig:
        """
        Read and validate the configuration file.

        Returns
        -------
        ServiceConfig
            The fully parsed configuration bundle.

        Raises
        ------
        ConfigError
            When the file is missing or invalid.
        """

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigError(f"Configuration file not found: {self.path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON configuration: {exc.msg}") from exc

        return ServiceConfig.from_dict(payload)

    @staticmethod
    def apply_overrides(config: ServiceConfig, overrides: dict[str, Any]) -> ServiceConfig:
        """
        Update the in-memory configuration with CLI overrides.

        Parameters
        ----------
        config : ServiceConfig
            The baseline configuration, from the JSON file or defaults.
        overrides : dict[str, Any]
            CLI overrides; ``None`` values leave the setting alone.

        Returns
        -------
        ServiceConfig
            The same object, adjusted in place.
        """

        if overrides.get("host"):
            config.addon.host = overrides["host"]
        if overrides.get("port") is not None:
            config.addon.port = int(overrides["port"])
        if overrides.get("index_url"):
            config.index.url = overrides["index_url"]
        if overrides.get("index_timeout") is not None:
            config.index.request_timeout = float(overrides["index_timeout"])
        if overrides.get("tracker_url"):
            config.trackers.url = overrides["tracker_url"]

        return config
