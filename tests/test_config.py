from __future__ import annotations

"""Tests for configuration helpers, both the forgiving kind and the strict kind."""

import json
import tempfile
import unittest
from pathlib import Path

from stream_scraper.config import (
    DEFAULT_RESOLUTIONS,
    ConfigError,
    ConfigLoader,
    ScraperConfig,
    ServiceConfig,
)
from stream_scraper.models import QualityTier


class ScraperConfigTests(unittest.TestCase):
    """Malformed user settings must fall back, never blow up."""

    def test_defaults(self) -> None:
        config = ScraperConfig.from_dict({})
        self.assertEqual(config.min_seeds, 0)
        self.assertEqual(config.max_size_gb, 10.0)
        self.assertEqual(config.allowed_resolutions, frozenset({QualityTier.UHD, QualityTier.FHD, QualityTier.HD}))
        self.assertNotIn(QualityTier.SD, config.allowed_resolutions)
        self.assertEqual(config.max_results_per_resolution, 5)
        self.assertIsNone(config.accelerator_key)

    def test_form_values_are_parsed(self) -> None:
        config = ScraperConfig.from_dict(
            {"minSeeds": "5", "maxSize": "4.5 GB", "res": ["1080p", "sd"], "maxResultsPerRes": 2, "rdKey": "secret"}
        )
        self.assertEqual(config.min_seeds, 5)
        self.assertEqual(config.max_size_gb, 4.5)
        self.assertEqual(config.allowed_resolutions, frozenset({QualityTier.FHD, QualityTier.SD}))
        self.assertEqual(config.max_results_per_resolution, 2)
        self.assertEqual(config.accelerator_key, "secret")

    def test_single_resolution_string_is_accepted(self) -> None:
        config = ScraperConfig.from_dict({"res": "4K"})
        self.assertEqual(config.allowed_resolutions, frozenset({QualityTier.UHD}))

    def test_malformed_values_fall_back_to_defaults(self) -> None:
        config = ScraperConfig.from_dict(
            {"minSeeds": "lots", "maxSize": "huge", "res": ["8K"], "maxResultsPerRes": "-3", "rdKey": 42}
        )
        self.assertEqual(config, ScraperConfig())

    def test_max_size_reads_leading_number(self) -> None:
        self.assertEqual(ScraperConfig.from_dict({"maxSize": "2.5 G.B."}).max_size_gb, 2.5)
        self.assertEqual(ScraperConfig.from_dict({"maxSize": "10."}).max_size_gb, 10.0)
        self.assertEqual(ScraperConfig.from_dict({"maxSize": ".5GB"}).max_size_gb, 0.5)

    def test_non_positive_size_falls_back(self) -> None:
        self.assertEqual(ScraperConfig.from_dict({"maxSize": "0"}).max_size_gb, 10.0)
        self.assertEqual(ScraperConfig.from_dict({"maxSize": 1.2}).max_size_gb, 1.2)

    def test_direct_construction_enforces_contract(self) -> None:
        with self.assertRaises(ValueError):
            ScraperConfig(max_results_per_resolution=0)
        with self.assertRaises(ValueError):
            ScraperConfig(min_seeds=-1)
        with self.assertRaises(ValueError):
            ScraperConfig(allowed_resolutions=frozenset())

    def test_token_round_trip(self) -> None:
        original = ScraperConfig(
            min_seeds=5,
            max_size_gb=7.5,
            allowed_resolutions=frozenset({QualityTier.FHD}),
            max_results_per_resolution=2,
            accelerator_key="key",
        )
        self.assertEqual(ScraperConfig.from_token(original.to_token()), original)
        self.assertEqual(ScraperConfig.from_token(ScraperConfig().to_token()), ScraperConfig())

    def test_garbage_token_gives_defaults(self) -> None:
        self.assertEqual(ScraperConfig.from_token("!!not-a-token!!"), ScraperConfig())
        self.assertEqual(DEFAULT_RESOLUTIONS, ScraperConfig.from_token(None).allowed_resolutions)


class ConfigLoaderTests(unittest.TestCase):
    """Exercises ConfigLoader so the crowd doesn't boo when parsing fails."""

    def _write_config(self, data) -> Path:
        temp_dir = tempfile.mkdtemp()
        path = Path(temp_dir) / "config.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_load_valid_config(self) -> None:
        payload = {
            "index": {"url": "http://index.example/q.php", "request_timeout": 9},
            "trackers": {"limit": 20},
            "logging": {"level": "debug"},
        }
        config = ConfigLoader(self._write_config(payload)).load()
        self.assertIsInstance(config, ServiceConfig)
        self.assertEqual(config.index.url, "http://index.example/q.php")
        self.assertEqual(config.index.request_timeout, 9.0)
        self.assertEqual(config.trackers.limit, 20)
        self.assertEqual(config.trackers.request_timeout, 3.0)
        self.assertEqual(config.logging.level, "DEBUG")
        self.assertEqual(config.addon.port, 7000)

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(ConfigError):
            ConfigLoader(Path(tempfile.mkdtemp()) / "absent.json").load()

    def test_bad_section_raises(self) -> None:
        loader = ConfigLoader(self._write_config({"index": "http://example.com"}))
        with self.assertRaises(ConfigError):
            loader.load()

    def test_bad_number_raises(self) -> None:
        loader = ConfigLoader(self._write_config({"trackers": {"request_timeout": "soon"}}))
        with self.assertRaises(ConfigError):
            loader.load()

    def test_apply_overrides_respects_none_values(self) -> None:
        config = ServiceConfig()
        overrides = {"host": None, "port": 8080, "index_url": "http://mirror.example/q.php", "index_timeout": None}
        updated = ConfigLoader.apply_overrides(config, overrides)
        self.assertEqual(updated.addon.host, "0.0.0.0")
        self.assertEqual(updated.addon.port, 8080)
        self.assertEqual(updated.index.url, "http://mirror.example/q.php")
        self.assertEqual(updated.index.request_timeout, 8.0)


if __name__ == "__main__":
    unittest.main()
