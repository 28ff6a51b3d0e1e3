#!/usr/bin/env python3
from __future__ import annotations

"""
Main entry point for the Stream Scraper CLI.

Two jobs: ``serve`` runs the Stremio addon over HTTP, ``query`` runs one
lookup from the terminal and prints what Stremio would have received,
plus the install link for the chosen settings.
"""

import argparse
import logging
from typing import Any

from stream_scraper.addon import create_app
from stream_scraper.apibay import ApibayClient
from stream_scraper.config import ConfigError, ConfigLoader, ScraperConfig, ServiceConfig
from stream_scraper.finder import StreamFinder
from stream_scraper.trackers import TrackerCache


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Build and parse the CLI arguments.

    Returns
    -------
    argparse.Namespace
        The parsed arguments, ready for the main routine.
    """

    parser = argparse.ArgumentParser(description="Configurable Stremio stream addon backed by apibay.")
    parser.add_argument("--config", help="Path to the JSON service configuration file (optional).")
    parser.add_argument("--index-url", help="Override the index search endpoint.")
    parser.add_argument("--index-timeout", type=float, help="Override the index request timeout in seconds.")
    parser.add_argument("--tracker-url", help="Override the tracker list URL.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging regardless of config.")

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the addon HTTP server.")
    serve.add_argument("--host", help="Interface to bind.")
    serve.add_argument("--port", type=int, help="Port to bind.")

    query = commands.add_parser("query", help="Run one lookup and print the streams.")
    query.add_argument("media_type", choices=("movie", "series"))
    query.add_argument("identifier", help="Catalog id, e.g. tt0133093 or tt0944947:2:5.")
    query.add_argument("--token", help="Configuration token copied from an install link.")
    query.add_argument("--min-seeds", help="Minimum seeders.")
    query.add_argument("--max-size", help="Maximum size in GB.")
    query.add_argument("--res", action="append", help="Allowed resolution (repeatable): 4K, 1080p, 720p, SD.")
    query.add_argument("--max-per-res", help="Maximum results per resolution.")
    query.add_argument("--rd-key", help="Accelerator API key.")

    return parser.parse_args(argv)


def configure_logging(config: ServiceConfig, debug: bool) -> None:
    """
    Funnel the logging level into place.

    Parameters
    ----------
    config : ServiceConfig
        Loaded configuration with its chosen verbosity.
    debug : bool
        When ``True`` we skip straight to DEBUG.
    """

    level_name = "DEBUG" if debug else config.logging.level.upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Gather CLI overrides into a single place."""

    return {
        "host": getattr(args, "host", None),
        "port": getattr(args, "port", None),
        "index_url": args.index_url,
        "index_timeout": args.index_timeout,
        "tracker_url": args.tracker_url,
    }


def scraper_config_from_args(args: argparse.Namespace) -> ScraperConfig:
    """
    Work out the per-query settings from a token and/or explicit flags.

    Flags win over whatever the token carried.
    """

    base = ScraperConfig.from_token(args.token).to_dict() if args.token else {}
    flags = {
        "minSeeds": args.min_seeds,
        "maxSize": args.max_size,
        "res": args.res,
        "maxResultsPerRes": args.max_per_res,
        "rdKey": args.rd_key,
    }
    base.update({key: value for key, value in flags.items() if value is not None})
    return ScraperConfig.from_dict(base)


def build_finder(config: ServiceConfig) -> StreamFinder:
    return StreamFinder(
        ApibayClient(config.index),
        TrackerCache(config.trackers),
        tracker_limit=config.trackers.limit,
    )


def main(argv: list[str] | None = None) -> None:
    """
    Run the CLI workflow.

    Steps
    -----
    1. Parse CLI arguments.
    2. Load config, or take the defaults when no file is given.
    3. Serve the addon, or run a single lookup and print it.
    """

    args = parse_args(argv)

    try:
        config = ConfigLoader(args.config).load() if args.config else ServiceConfig()
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc

    config = ConfigLoader.apply_overrides(config, collect_overrides(args))
    configure_logging(config, args.debug)

    finder = build_finder(config)

    if args.command == "serve":
        app = create_app(finder, config.addon)
        logging.info("Serving addon on %s:%s", config.addon.host, config.addon.port)
        app.run(host=config.addon.host, port=config.addon.port, threaded=True)
        return

    scraper_config = scraper_config_from_args(args)
    results = finder.query_streams(args.media_type, args.identifier, scraper_config)
    if not results:
        logging.warning("No streams found for %s %s.", args.media_type, args.identifier)

    for position, result in enumerate(results, start=1):
        print(f"{position}. {result.display_name} [{result.tier.value}]")
        print(f"   {result.detail_line.replace(chr(10), ' | ')}")
        print(f"   {result.uri}")

    print(f"Install token: {scraper_config.to_token()}")


if __name__ == "__main__":
    main()
