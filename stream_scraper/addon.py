from __future__ import annotations

"""
Stremio addon HTTP shim.

Maps the Stremio addon routes onto :class:`StreamFinder`. The user's settings
ride along as the first path segment (see :mod:`stream_scraper.config_token`),
so one deployment serves every configuration without storing anything.
"""

import logging
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import AddonConfig, ScraperConfig
from .finder import StreamFinder

MEDIA_TYPES = ("movie", "series")
CACHE_CONTROL = "max-age=0, s-maxage=86400"


def build_manifest(addon: AddonConfig, host: str, token: Optional[str] = None) -> Dict[str, Any]:
    """
    Describe the addon to Stremio.

    Parameters
    ----------
    addon : AddonConfig
        Identity fields (id, version, name, description).
    host : str
        Public host name, used to point Stremio back at the configure page.
    token : str, optional
        Current configuration token, so "Configure" reopens the same settings.

    Returns
    -------
    dict[str, Any]
        Manifest JSON.
    """

    return {
        "id": addon.id,
        "version": addon.version,
        "name": addon.name,
        "description": addon.description,
        "catalogs": [],
        "resources": [
            {
                "name": "stream",
                "types": list(MEDIA_TYPES),
                "idPrefixes": ["tt"],
            }
        ],
        "types": list(MEDIA_TYPES),
        "behaviorHints": {
            "configurable": True,
            "configurationRequired": False,
            "configurationLocation": f"https://{host}/{token or ''}",
        },
    }


def create_app(finder: StreamFinder, addon: Optional[AddonConfig] = None) -> Flask:
    """
    Build the Flask application.

    Parameters
    ----------
    finder : StreamFinder
        Does the actual lookup for stream routes.
    addon : AddonConfig, optional
        Manifest identity; defaults apply when omitted.

    Returns
    -------
    Flask
        App with CORS open to every origin, as Stremio clients require.
    """

    addon = addon or AddonConfig()
    app = Flask(__name__)
    CORS(app)

    @app.after_request
    def _cache_headers(response: Response) -> Response:
        response.headers["Cache-Control"] = CACHE_CONTROL
        return response

    @app.errorhandler(Exception)
    def _internal_error(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        logging.exception("Handler fatal error")
        return jsonify({"error": "Internal Server Error", "details": str(exc)}), 500

    @app.get("/")
    def home():
        return Response("Cloud Stream Scraper is Active", mimetype="text/plain")

    @app.get("/manifest.json")
    @app.get("/<token>/manifest.json")
    def manifest(token: Optional[str] = None):
        return jsonify(build_manifest(addon, request.host, token))

    @app.get("/stream/<media_type>/<identifier>.json")
    @app.get("/<token>/stream/<media_type>/<identifier>.json")
    def stream(media_type: str, identifier: str, token: Optional[str] = None):
        if media_type not in MEDIA_TYPES:
            logging.debug("Unsupported media type %r", media_type)
            return jsonify({"streams": []})

        config = ScraperConfig.from_token(token)
        results = finder.query_streams(media_type, identifier, config)
        return jsonify({"streams": [result.to_stremio() for result in results]})

    return app
