from __future__ import annotations

"""
URL-safe transport for per-installation settings.

The configuration form serialises its choices to JSON, base64-encodes them
with the URL-safe alphabet and drops the padding so the token fits in a
single path segment. Decoding is forgiving: garbage in, empty dict out.
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict


def encode_config(data: Dict[str, Any]) -> str:
    """
    Turn a configuration mapping into a path-safe token.

    Parameters
    ----------
    data : dict[str, Any]
        JSON-serialisable settings.

    Returns
    -------
    str
        URL-safe base64 of the compact JSON, without ``=`` padding.
    """

    payload = json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")


def decode_config(token: str | None) -> Dict[str, Any]:
    """
    Recover a configuration mapping from a token.

    Parameters
    ----------
    token : str | None
        Token taken from the request path.

    Returns
    -------
    dict[str, Any]
        Decoded settings, or an empty dict if the token is missing or mangled.
    """

    if not token:
        return {}

    padded = token.strip() + "=" * (-len(token.strip()) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        logging.warning("Config token could not be decoded: %s", exc)
        return {}

    if not isinstance(data, dict):
        logging.warning("Config token decoded to %s, expected an object", type(data).__name__)
        return {}
    return data
