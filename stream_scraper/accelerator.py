from __future__ import annotations

"""
Accelerator (debrid) seam.

A debrid service can turn a magnet link into a direct download URL given the
user's API key. No such service is wired in yet; the passthrough keeps the
magnet as-is so the streaming client falls back to its own torrent engine.
"""

import logging


class PassthroughAccelerator:
    """Accelerator that hands every magnet back unchanged."""

    def resolve(self, magnet: str, key: str) -> str:
        """
        Parameters
        ----------
        magnet : str
            Magnet URI built by the pipeline.
        key : str
            User credential for the accelerator, forwarded verbatim.

        Returns
        -------
        str
            URL the client should play. Here, always ``magnet``.
        """

        logging.debug("No accelerator configured, keeping magnet for %s", magnet[:60])
        return magnet
