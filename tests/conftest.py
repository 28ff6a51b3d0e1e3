from __future__ import annotations

"""
Pytest configuration helpers.

Puts the repository root (for ``main`` and ``stream_scraper``) and this
directory (for the shared ``helpers`` module) on the import path, however
pytest was invoked.
"""

import sys
from pathlib import Path

TESTS = Path(__file__).resolve().parent
ROOT = TESTS.parent

for path in (ROOT, TESTS):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
