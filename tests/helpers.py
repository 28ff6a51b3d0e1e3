from __future__ import annotations

"""Shared builders for tests."""

from stream_scraper.models import CandidateRecord

GB = 1024 ** 3


def make_record(name: str, seeders: int, size_gb: float = 1.0, info_hash: str = "A" * 40) -> CandidateRecord:
    return CandidateRecord(
        name=name,
        info_hash=info_hash,
        size_bytes=int(size_gb * GB),
        seeders=seeders,
        record_id="1",
    )
