"""Reconciliation of a local ratings map with its cloud copy."""

from __future__ import annotations

from typing import Mapping, Optional

from core.ratings_models import RatingRecord, RatingsMap


def merge_ratings_maps(
    local: Optional[Mapping[str, RatingRecord]],
    remote: Optional[Mapping[str, RatingRecord]],
) -> RatingsMap:
    """Last-write-wins merge by ``fetched_at``; ties keep the local record.

    Neither input is modified.
    """
    merged: RatingsMap = dict(local or {})
    if not remote:
        return merged
    for key, remote_record in remote.items():
        local_record = merged.get(key)
        if local_record is None or remote_record.fetched_at > local_record.fetched_at:
            merged[key] = remote_record
    return merged


__all__ = ["merge_ratings_maps"]
