"""Merge records that refer to the same brand."""

from __future__ import annotations

from typing import Iterable

from ..models import BrandRecord, RecordKey

_SCALAR_FIELDS = ("email", "phone", "address", "headline", "source", "article_url")
_SET_FIELDS = ("contacts", "funding_history", "business_stats")


def _merge_into(canonical: BrandRecord, incoming: BrandRecord) -> None:
    for name in _SET_FIELDS:
        getattr(canonical, name).update(getattr(incoming, name))
    for name in _SCALAR_FIELDS:
        if not getattr(canonical, name):
            value = getattr(incoming, name)
            if value:
                setattr(canonical, name, value)
    if canonical.likely_looking_for_funding is None:
        canonical.likely_looking_for_funding = incoming.likely_looking_for_funding


def merge_records(records: Iterable[BrandRecord]) -> list[BrandRecord]:
    """Collapse records sharing a ``(brand, website)`` key, keeping first-seen order.

    Set-valued fields are unioned; scalar fields keep the first non-empty
    value. Inputs are left untouched: each canonical record is a copy.
    """

    merged: dict[RecordKey, BrandRecord] = {}
    for record in records:
        key = record.key
        canonical = merged.get(key)
        if canonical is None:
            merged[key] = record.copy()
        else:
            _merge_into(canonical, record)
    return list(merged.values())


__all__ = ["merge_records"]
