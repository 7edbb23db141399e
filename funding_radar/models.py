"""Record and envelope types flowing through the pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, NamedTuple


class RecordKey(NamedTuple):
    """Composite identity of a brand: lower-cased name and website."""

    brand: str
    website: str


@dataclass(slots=True)
class BrandRecord:
    """One observed mention of a brand, progressively enriched."""

    brand_name: str
    website: str | None = None
    headline: str | None = None
    article_url: str | None = None
    source: str | None = None
    address: str | None = None
    email: str | None = None
    phone: str | None = None
    contacts: set[str] = field(default_factory=set)
    business_stats: set[str] = field(default_factory=set)
    funding_history: set[str] = field(default_factory=set)
    likely_looking_for_funding: bool | None = None

    @property
    def key(self) -> RecordKey:
        return RecordKey(
            (self.brand_name or "").lower(),
            (self.website or "").lower(),
        )

    def copy(self) -> "BrandRecord":
        return BrandRecord(
            brand_name=self.brand_name,
            website=self.website,
            headline=self.headline,
            article_url=self.article_url,
            source=self.source,
            address=self.address,
            email=self.email,
            phone=self.phone,
            contacts=set(self.contacts),
            business_stats=set(self.business_stats),
            funding_history=set(self.funding_history),
            likely_looking_for_funding=self.likely_looking_for_funding,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"brandName": self.brand_name}
        for name, value in (
            ("website", self.website),
            ("headline", self.headline),
            ("articleUrl", self.article_url),
            ("source", self.source),
            ("address", self.address),
            ("email", self.email),
            ("phone", self.phone),
        ):
            if value:
                payload[name] = value
        payload["contacts"] = sorted(self.contacts)
        payload["businessStats"] = sorted(self.business_stats)
        payload["fundingHistory"] = sorted(self.funding_history)
        if self.likely_looking_for_funding is not None:
            payload["likelyLookingForFunding"] = self.likely_looking_for_funding
        return payload


def _isoformat(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class RunMeta:
    """Immutable description of one pipeline execution."""

    total_sources: int
    total_articles_scanned: int
    started_at: datetime
    finished_at: datetime
    duration_ms: int

    @classmethod
    def build(
        cls,
        total_sources: int,
        total_articles_scanned: int,
        started_at: datetime,
        finished_at: datetime,
    ) -> "RunMeta":
        duration = finished_at - started_at
        return cls(
            total_sources=total_sources,
            total_articles_scanned=total_articles_scanned,
            started_at=started_at,
            finished_at=finished_at,
            duration_ms=max(0, duration // timedelta(milliseconds=1)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSources": self.total_sources,
            "totalArticlesScanned": self.total_articles_scanned,
            "startedAt": _isoformat(self.started_at),
            "finishedAt": _isoformat(self.finished_at),
            "durationMs": self.duration_ms,
        }


@dataclass(frozen=True, slots=True)
class AgentResponse:
    """Deduplicated results plus run metadata; the sole output of a run."""

    results: tuple[BrandRecord, ...]
    meta: RunMeta

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [record.to_dict() for record in self.results],
            "meta": self.meta.to_dict(),
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)


__all__ = ["AgentResponse", "BrandRecord", "RecordKey", "RunMeta"]
