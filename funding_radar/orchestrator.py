"""Pipeline orchestrator wiring together search, fetch, extraction, enrichment and merging."""

from __future__ import annotations

import asyncio
import math
import time
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncIterator, Iterator, Sequence
from uuid import uuid4

import httpx
import structlog

from .config import AgentConfig, RunRequest
from .engine import (
    ContactEnricher,
    DuckDuckGoSiteSearch,
    Extractor,
    FetchResult,
    Fetcher,
    RequestPacer,
    SearchAdapter,
    merge_records,
    source_of,
)
from .errors import PipelineError
from .infra import UserAgentPool, create_client
from .logging_conf import configure_logging
from .models import AgentResponse, BrandRecord, RunMeta


class RunPhase(str, Enum):
    """Sequential stages of one run."""

    SEARCHING = "searching"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    ENRICHING = "enriching"
    AGGREGATING = "aggregating"
    DONE = "done"


@dataclass(slots=True)
class _Collaborators:
    search: SearchAdapter
    fetcher: Fetcher
    extractor: Extractor
    enricher: ContactEnricher


class Orchestrator:
    """Compose the pipeline into one bounded, failure-tolerant run.

    Collaborators may be injected; any left as ``None`` are built per run
    around a shared ``httpx.AsyncClient`` that the orchestrator closes when
    the run ends. No state survives between runs.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        *,
        search: SearchAdapter | None = None,
        fetcher: Fetcher | None = None,
        extractor: Extractor | None = None,
        enricher: ContactEnricher | None = None,
        client: httpx.AsyncClient | None = None,
        ua_pool: UserAgentPool | None = None,
    ) -> None:
        self.config = config or AgentConfig()
        self.search = search
        self.fetcher = fetcher
        self.extractor = extractor
        self.enricher = enricher
        self.client = client
        self.ua_pool = ua_pool
        self.logger = configure_logging().bind(component="orchestrator")

    # ------------------------------------------------------------------
    async def run(
        self,
        query: Any = None,
        max_results: Any = None,
        sources: Any = None,
    ) -> AgentResponse:
        request = RunRequest.normalise(
            self.config, query=query, max_results=max_results, sources=sources
        )
        started_at = datetime.now(timezone.utc)
        with structlog.contextvars.bound_contextvars(run_id=uuid4().hex):
            self.logger.info(
                "run_started",
                query=request.query,
                max_results=request.max_results,
                sources=request.sources,
            )
            try:
                async with self._collaborators() as collaborators:
                    urls, results = await self._execute(request, collaborators)
            except Exception as exc:  # noqa: BLE001
                self.logger.error("run_failed", error=str(exc) or type(exc).__name__)
                raise PipelineError(f"Run could not produce a response: {exc}") from exc
            finished_at = datetime.now(timezone.utc)
            meta = RunMeta.build(
                total_sources=len(request.sources),
                total_articles_scanned=len(urls),
                started_at=started_at,
                finished_at=finished_at,
            )
            self.logger.info(
                "run_finished",
                phase=RunPhase.DONE.value,
                results=len(results),
                articles=len(urls),
                duration_ms=meta.duration_ms,
            )
        return AgentResponse(results=tuple(results), meta=meta)

    def run_sync(
        self,
        query: Any = None,
        max_results: Any = None,
        sources: Any = None,
    ) -> AgentResponse:
        return asyncio.run(self.run(query=query, max_results=max_results, sources=sources))

    # ------------------------------------------------------------------
    async def _execute(
        self, request: RunRequest, collaborators: _Collaborators
    ) -> tuple[list[str], list[BrandRecord]]:
        cap = request.max_results

        with self._phase(RunPhase.SEARCHING, sources=len(request.sources)):
            urls = await self._search_phase(request, collaborators.search)

        with self._phase(RunPhase.FETCHING, urls=len(urls)):
            fetched = await collaborators.fetcher.fetch_all(
                urls, self.config.fetch_deadline_seconds
            )

        with self._phase(
            RunPhase.EXTRACTING,
            fetched=sum(1 for item in fetched if item.ok),
            timed_out=sum(1 for item in fetched if item.timed_out),
        ):
            extracted = self._extract_phase(fetched, collaborators.extractor, cap)

        with self._phase(RunPhase.ENRICHING, records=len(extracted)):
            enriched = await self._enrich_phase(extracted, collaborators.enricher)

        with self._phase(RunPhase.AGGREGATING, records=len(enriched)):
            results = merge_records(enriched)
        return urls, results

    async def _search_phase(self, request: RunRequest, search: SearchAdapter) -> list[str]:
        cap = request.max_results
        limit = math.ceil(cap / len(request.sources)) + self.config.search_extra_results
        found = await asyncio.gather(
            *(self._safe_search(search, domain, request.query, limit) for domain in request.sources)
        )
        # Concatenate in source order, not completion order.
        urls: list[str] = []
        for batch in found:
            for url in batch:
                if url not in urls:
                    urls.append(url)
                if len(urls) >= cap:
                    break
            if len(urls) >= cap:
                break
        return urls

    async def _safe_search(
        self, search: SearchAdapter, domain: str, query: str, limit: int
    ) -> list[str]:
        try:
            return list(await search.search(domain, query, limit) or [])
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("search_failed", source=domain, error=str(exc) or type(exc).__name__)
            return []

    def _extract_phase(
        self, fetched: Sequence[FetchResult], extractor: Extractor, cap: int
    ) -> list[BrandRecord]:
        records: list[BrandRecord] = []
        for item in fetched:
            if not item.ok:
                continue
            source = source_of(item.url)
            for record in extractor.extract(item.url, item.html or ""):
                record.source = source
                records.append(record)
            if len(records) >= cap:
                break
        return records[:cap]

    async def _enrich_phase(
        self, records: Sequence[BrandRecord], enricher: ContactEnricher
    ) -> list[BrandRecord]:
        # One record at a time; lookups are additionally spaced by the pacer.
        enriched: list[BrandRecord] = []
        for record in records:
            try:
                enriched.append(await enricher.enrich(record))
            except Exception as exc:  # noqa: BLE001
                self.logger.warning(
                    "enrich_failed", brand=record.brand_name, error=str(exc) or type(exc).__name__
                )
                enriched.append(record)
        return enriched

    @contextmanager
    def _phase(self, phase: RunPhase, **fields: Any) -> Iterator[None]:
        self.logger.info("phase_started", phase=phase.value, **fields)
        started = time.perf_counter()
        yield
        self.logger.info(
            "phase_finished",
            phase=phase.value,
            elapsed_ms=round((time.perf_counter() - started) * 1000),
        )

    @asynccontextmanager
    async def _collaborators(self) -> AsyncIterator[_Collaborators]:
        config = self.config
        needs_client = None in (self.search, self.fetcher, self.enricher)
        owned_client: httpx.AsyncClient | None = None
        client = self.client
        if client is None and needs_client:
            client = owned_client = create_client(config, self.ua_pool)
        try:
            yield _Collaborators(
                search=self.search
                or DuckDuckGoSiteSearch(
                    client,
                    endpoint=config.search_endpoint,
                    timeout_seconds=config.search_timeout_seconds,
                ),
                fetcher=self.fetcher or Fetcher(client),
                extractor=self.extractor
                or Extractor(
                    max_brands=config.max_brands_per_article,
                    max_fragments=config.max_fragments_per_field,
                ),
                enricher=self.enricher
                or ContactEnricher(
                    client,
                    contact_paths=config.contact_paths,
                    timeout_seconds=config.enrich_timeout_seconds,
                    pacer=RequestPacer(config.enrich_min_interval_seconds),
                ),
            )
        finally:
            if owned_client is not None:
                await owned_client.aclose()


__all__ = ["Orchestrator", "RunPhase"]
