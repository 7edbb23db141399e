"""Concurrent page retrieval under one shared deadline."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence

import httpx
import structlog

_TEXTUAL_TYPES = ("text/", "application/xhtml", "application/xml")


@dataclass(slots=True)
class FetchResult:
    """Outcome of fetching one URL; ``html`` is None when absent."""

    url: str
    html: str | None = None
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.html is not None


class Fetcher:
    """Retrieve article pages, converting every failure into an absent result."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.client = client
        self.logger = logger or structlog.get_logger("funding_radar.fetcher")

    async def fetch(self, url: str) -> str | None:
        try:
            response = await self.client.get(url)
            if self._is_failure(response):
                self.logger.warning("fetch_failed", url=url, status=response.status_code)
                return None
            content_type = response.headers.get("content-type", "text/html").lower()
            if not content_type.startswith(_TEXTUAL_TYPES):
                self.logger.warning("fetch_failed", url=url, content_type=content_type)
                return None
            text = response.text
        except (httpx.HTTPError, UnicodeDecodeError, LookupError) as exc:
            self.logger.warning("fetch_failed", url=url, error=str(exc) or type(exc).__name__)
            return None
        if not text.strip():
            return None
        return text

    async def fetch_all(self, urls: Sequence[str], deadline_seconds: float) -> list[FetchResult]:
        """Fetch every URL concurrently, abandoning whatever is unfinished at the deadline.

        All tasks start together and share one cutoff. Tasks still running
        when it elapses are cancelled (which aborts their in-flight requests)
        and reported as timed out. Results follow the order of ``urls``.
        """

        if not urls:
            return []
        tasks = [asyncio.create_task(self.fetch(url)) for url in urls]
        _done, pending = await asyncio.wait(tasks, timeout=deadline_seconds)
        if pending:
            self.logger.warning(
                "fetch_deadline_exceeded",
                pending=len(pending),
                completed=len(tasks) - len(pending),
                deadline_seconds=deadline_seconds,
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        results: list[FetchResult] = []
        for url, task in zip(urls, tasks):
            if task in pending:
                results.append(FetchResult(url=url, timed_out=True))
                continue
            exc = task.exception()
            if exc is not None:
                self.logger.warning("fetch_failed", url=url, error=str(exc) or type(exc).__name__)
                results.append(FetchResult(url=url))
            else:
                results.append(FetchResult(url=url, html=task.result()))
        return results

    @staticmethod
    def _is_failure(response: httpx.Response) -> bool:
        return response.status_code >= 400


__all__ = ["FetchResult", "Fetcher"]
