"""Site-scoped search against an external search engine."""

from __future__ import annotations

from typing import Protocol
from urllib.parse import parse_qs, urljoin, urlparse

import httpx
from selectolax.parser import HTMLParser

from ..logging_conf import source_logger

DUCKDUCKGO_HTML_ENDPOINT = "https://html.duckduckgo.com/html/"


class SearchAdapter(Protocol):
    """Return up to ``limit`` article URLs for ``query`` on one source domain.

    Implementations never raise: no results and transport failures both
    produce an empty list.
    """

    async def search(self, domain: str, query: str, limit: int) -> list[str]:
        ...


def _belongs_to(host: str, domain: str) -> bool:
    host = host.lower()
    domain = domain.lower().removeprefix("www.")
    return host == domain or host.endswith("." + domain)


def _unwrap(href: str, base_url: str) -> str | None:
    absolute = urljoin(base_url, href.strip())
    parsed = urlparse(absolute)
    if parsed.path.startswith("/l/") and "duckduckgo.com" in (parsed.hostname or ""):
        targets = parse_qs(parsed.query).get("uddg")
        if not targets:
            return None
        absolute = targets[0]
        parsed = urlparse(absolute)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None
    return absolute


class DuckDuckGoSiteSearch:
    """Query the DuckDuckGo HTML endpoint with a ``site:`` filter."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoint: str = DUCKDUCKGO_HTML_ENDPOINT,
        timeout_seconds: float | None = None,
    ) -> None:
        self.client = client
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds

    async def search(self, domain: str, query: str, limit: int) -> list[str]:
        log = source_logger(domain)
        limit = max(1, limit)
        try:
            response = await self.client.post(
                self.endpoint,
                data={"q": f"site:{domain} {query}".strip()},
                timeout=self.timeout_seconds or httpx.USE_CLIENT_DEFAULT,
            )
            if response.status_code >= 400:
                log.warning("search_failed", query=query, status=response.status_code)
                return []
            urls = self.parse_results(response.text, domain, limit, base_url=str(response.url))
        except Exception as exc:  # noqa: BLE001
            log.warning("search_failed", query=query, error=str(exc) or type(exc).__name__)
            return []
        log.info("search_completed", query=query, results=len(urls))
        return urls

    @staticmethod
    def parse_results(html: str, domain: str, limit: int, base_url: str = DUCKDUCKGO_HTML_ENDPOINT) -> list[str]:
        parser = HTMLParser(html)
        nodes = parser.css("a.result__a") or parser.css("a.result__url")
        urls: list[str] = []
        for node in nodes:
            href = node.attributes.get("href")
            if not href:
                continue
            url = _unwrap(href, base_url)
            if url is None or not _belongs_to(urlparse(url).hostname or "", domain):
                continue
            if url not in urls:
                urls.append(url)
            if len(urls) >= limit:
                break
        return urls


__all__ = ["DUCKDUCKGO_HTML_ENDPOINT", "DuckDuckGoSiteSearch", "SearchAdapter"]
