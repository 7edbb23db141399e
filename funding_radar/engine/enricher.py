"""Best-effort contact enrichment for extracted brand records."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Sequence
from urllib.parse import urljoin

import httpx
import structlog

from ..models import BrandRecord
from .contacts import extract_address, extract_emails, extract_phones


class RequestPacer:
    """Guarantee a minimum gap between successive outgoing lookups."""

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval_seconds = max(0.0, min_interval_seconds)
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last: float | None = None

    async def wait(self) -> None:
        async with self._lock:
            if self._last is not None:
                delay = self._last + self.min_interval_seconds - self._clock()
                if delay > 0:
                    await self._sleep(delay)
            self._last = self._clock()


@dataclass(slots=True)
class ContactDetails:
    emails: list[str] = field(default_factory=list)
    phones: list[str] = field(default_factory=list)
    address: str | None = None

    def absorb(self, html: str) -> None:
        for email in extract_emails(html):
            if email not in self.emails:
                self.emails.append(email)
        for phone in extract_phones(html):
            if phone not in self.phones:
                self.phones.append(phone)
        if self.address is None:
            self.address = extract_address(html)


class ContactEnricher:
    """Look up email, phone and address details on a brand's own website."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        contact_paths: Sequence[str] = ("/contact", "/contact-us"),
        timeout_seconds: float = 10.0,
        pacer: RequestPacer | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.client = client
        self.contact_paths = list(contact_paths)
        self.timeout_seconds = timeout_seconds
        self.pacer = pacer or RequestPacer(0.0)
        self.logger = logger or structlog.get_logger("funding_radar.enricher")

    async def enrich(self, record: BrandRecord) -> BrandRecord:
        """Fill missing contact fields in place; on any failure return the record untouched."""

        if not record.website:
            return record
        try:
            details = await asyncio.wait_for(
                self._lookup(record.website), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            self.logger.warning(
                "enrich_failed", brand=record.brand_name, website=record.website, error="timeout"
            )
            return record
        except Exception as exc:  # noqa: BLE001
            self.logger.warning(
                "enrich_failed",
                brand=record.brand_name,
                website=record.website,
                error=str(exc) or type(exc).__name__,
            )
            return record
        self._apply(record, details)
        return record

    async def _lookup(self, website: str) -> ContactDetails:
        details = ContactDetails()
        base = website.rstrip("/") + "/"
        for url in [website, *(urljoin(base, path.lstrip("/")) for path in self.contact_paths)]:
            await self.pacer.wait()
            html = await self._get(url)
            if html:
                details.absorb(html)
        return details

    async def _get(self, url: str) -> str | None:
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as exc:
            self.logger.debug("contact_page_unavailable", url=url, error=str(exc) or type(exc).__name__)
            return None
        if response.status_code >= 400:
            self.logger.debug("contact_page_unavailable", url=url, status=response.status_code)
            return None
        return response.text

    @staticmethod
    def _apply(record: BrandRecord, details: ContactDetails) -> None:
        if not record.email and details.emails:
            record.email = details.emails[0]
        if not record.phone and details.phones:
            record.phone = details.phones[0]
        if not record.address and details.address:
            record.address = details.address
        record.contacts.update(details.emails)
        record.contacts.update(details.phones)


__all__ = ["ContactDetails", "ContactEnricher", "RequestPacer"]
