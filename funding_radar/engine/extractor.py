"""Heuristic article-to-record extraction."""

from __future__ import annotations

import re
import textwrap
from typing import Iterable
from urllib.parse import urljoin, urlparse

import structlog
from selectolax.parser import HTMLParser, Node

from ..models import BrandRecord
from .contacts import extract_emails

_NOISE_TAGS = ["script", "style", "noscript", "nav", "footer", "header", "aside", "form"]

_HEADLINE_VERBS = (
    r"raises|raised|secures|secured|bags|bagged|gets|lands|closes|nets|picks up|"
    r"mops up|receives|snags|announces"
)
_HEADLINE_RE = re.compile(rf"^(?P<brand>.+?)\s+(?:{_HEADLINE_VERBS})\b", re.I)
_VERB_TAIL_RE = re.compile(rf"\s+(?:{_HEADLINE_VERBS}|has|had)\b.*$", re.I)
_BACKED_RE = re.compile(r"[\w.&]+-backed\s+(?P<brand>[A-Z0-9][\w&.'’-]*(?:\s+[A-Z0-9][\w&.'’-]*){0,3})")

_BRAND_TOKENS = r"[A-Z][\w&.'’-]*(?:\s+[A-Z0-9][\w&.'’-]*){0,3}"
_BODY_PATTERNS = (
    re.compile(
        rf"(?P<brand>{_BRAND_TOKENS}),\s+(?:an?|the)\s+[^,.]{{0,80}}?"
        r"\b(?:start-?up|brand|company|platform|marketplace|maker)\b"
    ),
    re.compile(rf"(?P<brand>{_BRAND_TOKENS})\s+(?:has|had)\s+(?:raised|secured|bagged)\b"),
)

_DESCRIPTOR_RE = re.compile(
    r"^.*\b(?:start-?up|brand|platform|company|firm|maker|player|unicorn|marketplace|"
    r"venture|label|chain|[\w.&]+-(?:backed|based|focused|led))\s+",
    re.I,
)
_LEADING_NOISE_RE = re.compile(r"^(?:exclusive|breaking|funding alert|report|how|why)\b[\s:,\-]*", re.I)
_LEADING_FILLERS = {
    "in", "on", "at", "for", "and", "but", "meanwhile", "earlier", "last", "this",
    "so", "also", "with", "now", "today", "while",
}
_STOP_BRANDS = {
    "india", "indian", "the", "startup", "startups", "funding", "exclusive", "breaking",
    "report", "this", "it", "company", "brand", "we", "they", "he", "she", "its",
}

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+(?=[A-Z\"“‘])")

_AMOUNT = r"(?:(?:US)?\$|USD|INR|Rs\.?|₹)\s?\d[\d,.]*\s?(?:crore|cr|lakh|million|mn|billion|bn|[MBK]\b)?"
_ROUND = (
    r"\b(?:pre-seed|seed|pre-series [a-f]|series [a-f]|bridge|angel|venture debt|debt)\s+"
    r"(?:round|funding|financing)\b"
)
_FUNDING_RE = re.compile(rf"{_AMOUNT}|{_ROUND}|\bseries [a-f]\b", re.I)
_STATS_RE = re.compile(
    r"\b\d+(?:\.\d+)?\s?(?:%|x\b|per ?cent\b)|"
    r"\b(?:revenue|arr|gmv|users|customers|orders|valuation|profit(?:able|ability)?|"
    r"growth|run-?rate|turnover)\b",
    re.I,
)
_SEEKING_RE = re.compile(
    r"\b(?:looking to raise|in talks to raise|plans? to raise|planning to raise|"
    r"seeking (?:funding|investment|investors|capital)|raising (?:funds|capital|a round)|"
    r"fund-?rais(?:e|es|ing)|funding round|pre-seed|seed round|seed funding|"
    r"pre-series [a-f]|series [a-f]\b|bridge round|angel round)",
    re.I,
)

_IGNORED_HOST_PARTS = (
    "facebook.", "twitter.", "x.com", "linkedin.", "instagram.", "youtube.", "youtu.be",
    "t.me", "whatsapp.", "google.", "apple.com", "wikipedia.", "crunchbase.", "tracxn.",
    "medium.com", "bit.ly",
)


def source_of(url: str) -> str:
    """Lower-cased host of ``url`` (scheme, port and path stripped)."""

    return (urlparse(url).hostname or "").lower()


class Extractor:
    """Turn one article page into zero or more brand records.

    Extraction is purely a function of ``(source_url, html)``: no network
    access, no randomness. Pages that cannot be interpreted yield ``[]``.
    """

    def __init__(
        self,
        max_brands: int = 3,
        max_fragments: int = 5,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.max_brands = max_brands
        self.max_fragments = max_fragments
        self.logger = logger or structlog.get_logger("funding_radar.extractor")

    def extract(self, source_url: str, html: str) -> list[BrandRecord]:
        try:
            return self._extract(source_url, html)
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("extract_failed", url=source_url, error=str(exc) or type(exc).__name__)
            return []

    # ------------------------------------------------------------------
    def _extract(self, source_url: str, html: str) -> list[BrandRecord]:
        if not html or not html.strip():
            return []
        tree = HTMLParser(html)
        headline = self._headline(tree)
        tree.strip_tags(_NOISE_TAGS, recursive=True)
        body = tree.css_first("article") or tree.css_first("main") or tree.body
        if body is None:
            return []

        sentences = self._sentences(body)
        brands = self._brands(headline, sentences)
        if not brands:
            return []

        corpus = " ".join(filter(None, [headline, *sentences]))
        looking = bool(_SEEKING_RE.search(corpus))
        funding = [s for s in sentences if _FUNDING_RE.search(s)]
        stats = [s for s in sentences if _STATS_RE.search(s)]
        links = self._links(body, source_url)
        emails = extract_emails(" ".join(href for href in links if href.lower().startswith("mailto:")))
        page_host = source_of(source_url)

        records: list[BrandRecord] = []
        for index, brand in enumerate(brands):
            primary = index == 0
            records.append(
                BrandRecord(
                    brand_name=brand,
                    website=self._website(brand, links, page_host),
                    headline=headline,
                    article_url=source_url,
                    contacts=self._contacts_for(brand, emails, primary),
                    funding_history=self._fragments_for(brand, funding, primary),
                    business_stats=self._fragments_for(brand, stats, primary),
                    likely_looking_for_funding=looking,
                )
            )
        return records

    @staticmethod
    def _headline(tree: HTMLParser) -> str | None:
        candidates: list[str | None] = []
        meta = tree.css_first('meta[property="og:title"]')
        if meta is not None:
            candidates.append(meta.attributes.get("content"))
        h1 = tree.css_first("h1")
        if h1 is not None:
            candidates.append(h1.text(separator=" ", strip=True))
        title = tree.css_first("title")
        if title is not None:
            candidates.append(title.text(separator=" ", strip=True))
        for candidate in candidates:
            text = " ".join((candidate or "").split())
            if text:
                return text
        return None

    @staticmethod
    def _sentences(body: Node) -> list[str]:
        paragraphs = [p.text(separator=" ", strip=True) for p in body.css("p")]
        paragraphs = [p for p in paragraphs if p]
        if not paragraphs:
            paragraphs = [body.text(separator=" ", strip=True)]
        sentences: list[str] = []
        for paragraph in paragraphs:
            for sentence in _SENTENCE_SPLIT_RE.split(" ".join(paragraph.split())):
                if sentence:
                    sentences.append(sentence)
        return sentences

    def _brands(self, headline: str | None, sentences: Iterable[str]) -> list[str]:
        candidates: list[str] = []
        if headline:
            match = _HEADLINE_RE.match(_LEADING_NOISE_RE.sub("", headline))
            if match:
                lead = match.group("brand").split(":")[-1].strip()
                candidates.append(_DESCRIPTOR_RE.sub("", lead))
            backed = _BACKED_RE.search(headline)
            if backed:
                candidates.append(backed.group("brand"))
        for sentence in sentences:
            for pattern in _BODY_PATTERNS:
                for match in pattern.finditer(sentence):
                    candidates.append(match.group("brand"))

        brands: list[str] = []
        seen: set[str] = set()
        for candidate in candidates:
            brand = self._clean_brand(candidate)
            if brand is None or brand.lower() in seen:
                continue
            seen.add(brand.lower())
            brands.append(brand)
            if len(brands) >= self.max_brands:
                break
        return brands

    @staticmethod
    def _clean_brand(raw: str) -> str | None:
        brand = re.sub(r"^\[[^\]]*\]\s*", "", raw or "")
        brand = _VERB_TAIL_RE.sub("", brand)
        brand = brand.strip(" \t\"'“”‘’,.:;|-")
        words = brand.split()
        while words and (words[0].lower() in _LEADING_FILLERS or words[0].isdigit()):
            words.pop(0)
        brand = " ".join(words).strip(" \"'“”‘’,.:;|-")
        if not 2 <= len(brand) <= 60 or len(brand.split()) > 6:
            return None
        if not brand[0].isalnum() or brand.lower() in _STOP_BRANDS:
            return None
        if not any(ch.isupper() or ch.isdigit() for ch in brand):
            return None
        return brand

    @staticmethod
    def _links(body: Node, base_url: str) -> list[str]:
        links: list[str] = []
        for node in body.css("a[href]"):
            href = (node.attributes.get("href") or "").strip()
            if not href or href.startswith(("javascript:", "#")):
                continue
            if href.lower().startswith("mailto:"):
                links.append(href)
            else:
                links.append(urljoin(base_url, href))
        return links

    @staticmethod
    def _website(brand: str, links: Iterable[str], page_host: str) -> str | None:
        token = re.sub(r"[^a-z0-9]", "", brand.lower())
        if len(token) < 3:
            return None
        bare_page_host = page_host.removeprefix("www.")
        for link in links:
            parsed = urlparse(link)
            host = (parsed.hostname or "").lower()
            if parsed.scheme not in ("http", "https") or not host:
                continue
            if host == bare_page_host or host.endswith("." + bare_page_host):
                continue
            if any(part in host for part in _IGNORED_HOST_PARTS):
                continue
            if token in re.sub(r"[^a-z0-9]", "", host):
                return f"{parsed.scheme}://{host}"
        return None

    @staticmethod
    def _contacts_for(brand: str, emails: list[str], primary: bool) -> set[str]:
        if primary:
            return set(emails)
        token = re.sub(r"[^a-z0-9]", "", brand.lower())
        return {email for email in emails if token and token in email.split("@", 1)[1]}

    def _fragments_for(self, brand: str, sentences: list[str], primary: bool) -> set[str]:
        needle = brand.lower()
        chosen = [s for s in sentences if needle in s.lower()]
        if not chosen and primary:
            chosen = sentences
        fragments: list[str] = []
        for sentence in chosen:
            fragment = textwrap.shorten(sentence, width=240, placeholder="…")
            if fragment not in fragments:
                fragments.append(fragment)
            if len(fragments) >= self.max_fragments:
                break
        return set(fragments)


__all__ = ["Extractor", "source_of"]
