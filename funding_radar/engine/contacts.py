"""Contact snippet extraction from raw HTML."""

from __future__ import annotations

import html
import re
import textwrap
import urllib.parse

from selectolax.parser import HTMLParser

_EMAIL_RE = re.compile(r"\b[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}\b")
_MAILTO_RE = re.compile(r"mailto:([^\"'\s>]+)", re.I)
_TEL_RE = re.compile(r"tel:([^\"'>]+)", re.I)
_PHONE_RE = re.compile(r"(?<![\w+])(\+?\d[\d ().\-]{8,18}\d)(?!\w)")
_ADDRESS_LABEL_RE = re.compile(
    r"(?:registered office|office address|address)\s*[:\-]\s*([^\n]{10,240})", re.I
)

_OBFUSCATED = [
    (re.compile(r"\s*\[\s*at\s*\]\s*", re.I), "@"),
    (re.compile(r"\s*\(\s*at\s*\)\s*", re.I), "@"),
    (re.compile(r"\s*\[\s*dot\s*\]\s*", re.I), "."),
    (re.compile(r"\s*\(\s*dot\s*\)\s*", re.I), "."),
]

_JUNK_DOMAIN_SUBSTR = (
    "example.com",
    "sentry.io",
    "sentry-next.",
    "wixpress.com",
    "domain.com",
    "godaddy.com",
)

_ASSET_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".css", ".js")


def _deobfuscate(text: str) -> str:
    for pattern, replacement in _OBFUSCATED:
        text = pattern.sub(replacement, text)
    return text


def _clean_email(raw: str) -> str:
    candidate = urllib.parse.unquote(raw or "").split("?")[0]
    return candidate.strip(" \t\r\n\"'<>[](){}.,;:").lower()


def _is_junk_email(email: str) -> bool:
    if "@" not in email or email.endswith(_ASSET_SUFFIXES):
        return True
    domain = email.split("@", 1)[1]
    return any(bad in domain for bad in _JUNK_DOMAIN_SUBSTR)


def extract_emails(raw_html: str) -> list[str]:
    """Return sorted, de-duplicated emails found in markup or text."""

    if not raw_html:
        return []
    text = _deobfuscate(html.unescape(raw_html))
    found: set[str] = set()
    for match in _EMAIL_RE.findall(text):
        email = _clean_email(match)
        if email and not _is_junk_email(email):
            found.add(email)
    for match in _MAILTO_RE.findall(text):
        email = _clean_email(match)
        if _EMAIL_RE.fullmatch(email) and not _is_junk_email(email):
            found.add(email)
    return sorted(found)


def _normalise_phone(raw: str) -> str | None:
    phone = " ".join(urllib.parse.unquote(raw).split()).strip(" .-")
    digits = re.sub(r"\D", "", phone)
    if not 10 <= len(digits) <= 15:
        return None
    return phone


def extract_phones(raw_html: str) -> list[str]:
    """Return phone numbers from ``tel:`` links and visible text, first seen first."""

    if not raw_html:
        return []
    phones: list[str] = []
    seen_digits: set[str] = set()

    def _add(raw: str) -> None:
        phone = _normalise_phone(raw)
        if phone is None:
            return
        digits = re.sub(r"\D", "", phone)
        if digits in seen_digits:
            return
        seen_digits.add(digits)
        phones.append(phone)

    for match in _TEL_RE.findall(raw_html):
        _add(match)
    text = HTMLParser(raw_html).text(separator="\n", strip=True)
    for match in _PHONE_RE.findall(text):
        # ISO dates only count when prefixed with a country code.
        if "+" not in match and re.search(r"\d{4}-\d{2}-\d{2}", match):
            continue
        _add(match)
    return phones


def extract_address(raw_html: str) -> str | None:
    """Return a best-effort postal address snippet."""

    if not raw_html:
        return None
    tree = HTMLParser(raw_html)
    node = tree.css_first("address")
    if node is not None:
        text = node.text(separator=" ", strip=True)
        if text:
            return _shorten(text)
    parts: list[str] = []
    for prop in ("streetAddress", "addressLocality", "addressRegion", "postalCode"):
        prop_node = tree.css_first(f'[itemprop="{prop}"]')
        if prop_node is not None:
            value = prop_node.text(separator=" ", strip=True)
            if value:
                parts.append(value)
    if parts:
        return _shorten(", ".join(parts))
    text = tree.text(separator="\n", strip=True)
    match = _ADDRESS_LABEL_RE.search(text)
    if match:
        return _shorten(match.group(1))
    return None


def _shorten(text: str) -> str:
    return textwrap.shorten(" ".join(text.split()), width=200, placeholder="…")


__all__ = ["extract_address", "extract_emails", "extract_phones"]
