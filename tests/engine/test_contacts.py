from __future__ import annotations

import pytest

from funding_radar.engine.contacts import extract_address, extract_emails, extract_phones


def test_extract_emails_handles_mailto_and_obfuscation() -> None:
    html = """
    <a href="mailto:Hello@Acme.in?subject=Hi">Write to us</a>
    <p>Partnerships: partners [at] acme [dot] in</p>
    <p>Tracking pixel: 1x1@2x.png and noreply@example.com</p>
    """
    assert extract_emails(html) == ["hello@acme.in", "partners@acme.in"]


def test_extract_emails_empty() -> None:
    assert extract_emails("") == []


def test_extract_phones_prefers_tel_links_and_dedupes() -> None:
    html = """
    <a href="tel:+91-98765-43210">Call</a>
    <p>Phone: +91 98765 43210</p>
    <p>Office: 080 4567 8901</p>
    <p>Published 2024-05-01 at 10:00</p>
    """
    assert extract_phones(html) == ["+91-98765-43210", "080 4567 8901"]


@pytest.mark.parametrize(
    ("html", "expected"),
    [
        (
            "<footer><address>12 MG Road,\n Bengaluru 560001</address></footer>",
            "12 MG Road, Bengaluru 560001",
        ),
        (
            '<div><span itemprop="streetAddress">4th Floor, Tower B</span>'
            '<span itemprop="addressLocality">Gurugram</span>'
            '<span itemprop="postalCode">122002</span></div>',
            "4th Floor, Tower B, Gurugram, 122002",
        ),
        (
            "<p>Registered Office: 221B Residency Road, Bengaluru 560025</p>",
            "221B Residency Road, Bengaluru 560025",
        ),
    ],
)
def test_extract_address_sources(html: str, expected: str) -> None:
    assert extract_address(html) == expected


def test_extract_address_absent() -> None:
    assert extract_address("<p>We love snacks.</p>") is None
