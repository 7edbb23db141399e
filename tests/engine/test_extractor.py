from __future__ import annotations

import pytest

from funding_radar.engine.extractor import Extractor, source_of

ARTICLE_URL = "https://inc42.com/buzz/snitch-series-b/"


def test_extract_brands_from_headline_and_body(article_html: str) -> None:
    records = Extractor().extract(ARTICLE_URL, article_html)
    assert [record.brand_name for record in records] == ["Snitch", "Zepto"]

    snitch, zepto = records
    assert snitch.headline == "D2C Brand Snitch Raises $40 Mn In Series B Led By SWC Global"
    assert snitch.article_url == ARTICLE_URL
    assert snitch.source is None
    assert snitch.website == "https://www.snitch.co.in"
    assert snitch.contacts == {"press@snitch.co.in"}
    assert snitch.likely_looking_for_funding is True
    assert any("$40 Mn" in fragment for fragment in snitch.funding_history)
    assert any("Rs 241 Cr" in fragment for fragment in snitch.funding_history)
    assert any("revenue" in fragment for fragment in snitch.business_stats)

    assert zepto.website is None
    assert zepto.contacts == set()
    assert zepto.funding_history == set()


def test_extract_is_deterministic(article_html: str) -> None:
    extractor = Extractor()
    first = [record.to_dict() for record in extractor.extract(ARTICLE_URL, article_html)]
    second = [record.to_dict() for record in extractor.extract(ARTICLE_URL, article_html)]
    assert first == second


def test_extract_strips_headline_noise_and_descriptors() -> None:
    html = """
    <html><head><title>Exclusive: Sequoia-backed Acme Foods bags Rs 50 Cr</title></head>
    <body><article><p>The company makes millet snacks for kids.</p></article></body></html>
    """
    records = Extractor().extract("https://entrackr.com/2024/05/acme/", html)
    assert [record.brand_name for record in records] == ["Acme Foods"]
    assert records[0].likely_looking_for_funding is False


def test_extract_caps_brands_and_fragments() -> None:
    html = """
    <html><body><article>
      <p>Alpha has raised $1 Mn. Beta has raised $2 Mn. Gamma has raised $3 Mn. Delta has raised $4 Mn.</p>
    </article></body></html>
    """
    records = Extractor(max_brands=2, max_fragments=1).extract("https://vccircle.com/x", html)
    assert [record.brand_name for record in records] == ["Alpha", "Beta"]
    assert records[0].funding_history == {"Alpha has raised $1 Mn."}


@pytest.mark.parametrize(
    "html",
    [
        "",
        "   ",
        "<html><body><p>Markets closed lower today.</p></body></html>",
        "<<<>>><div><p",
    ],
)
def test_extract_yields_nothing_for_uninterpretable_pages(html: str) -> None:
    assert Extractor().extract("https://yourstory.com/a", html) == []


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://inc42.com/buzz/a/", "inc42.com"),
        ("https://YourStory.com:443/2024/a", "yourstory.com"),
        ("https://www.entrackr.com/x", "www.entrackr.com"),
    ],
)
def test_source_of_returns_hostname(url: str, expected: str) -> None:
    assert source_of(url) == expected
