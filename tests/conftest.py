"""Shared fixtures for the Funding-Radar test-suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable

import httpx
import pytest

from funding_radar.config import AgentConfig, ConfigLocator, ConfigRepository
from funding_radar.logging_conf import configure_logging
from funding_radar.models import BrandRecord

ARTICLE_HTML = """
<html>
<head>
  <title>Snitch raises $40 Mn in Series B | Inc42</title>
  <meta property="og:title" content="D2C Brand Snitch Raises $40 Mn In Series B Led By SWC Global">
</head>
<body>
  <header><nav><a href="https://www.facebook.com/inc42">Facebook</a></nav></header>
  <article>
    <h1>D2C Brand Snitch Raises $40 Mn In Series B Led By SWC Global</h1>
    <p>Bengaluru-based fashion brand Snitch has raised $40 Mn in its Series B funding round led by SWC Global. The startup will use the funds to expand its offline footprint.</p>
    <p>Snitch clocked revenue of Rs 241 Cr in FY24, a 100% jump from the previous year. Follow <a href="https://www.instagram.com/snitch.co.in">Instagram</a> or visit <a href="https://www.snitch.co.in/">Snitch</a> for more.</p>
    <p>Meanwhile, Zepto, a quick commerce startup, is in talks to raise fresh capital. Reach the team at <a href="mailto:press@snitch.co.in">press@snitch.co.in</a>.</p>
  </article>
  <footer>Contact: editor@inc42.com</footer>
</body>
</html>
"""


@pytest.fixture(scope="session", autouse=True)
def _isolated_logs(tmp_path_factory: pytest.TempPathFactory) -> None:
    configure_logging(log_dir=tmp_path_factory.mktemp("logs"))


@pytest.fixture
def sample_agent_config() -> AgentConfig:
    return AgentConfig(
        fetch_deadline_seconds=0.5,
        search_timeout_seconds=1.0,
        request_timeout_seconds=1.0,
        enrich_timeout_seconds=1.0,
        enrich_min_interval_seconds=0.0,
    )


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("FUNDING_RADAR_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator)
    yield repository


@pytest.fixture
def article_html() -> str:
    return ARTICLE_HTML


@pytest.fixture
def brand_record() -> Callable[..., BrandRecord]:
    def _builder(**overrides: Any) -> BrandRecord:
        base: dict[str, Any] = {
            "brand_name": "Acme",
            "website": "https://acme.in",
            "headline": "Acme raises $5 Mn",
            "article_url": "https://inc42.com/buzz/acme/",
            "source": "inc42.com",
        }
        base.update(overrides)
        return BrandRecord(**base)

    return _builder


@pytest.fixture
def html_response() -> Callable[..., httpx.Response]:
    def _builder(body: str, status: int = 200) -> httpx.Response:
        return httpx.Response(status, text=body, headers={"content-type": "text/html; charset=utf-8"})

    return _builder


@pytest.fixture
def mock_client() -> Callable[..., httpx.AsyncClient]:
    def _builder(handler: Callable[[httpx.Request], Any]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)

    return _builder
