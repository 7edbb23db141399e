from __future__ import annotations

import httpx
import pytest

from funding_radar.config import AgentConfig
from funding_radar.infra import USER_AGENT_BROWSER, UserAgentPool, create_client


def test_user_agent_pool_round_robin() -> None:
    pool = UserAgentPool(["UA-1", " ", "UA-2"])
    assert not pool.empty
    assert [pool.get() for _ in range(3)] == ["UA-1", "UA-2", "UA-1"]


def test_user_agent_pool_falls_back_to_browser_agent() -> None:
    pool = UserAgentPool()
    assert pool.empty
    assert pool.get() == USER_AGENT_BROWSER


def test_user_agent_pool_from_config() -> None:
    pool = UserAgentPool.from_config(AgentConfig(user_agent_list=["Custom/1.0"]))
    assert pool.get() == "Custom/1.0"


@pytest.mark.asyncio
async def test_create_client_sends_browser_headers() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured.update(request.headers)
        return httpx.Response(200, text="ok")

    config = AgentConfig(request_timeout_seconds=3)
    async with create_client(
        config, UserAgentPool(["Radar/1.0"]), transport=httpx.MockTransport(handler)
    ) as client:
        assert client.timeout.read == 3
        assert client.follow_redirects is True
        await client.get("https://inc42.com/")

    assert captured["user-agent"] == "Radar/1.0"
    assert captured["accept-language"].startswith("en-IN")


@pytest.mark.asyncio
async def test_create_client_rotates_user_agent_per_request() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["user-agent"])
        return httpx.Response(200, text="ok")

    pool = UserAgentPool(["Radar/1.0", "Radar/2.0"])
    async with create_client(AgentConfig(), pool, transport=httpx.MockTransport(handler)) as client:
        for _ in range(3):
            await client.get("https://inc42.com/")

    assert seen == ["Radar/1.0", "Radar/2.0", "Radar/1.0"]
