"""Shared HTTP client factory and user-agent rotation."""

from __future__ import annotations

from itertools import cycle
from threading import Lock
from typing import Iterable, Iterator

import httpx

from ..config import AgentConfig

USER_AGENT_BROWSER = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

_BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-IN,en;q=0.9",
}


class UserAgentPool:
    """Hand out configured user agents in round-robin order."""

    def __init__(self, user_agents: Iterable[str] | None = None) -> None:
        self._lock = Lock()
        self._uas = [ua.strip() for ua in user_agents or () if ua and ua.strip()]
        self._cycle: Iterator[str] | None = cycle(self._uas) if self._uas else None

    @property
    def empty(self) -> bool:
        return not self._uas

    def get(self) -> str:
        with self._lock:
            if self._cycle is None:
                return USER_AGENT_BROWSER
            return next(self._cycle)

    @classmethod
    def from_config(cls, config: AgentConfig) -> "UserAgentPool":
        agents = config.user_agent_list if isinstance(config.user_agent_list, list) else None
        return cls(agents)


def create_client(
    config: AgentConfig,
    ua_pool: UserAgentPool | None = None,
    *,
    timeout: float | None = None,
    max_connections: int = 20,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the async client shared by search, fetch and enrichment.

    Every request carries browser-like headers and the next user agent from
    the pool, set by a request hook.
    """

    pool = ua_pool or UserAgentPool.from_config(config)

    async def _rotate_user_agent(request: httpx.Request) -> None:
        request.headers["User-Agent"] = pool.get()

    kwargs: dict = {
        "timeout": timeout or config.request_timeout_seconds,
        "headers": dict(_BROWSER_HEADERS),
        "event_hooks": {"request": [_rotate_user_agent]},
        "follow_redirects": True,
        "limits": httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_connections // 2,
        ),
    }
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.AsyncClient(**kwargs)


__all__ = ["USER_AGENT_BROWSER", "UserAgentPool", "create_client"]
