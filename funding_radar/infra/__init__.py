"""Infra layer utilities (HTTP client, user agents)."""

from .http import USER_AGENT_BROWSER, UserAgentPool, create_client

__all__ = ["USER_AGENT_BROWSER", "UserAgentPool", "create_client"]
