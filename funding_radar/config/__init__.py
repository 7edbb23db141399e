"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import DEFAULT_QUERY, DEFAULT_SOURCES, AgentConfig, RunRequest

__all__ = [
    "AgentConfig",
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_QUERY",
    "DEFAULT_SOURCES",
    "RunRequest",
]
