"""Pydantic models used across the Funding-Radar configuration flow."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

DEFAULT_SOURCES = [
    "yourstory.com",
    "inc42.com",
    "entrackr.com",
    "vccircle.com",
    "startuptalky.com",
]

DEFAULT_QUERY = "India startup funding raises seed Series A brand"


_HOST_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9-]*[a-z0-9])?)+$")
_LEADING_INT_RE = re.compile(r"\s*([-+]?\d+)")


def _bare_host(value: Any) -> str | None:
    """Reduce a domain or site URL to its hostname; anything path-like is rejected."""

    text = str(value or "").strip().lower()
    if not text or ".." in text or any(ch.isspace() for ch in text):
        return None
    parsed = urlparse(text if "//" in text else "//" + text)
    if parsed.path not in ("", "/") or parsed.query or parsed.fragment:
        return None
    host = parsed.hostname or ""
    return host if _HOST_RE.match(host) else None


def _clean_domains(values: Iterable[Any]) -> list[str]:
    cleaned: list[str] = []
    for value in values:
        domain = _bare_host(value)
        if domain and domain not in cleaned:
            cleaned.append(domain)
    return cleaned


class AgentConfig(BaseModel):
    """Settings shared by every pipeline run."""

    default_query: str = DEFAULT_QUERY
    default_max_results: int = 20
    min_results: int = 5
    max_results: int = 50
    default_sources: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCES))

    fetch_deadline_seconds: float = 25.0
    search_timeout_seconds: float = 10.0
    request_timeout_seconds: float = 15.0
    search_extra_results: int = 2
    search_endpoint: str = "https://html.duckduckgo.com/html/"

    enrich_timeout_seconds: float = 10.0
    enrich_min_interval_seconds: float = 0.5
    contact_paths: list[str] = Field(default_factory=lambda: ["/contact", "/contact-us"])

    max_brands_per_article: int = 3
    max_fragments_per_field: int = 5

    user_agent_list: list[str] | Path | None = None

    @field_validator("default_sources", mode="before")
    @classmethod
    def _coerce_sources(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            raise ValueError("default_sources expects a list of domains")
        cleaned = _clean_domains(value)
        if not cleaned:
            raise ValueError("default_sources cannot be empty")
        return cleaned

    @field_validator(
        "fetch_deadline_seconds",
        "search_timeout_seconds",
        "request_timeout_seconds",
        "enrich_timeout_seconds",
    )
    @classmethod
    def _positive_seconds(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Timeouts must be greater than 0")
        return value

    @field_validator("enrich_min_interval_seconds", "search_extra_results")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("Value must be >= 0")
        return value

    @field_validator("contact_paths", mode="before")
    @classmethod
    def _coerce_paths(cls, value: Any) -> list[str]:
        if value in (None, ""):
            return []
        if not isinstance(value, (list, tuple)):
            raise ValueError("contact_paths expects a list of paths")
        paths: list[str] = []
        for item in value:
            path = str(item).strip()
            if not path:
                continue
            if not path.startswith("/"):
                path = "/" + path
            paths.append(path)
        return paths

    @model_validator(mode="after")
    def _validate_bounds(self) -> "AgentConfig":
        if self.min_results < 1:
            raise ValueError("min_results must be >= 1")
        if self.max_results < self.min_results:
            raise ValueError("max_results must be >= min_results")
        if not self.min_results <= self.default_max_results <= self.max_results:
            raise ValueError("default_max_results must lie within [min_results, max_results]")
        if self.max_brands_per_article < 1 or self.max_fragments_per_field < 1:
            raise ValueError("Per-article caps must be >= 1")
        return self

    @model_validator(mode="after")
    def _apply_user_agents(self) -> "AgentConfig":
        if isinstance(self.user_agent_list, Path):
            if not self.user_agent_list.exists():
                raise ValueError(f"UA file not found: {self.user_agent_list}")
            content = self.user_agent_list.read_text(encoding="utf-8").splitlines()
            self.user_agent_list = [line.strip() for line in content if line.strip()]
        return self


class RunRequest(BaseModel):
    """Caller input after defensive normalisation.

    Out-of-range or malformed values are clamped or replaced with defaults
    rather than rejected, so building a request never raises for bad input.
    """

    query: str
    max_results: int
    sources: list[str]

    @field_validator("query", mode="before")
    @classmethod
    def _default_query(cls, value: Any, info: ValidationInfo) -> str:
        config = _config_from(info)
        text = " ".join(str(value).split()) if value is not None else ""
        return text or config.default_query

    @field_validator("max_results", mode="before")
    @classmethod
    def _clamp_max(cls, value: Any, info: ValidationInfo) -> int:
        config = _config_from(info)
        # Leading digits count, so "7.5" reads as 7 and "12abc" as 12.
        match = _LEADING_INT_RE.match(str(value)) if value is not None else None
        number = int(match.group(1)) if match else config.default_max_results
        return max(config.min_results, min(number, config.max_results))

    @field_validator("sources", mode="before")
    @classmethod
    def _default_sources(cls, value: Any, info: ValidationInfo) -> list[str]:
        config = _config_from(info)
        if isinstance(value, str):
            value = value.split(",")
        cleaned = _clean_domains(value) if isinstance(value, (list, tuple)) else []
        return cleaned or list(config.default_sources)

    @classmethod
    def normalise(
        cls,
        config: AgentConfig,
        *,
        query: Any = None,
        max_results: Any = None,
        sources: Any = None,
    ) -> "RunRequest":
        return cls.model_validate(
            {"query": query, "max_results": max_results, "sources": sources},
            context={"config": config},
        )


def _config_from(info: ValidationInfo) -> AgentConfig:
    context = info.context or {}
    config = context.get("config")
    return config if isinstance(config, AgentConfig) else AgentConfig()


__all__ = ["AgentConfig", "DEFAULT_QUERY", "DEFAULT_SOURCES", "RunRequest"]
