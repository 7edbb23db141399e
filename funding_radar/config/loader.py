"""Configuration loading helpers for Funding-Radar."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .models import AgentConfig

AGENT_CONFIG_FILENAME = "agent_config.yaml"
HOME_ENV_VAR = "FUNDING_RADAR_HOME"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Unreadable configuration file: {path}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV_VAR)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.data_dir / AGENT_CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: AgentConfig | None = None

    def load_config(self) -> AgentConfig:
        if self._cache is not None:
            return self._cache
        path = self.locator.config_path()
        if path.exists():
            payload = _read_file(path)
            try:
                config = AgentConfig.model_validate(payload)
            except ValidationError as exc:
                raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc
        else:
            config = AgentConfig()
            self.save_config(config)
        self._cache = config
        return config

    def save_config(self, config: AgentConfig) -> Path:
        path = self.locator.config_path()
        payload = config.model_dump(mode="json")
        _write_file(path, payload)
        self._cache = config
        return path


__all__ = ["AGENT_CONFIG_FILENAME", "ConfigLocator", "ConfigRepository"]
