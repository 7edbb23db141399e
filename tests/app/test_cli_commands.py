from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import yaml
from typer.testing import CliRunner

from funding_radar.app import AppState, app
from funding_radar.config import AgentConfig
from funding_radar.errors import PipelineError
from funding_radar.models import AgentResponse, BrandRecord, RunMeta


class StubOrchestrator:
    def __init__(self, response: AgentResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def run_sync(self, query=None, max_results=None, sources=None) -> AgentResponse:
        self.calls.append({"query": query, "max_results": max_results, "sources": sources})
        if self.error is not None:
            raise self.error
        return self.response


def make_response() -> AgentResponse:
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    meta = RunMeta.build(total_sources=2, total_articles_scanned=4, started_at=now, finished_at=now)
    record = BrandRecord(brand_name="Snitch", website="https://www.snitch.co.in", source="inc42.com")
    return AgentResponse(results=(record,), meta=meta)


def make_state(orchestrator: StubOrchestrator, config: AgentConfig | None = None) -> AppState:
    repository = SimpleNamespace(
        locator=SimpleNamespace(config_path=lambda: Path("/tmp/radar/data/agent_config.yaml"))
    )
    return AppState(repository=repository, config=config or AgentConfig(), orchestrator=orchestrator)


def test_cli_run_writes_json_envelope(monkeypatch, tmp_path: Path) -> None:
    orchestrator = StubOrchestrator(make_response())
    monkeypatch.setattr("funding_radar.app.build_state", lambda verbose: make_state(orchestrator))
    output = tmp_path / "out" / "results.json"

    runner = CliRunner()
    result = runner.invoke(
        app, ["run", "-q", "d2c funding", "-m", "10", "-s", "inc42.com,entrackr.com", "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert orchestrator.calls == [
        {"query": "d2c funding", "max_results": "10", "sources": "inc42.com,entrackr.com"}
    ]
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["results"][0]["brandName"] == "Snitch"
    assert payload["meta"]["totalArticlesScanned"] == 4


def test_cli_run_prints_json_to_stdout(monkeypatch) -> None:
    orchestrator = StubOrchestrator(make_response())
    monkeypatch.setattr("funding_radar.app.build_state", lambda verbose: make_state(orchestrator))

    runner = CliRunner()
    result = runner.invoke(app, ["run"])

    assert result.exit_code == 0, result.output
    assert '"brandName": "Snitch"' in result.output
    assert orchestrator.calls == [{"query": None, "max_results": None, "sources": None}]


def test_cli_run_reports_pipeline_failure(monkeypatch) -> None:
    orchestrator = StubOrchestrator(error=PipelineError("loop died"))
    monkeypatch.setattr("funding_radar.app.build_state", lambda verbose: make_state(orchestrator))

    runner = CliRunner()
    result = runner.invoke(app, ["run"])

    assert result.exit_code == 1


def test_cli_config_show_and_path(monkeypatch) -> None:
    config = AgentConfig(default_sources=["inc42.com"], default_max_results=10)
    monkeypatch.setattr(
        "funding_radar.app.build_state", lambda verbose: make_state(StubOrchestrator(), config)
    )

    runner = CliRunner()
    shown = runner.invoke(app, ["config", "show"])
    assert shown.exit_code == 0, shown.output
    payload = yaml.safe_load(shown.output)
    assert payload["default_sources"] == ["inc42.com"]
    assert payload["default_max_results"] == 10

    located = runner.invoke(app, ["config", "path"])
    assert located.exit_code == 0
    assert "agent_config.yaml" in located.output


def test_cli_log_commands(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        "funding_radar.app.build_state", lambda verbose: make_state(StubOrchestrator())
    )
    sources_dir = tmp_path / "sources"
    sources_dir.mkdir()
    (sources_dir / "inc42.com.log").write_text('{"event": "search_completed"}\n', encoding="utf-8")
    monkeypatch.setattr("funding_radar.app.current_log_dir", lambda: tmp_path)
    monkeypatch.setattr("funding_radar.app.available_source_logs", lambda: [sources_dir / "inc42.com.log"])

    runner = CliRunner()
    listed = runner.invoke(app, ["log", "list"])
    assert listed.exit_code == 0, listed.output
    assert "inc42.com.log" in listed.output

    shown = runner.invoke(app, ["log", "show", "--source", "inc42.com", "--tail", "5"])
    assert shown.exit_code == 0, shown.output
    assert "search_completed" in shown.output
