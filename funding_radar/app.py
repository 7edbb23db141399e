"""Typer CLI entrypoint for Funding-Radar."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import AgentConfig, ConfigRepository
from .errors import ConfigError, PipelineError
from .logging_conf import (
    available_source_logs,
    configure_logging,
    current_log_dir,
    source_log_name,
    tail_log,
)
from .models import AgentResponse
from .orchestrator import Orchestrator

app = typer.Typer(
    help="Funding-Radar: find brands raising or seeking funding in public news.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(name="config", help="Inspect configuration.", no_args_is_help=True)
log_app = typer.Typer(name="log", help="Inspect log files.", no_args_is_help=True)

console = Console()
err_console = Console(stderr=True)


@dataclass
class AppState:
    repository: ConfigRepository
    config: AgentConfig
    orchestrator: Orchestrator


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    config = repository.load_config()
    return AppState(
        repository=repository,
        config=config,
        orchestrator=Orchestrator(config),
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        try:
            state = build_state(verbose=False)
        except ConfigError as exc:
            err_console.print(f"Configuration error: {exc}", style="red")
            raise typer.Exit(code=2) from exc
        ctx.obj = state
    return state


def _summary_line(response: AgentResponse) -> str:
    meta = response.meta
    return (
        f"Scanned {meta.total_articles_scanned} articles across {meta.total_sources} sources "
        f"in {round(meta.duration_ms / 1000)}s, {len(response.results)} brands"
    )


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    if verbose:
        try:
            ctx.obj = build_state(verbose=True)
        except ConfigError as exc:
            err_console.print(f"Configuration error: {exc}", style="red")
            raise typer.Exit(code=2) from exc


@app.command("run", help="Search, fetch and extract brand funding records.")
def run(
    ctx: typer.Context,
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Search topic."),
    max_results: Optional[str] = typer.Option(
        None, "--max", "-m", help="Maximum results (clamped to the configured range)."
    ),
    sources: Optional[str] = typer.Option(
        None, "--sources", "-s", help="Comma-separated source domains."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the JSON envelope to this file."
    ),
) -> None:
    state = _get_state(ctx)
    try:
        response = state.orchestrator.run_sync(
            query=query, max_results=max_results, sources=sources
        )
    except PipelineError as exc:
        err_console.print(f"Run failed: {exc}", style="red")
        raise typer.Exit(code=1) from exc

    payload = response.to_json()
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload + "\n", encoding="utf-8")
        err_console.print(f"Wrote {output}", style="dim")
    else:
        typer.echo(payload)
    err_console.print(_summary_line(response), style="green")


@config_app.command("show", help="Print the effective configuration as YAML.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    payload = state.config.model_dump(mode="json")
    typer.echo(yaml.safe_dump(payload, allow_unicode=True, sort_keys=False).rstrip())


@config_app.command("path", help="Print the configuration file location.")
def config_path(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    typer.echo(str(state.repository.locator.config_path()))


@log_app.command("list", help="List per-source log files.")
def log_list(ctx: typer.Context) -> None:
    _get_state(ctx)
    logs = list(available_source_logs())
    if not logs:
        console.print("No source logs yet.", style="dim")
        return
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("Log file", style="green")
    for path in logs:
        table.add_row(path.name)
    console.print(table)


@log_app.command("show", help="Show the most recent lines of a log.")
def log_show(
    ctx: typer.Context,
    source: Optional[str] = typer.Option(
        None, "--source", help="Source domain (defaults to the main agent log)."
    ),
    tail: int = typer.Option(100, "--tail", help="Number of lines to show."),
) -> None:
    _get_state(ctx)
    base_dir = current_log_dir()
    path = base_dir / "sources" / f"{source_log_name(source)}.log" if source else base_dir / "agent.log"
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} lines", style="cyan")
    typer.echo("".join(lines).rstrip())


app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
