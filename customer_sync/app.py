"""Typer CLI entrypoint for customer-sync."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, SyncConfig
from .engine import ElasticsearchStore
from .engine.exporter import JsonLinesExporter
from .exceptions import ConfigError, SyncError
from .logging_conf import SYNC_LOG, configure_logging, tail_log
from .pipeline import ExtractionPipeline, RunSummary

app = typer.Typer(
    help="Rebuild the customer index from order documents in the search store.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(name="config", help="Inspect or create the configuration file.", no_args_is_help=True)
log_app = typer.Typer(name="log", help="Read the sync log.", no_args_is_help=True)

console = Console()

SyncRunner = Callable[[SyncConfig, Optional[Path]], RunSummary]


def run_sync(config: SyncConfig, output: Path | None = None) -> RunSummary:
    """Run one extraction against the configured store.

    With ``output`` the canonical customers go to a JSON-lines file instead of
    the destination index; the source index is still scrolled the same way.
    """

    store = ElasticsearchStore.from_config(config.store)
    exporter: JsonLinesExporter | None = None
    try:
        if output is not None:
            exporter = JsonLinesExporter(output)
        pipeline = ExtractionPipeline.from_config(config.extraction, store, exporter=exporter)
        return pipeline.run()
    finally:
        if exporter is not None:
            exporter.close()
        store.close()


@dataclass
class AppState:
    repository: ConfigRepository
    runner: SyncRunner
    verbose: bool = False


def build_state(verbose: bool) -> AppState:
    return AppState(repository=ConfigRepository(), runner=run_sync, verbose=verbose)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _load_config(state: AppState, path: Optional[Path]) -> SyncConfig:
    if path is not None and not path.exists():
        console.print(f"Config file not found: {path}", style="red")
        raise typer.Exit(code=1)
    try:
        return state.repository.load_config(path)
    except ConfigError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc


def _render_summary(config: SyncConfig, summary: RunSummary, output: Optional[Path]) -> Table:
    destination = str(output) if output is not None else config.extraction.destination_index
    table = Table(
        title=f"{config.extraction.source_index} → {destination}",
        box=box.SIMPLE_HEAD,
    )
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Unique customers written", str(summary.processed))
    table.add_row("Duplicates skipped", str(summary.duplicates))
    table.add_row("Documents rejected", str(summary.rejected))
    table.add_row("Pages scanned", str(summary.pages))
    return table


app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Scan the source index once and upsert one document per unique customer.")
def run(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to a YAML/JSON config file."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        help="Write canonical customers to this JSON-lines file instead of the destination index.",
    ),
    workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Parallel writers per page."),
    quiet: bool = typer.Option(False, "--quiet", help="Print a single summary line."),
) -> None:
    state = _get_state(ctx)
    config = _load_config(state, config_path)
    if workers is not None:
        extraction = config.extraction.model_copy(update={"write_workers": workers})
        config = config.model_copy(update={"extraction": extraction})
    configure_logging(
        verbose=state.verbose or config.logging.verbose,
        log_dir=state.repository.log_dir(config),
    )

    try:
        summary = state.runner(config, output)
    except SyncError as exc:
        console.print(f"Sync failed: {exc}", style="red", markup=False)
        raise typer.Exit(code=1) from exc

    if quiet:
        console.print(
            f"Done: {summary.processed} written, {summary.duplicates} duplicates, "
            f"{summary.rejected} rejected"
        )
        return
    console.print(_render_summary(config, summary, output))


@config_app.command("init", help="Write a default config file.")
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    state = _get_state(ctx)
    try:
        path = state.repository.write_default(force=force)
    except FileExistsError as exc:
        console.print(f"{exc} (use --force to overwrite)", style="yellow")
        raise typer.Exit(code=1) from exc
    console.print(f"Config written to {path}", style="green")


@config_app.command("show", help="Print the effective configuration with secrets masked.")
def config_show(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to a YAML/JSON config file."),
) -> None:
    state = _get_state(ctx)
    config = _load_config(state, config_path)
    console.print(
        yaml.safe_dump(config.masked(), allow_unicode=True, sort_keys=False),
        end="",
        markup=False,
        highlight=False,
    )


@log_app.command("show", help="Show the last lines of the sync log.")
def log_show(
    ctx: typer.Context,
    lines: int = typer.Option(50, "--lines", "-n", min=1, help="Number of lines to show."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to a YAML/JSON config file."),
) -> None:
    state = _get_state(ctx)
    config = _load_config(state, config_path)
    log_path = state.repository.log_dir(config) / SYNC_LOG
    content = tail_log(log_path, lines)
    if not content:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{log_path} (last {len(content)} lines)", style="cyan")
    console.print("".join(content), end="", markup=False, highlight=False)


__all__ = ["AppState", "app", "build_state", "run_sync"]
