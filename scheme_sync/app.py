"""Typer CLI entrypoint for scheme-sync."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigLocator, ConfigRepository, SourceConfig, SyncConfig
from .engine import Fetcher
from .errors import SchemeSyncError
from .infra import CacheStore, SQLiteManager
from .logging_conf import configure_logging
from .orchestrator import Orchestrator, SyncSummary

app = typer.Typer(
    help="Aggregate terminal color schemes into one catalog.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
cache_app = typer.Typer(
    name="cache",
    help="Inspect or prune the URL cache.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    storage: SQLiteManager
    verbose: bool = False

    def open_cache(self) -> CacheStore:
        cache_path = self.repository.resolve(self.repository.load().settings.cache_path)
        return CacheStore(self.storage, cache_path)


def build_state(verbose: bool, config_path: Path | None = None) -> AppState:
    locator = ConfigLocator()
    repository = ConfigRepository(locator, path=config_path)
    configure_logging(verbose=verbose, log_dir=locator.logs_dir)
    return AppState(repository=repository, storage=SQLiteManager(), verbose=verbose)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _load_config(state: AppState) -> SyncConfig:
    try:
        return state.repository.load()
    except (OSError, ValueError) as exc:
        console.print(f"Invalid configuration {state.repository.path}: {exc}", style="red")
        raise typer.Exit(code=1)


def _render_sources_table(sources: Sequence[SourceConfig]) -> Table:
    table = Table(title=f"Sources · {len(sources)} configured", box=box.SIMPLE_HEAD)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Branch", style="magenta")
    table.add_column("Suffix", style="yellow")
    table.add_column("Tarball", style="green", overflow="fold")
    for source in sources:
        table.add_row(source.name, source.branch, source.suffix or "-", source.tarball_url)
    return table


def _render_summary_table(summary: SyncSummary) -> Table:
    table = Table(title="Sync summary", box=box.SIMPLE_HEAD)
    table.add_column("Source", style="cyan", no_wrap=True)
    table.add_column("Candidates", justify="right", style="green")
    table.add_column("Parse failures", justify="right", style="red")
    for report in summary.reports:
        table.add_row(report.source, str(len(report.candidates)), str(len(report.failures)))
    table.add_section()
    table.add_row(
        "catalog",
        str(len(summary.catalog.schemes)),
        str(len(summary.failures)),
    )
    return table


app.add_typer(cache_app, name="cache")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Path to sync_config.yaml (defaults to the project root)."
    ),
) -> None:
    ctx.obj = build_state(verbose, config)


@app.command("sync", help="Fetch every source and rewrite the catalog.")
def sync(
    ctx: typer.Context,
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Report what would change without writing files."
    ),
) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    fetcher: Fetcher | None = None
    cache: CacheStore | None = None
    try:
        cache = state.open_cache()
        fetcher = Fetcher(cache, config.settings)
        summary = Orchestrator(state.repository, fetcher).run(dry_run=dry_run)
    except SchemeSyncError as exc:
        console.print(f"Sync aborted: {exc}", style="red")
        raise typer.Exit(code=1)
    finally:
        if fetcher is not None:
            fetcher.close()
        if cache is not None:
            cache.close()

    console.print(_render_summary_table(summary))
    for failure in summary.failures:
        console.print(f"skipped {failure}", style="yellow", markup=False)
    verb = "Would update" if dry_run else "Updated"
    for path in summary.export.changed:
        console.print(f"{verb} {path}", style="green")
    if not summary.export.changed:
        console.print("Catalog unchanged.", style="dim")
    console.print(f"Network requests: {summary.network_requests}", style="dim")
    if summary.export.changelog:
        console.print(summary.export.changelog, markup=False, highlight=False)


@app.command("sources", help="List configured sources.")
def sources(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    if not config.sources:
        console.print("No sources configured.", style="yellow")
        raise typer.Exit(code=0)
    console.print(_render_sources_table(config.sources))


@cache_app.command("stats", help="Show live and expired cache entries.")
def cache_stats(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    _load_config(state)
    try:
        cache = state.open_cache()
        try:
            stats = cache.stats()
        finally:
            cache.close()
    except SchemeSyncError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1)
    table = Table(title=str(cache.db_path), box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("live", str(stats.live))
    table.add_row("expired", str(stats.expired))
    table.add_row("total", str(stats.total))
    console.print(table)


@cache_app.command("purge", help="Delete expired cache entries.")
def cache_purge(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    _load_config(state)
    try:
        cache = state.open_cache()
        try:
            removed = cache.purge_expired()
        finally:
            cache.close()
    except SchemeSyncError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1)
    console.print(f"Removed {removed} expired entries.", style="green")


if __name__ == "__main__":  # pragma: no cover
    app()
