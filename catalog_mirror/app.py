"""Typer CLI entrypoint for catalog-mirror."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, MirrorConfig
from .engine import CatalogClient, MirrorStore
from .logging_conf import APP_LOG, configure_logging, tail_log
from .orchestrator import ExportOrchestrator, ImportOrchestrator, SyncResult
from .resources import ResourceRegistry

app = typer.Typer(
    help="Mirror a catalog REST API into line-delimited JSON files and push them back.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    config: MirrorConfig
    registry: ResourceRegistry
    store: MirrorStore
    client_factory: Callable[[], CatalogClient]


def build_state(verbose: bool, export_path: Optional[Path] = None) -> AppState:
    repository = ConfigRepository()
    config = repository.load_config()
    if export_path is not None:
        config.export_path = repository.locator.resolve(export_path)
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    return AppState(
        repository=repository,
        config=config,
        registry=ResourceRegistry(),
        store=MirrorStore(config.export_path),
        client_factory=lambda: CatalogClient(config.remote),
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _check_names(state: AppState, names: Sequence[str]) -> None:
    unknown = [name for name in names if name not in state.registry]
    if unknown:
        console.print(f"Unknown resource types: {', '.join(unknown)}", style="red")
        console.print("Run `catalog-mirror resources` to list them.", style="dim")
        raise typer.Exit(code=2)


async def _run_export(state: AppState, names: Sequence[str]) -> list[SyncResult]:
    async with state.client_factory() as client:
        orchestrator = ExportOrchestrator(client, state.store, state.registry)
        return await orchestrator.export_many(names)


async def _run_import(state: AppState, names: Sequence[str]) -> list[SyncResult]:
    async with state.client_factory() as client:
        orchestrator = ImportOrchestrator(client, state.store, state.registry)
        return await orchestrator.import_many(names)


def _render_results(title: str, results: Sequence[SyncResult]) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("Resource", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Records", justify="right", style="green")
    table.add_column("Batches", justify="right")
    table.add_column("Rejected", justify="right", style="yellow")
    table.add_column("Detail", overflow="fold")
    styles = {"ok": "green", "skipped": "yellow", "failed": "red"}
    for result in results:
        if result.error is not None:
            detail = f"{type(result.error).__name__}: {result.error}"
        else:
            detail = ", ".join(f"{name}={count}" for name, count in result.counts.items())
        table.add_row(
            result.resource,
            f"[{styles.get(result.status, 'white')}]{result.status}[/]",
            str(result.total),
            str(result.batches) if result.operation == "import" else "-",
            str(result.rejected) if result.operation == "import" else "-",
            detail,
        )
    return table


def _finish(results: Sequence[SyncResult]) -> None:
    failed = [result.resource for result in results if not result.ok]
    if failed:
        console.print(f"Failed: {', '.join(failed)}", style="red")
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    export_path: Optional[Path] = typer.Option(
        None, "--export-path", help="Directory holding the mirror files."
    ),
) -> None:
    ctx.obj = build_state(verbose, export_path)


@app.command("resources", help="List the known resource types.")
def resources(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    table = Table(title=f"Resource types · {len(state.registry.names())}", box=box.SIMPLE_HEAD)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Endpoint", overflow="fold")
    table.add_column("Mirror file", style="green")
    table.add_column("Parent keys", style="magenta")
    table.add_column("Import", justify="center")
    for resource in state.registry:
        table.add_row(
            resource.name,
            resource.endpoint,
            resource.filename,
            ", ".join(resource.parent_keys) or "-",
            "yes" if resource.importable else "no",
        )
    console.print(table)


@app.command("export", help="Export resource types from the remote into mirror files.")
def export(
    ctx: typer.Context,
    names: Optional[list[str]] = typer.Argument(
        None, help="Resource types to export (defaults to the configured export order)."
    ),
) -> None:
    state = _get_state(ctx)
    selected = list(names or state.config.export_order)
    _check_names(state, selected)
    results = asyncio.run(_run_export(state, selected))
    console.print(_render_results("Export results", results))
    _finish(results)


@app.command("import", help="Push mirror files back to the remote.")
def import_(
    ctx: typer.Context,
    names: Optional[list[str]] = typer.Argument(
        None, help="Resource types to import (defaults to the configured import order)."
    ),
) -> None:
    state = _get_state(ctx)
    selected = list(names or state.config.import_order)
    _check_names(state, selected)
    results = asyncio.run(_run_import(state, selected))
    console.print(_render_results("Import results", results))
    _finish(results)


@app.command("log", help="Show the tail of the application log.")
def show_log(
    ctx: typer.Context,
    lines: int = typer.Option(50, "--lines", "-n", help="Number of lines to show."),
) -> None:
    state = _get_state(ctx)
    path = state.repository.locator.logs_dir / APP_LOG
    content = tail_log(path, lines)
    if not content:
        console.print(f"No log entries at {path}.", style="yellow")
        raise typer.Exit(code=0)
    for line in content:
        console.print(line.rstrip("\n"), markup=False, highlight=False)


__all__ = ["AppState", "app", "build_state"]
