"""``manifest-polyfill run`` — run the polyfill end to end.

Fetches the server archive index and the launcher manifest, rewrites every
version that needs it, and writes the documents plus the rewritten manifest
to the output directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from manifest_polyfill.config import MatchStrategy, PolyfillConfig
from manifest_polyfill.core.fetcher import HttpFetcher
from manifest_polyfill.core.orchestrator import VersionPatchOrchestrator
from manifest_polyfill.errors import PolyfillError
from manifest_polyfill.models.report import PolyfillReport

console = Console()


def configure_logging(level: str) -> None:
    """Route stdlib logging through Rich at ``level``."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def apply_overrides(config: PolyfillConfig, **overrides: object) -> PolyfillConfig:
    """Return ``config`` with every non-None override applied (re-validated)."""
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    return PolyfillConfig.model_validate({**config.model_dump(), **updates})


def render_report(report: PolyfillReport, output_dir: Path) -> None:
    table = Table(title="Polyfill Run")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")
    table.add_row("Versions", str(report.total_versions))
    table.add_row("Emitted", f"[green]{len(report.emitted)}[/green]")
    table.add_row("Server backfills", str(len(report.backfilled)))
    table.add_row("Library rewrites", str(len(report.patched)))
    table.add_row("Artifacts resolved", str(report.artifacts_resolved))
    console.print(table)
    console.print(f"[dim]Output written to {output_dir}[/dim]")


def run_cmd(
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Directory for emitted documents and the manifest."
    ),
    cache_dir: Optional[Path] = typer.Option(
        None, "--cache-dir", "-c", help="Directory for downloaded replacement artifacts."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Versions processed in parallel."
    ),
    strategy: Optional[MatchStrategy] = typer.Option(
        None, "--strategy", help="Which server record wins when several list a client."
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level."),
) -> None:
    """Backfill server downloads and rewrite legacy libraries for every version."""
    config = apply_overrides(
        PolyfillConfig(),
        output_directory=output_dir,
        local_cache_directory=cache_dir,
        max_workers=workers,
        server_match_strategy=strategy,
        log_level=log_level,
    )
    configure_logging(config.log_level)

    try:
        with HttpFetcher(timeout=config.http_timeout_seconds) as fetcher:
            report = VersionPatchOrchestrator(config, fetcher=fetcher).run()
    except PolyfillError as exc:
        console.print(f"[red]Polyfill failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    render_report(report, config.output_directory)
