"""``manifest-polyfill config`` — show the effective configuration."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from manifest_polyfill.config import PolyfillConfig

console = Console()


def config_cmd() -> None:
    """Print settings after .env and MANIFEST_POLYFILL_* overrides."""
    config = PolyfillConfig()

    table = Table(title="Effective Configuration")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in config.model_dump(mode="json").items():
        if isinstance(value, dict):
            value = ", ".join(f"{k} -> {v}" for k, v in value.items())
        table.add_row(key, str(value))
    console.print(table)
