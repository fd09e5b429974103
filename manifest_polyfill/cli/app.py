"""Main Typer application — registers all CLI commands.

Entry point: ``manifest-polyfill`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from manifest_polyfill.cli.commands.config_cmd import config_cmd
from manifest_polyfill.cli.commands.run import run_cmd

app = typer.Typer(
    name="manifest-polyfill",
    help="Polyfill launcher version manifests: server downloads and patched LWJGL 2.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="run", help="Run the polyfill and write the output directory.")(run_cmd)
app.command(name="config", help="Show the effective configuration.")(config_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
