"""manifest-polyfill CLI — Typer-based command-line interface.

Provides the ``manifest-polyfill`` command with subcommands for running the
polyfill and inspecting the effective configuration.

All output uses Rich for formatted terminal display.
"""
