"""
CLI Layer - Typer application and commands.
"""

from aniverse.cli.main import app, cli_main

__all__ = ["app", "cli_main"]
