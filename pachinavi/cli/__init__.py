"""CLI commands for PachiNavi.

This package provides the command-line interface for PachiNavi,
including trade listing, settlement statements and trade transitions.
"""

from pachinavi.cli.main import cli, main

__all__ = ["cli", "main"]
