"""CLI entry point for bakashi-cli.

Thin wrapper that delegates to main.py.
"""

import sys

from main import cli as main_cli


def cli() -> None:
    """Entry point for CLI - delegates to main.py."""
    sys.exit(main_cli())


if __name__ == "__main__":
    cli()
