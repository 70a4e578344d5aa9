#!/usr/bin/env python3
"""
Main entry point for the clai CLI.

Delegates to the Typer app in clai.ui.cli so the console script mapping
stays stable.
"""

from clai.ui.cli import main as clai


if __name__ == "__main__":
    clai()
