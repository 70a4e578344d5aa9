"""clai - natural language to shell commands."""

__version__ = "0.3.0"
