"""Context gathered from the local environment and fed into the prompt."""

from .gatherer import ContextData, gather_context
from .shell import ShellHistoryReader, detect_os, detect_shell

__all__ = [
    "ContextData",
    "gather_context",
    "ShellHistoryReader",
    "detect_os",
    "detect_shell",
]
