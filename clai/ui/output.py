"""
Terminal output for clai.

stdout carries the generated command and nothing else; every message for
the user is rendered on stderr through rich.
"""

import logging
import os
import sys
from typing import Iterable, Optional, TextIO

from rich.console import Console

from clai.ai.types import ChatRequest
from clai.core.errors import ClaiError

logger = logging.getLogger(__name__)


def make_console(color: bool = True, file: Optional[TextIO] = None) -> Console:
    """stderr console; `color=False` strips all styling."""
    return Console(
        file=file if file is not None else sys.stderr,
        no_color=not color,
        highlight=False,
        soft_wrap=True,
    )


def _write(stream: TextIO, text: str) -> None:
    """
    Write and flush, treating a closed reader (`clai run ... | head -c0`) as done.

    stdout is pointed at /dev/null afterwards so the interpreter's final flush
    does not raise again.
    """
    try:
        stream.write(text)
        stream.flush()
    except BrokenPipeError:
        logger.debug("stdout closed by reader, output dropped")
        if stream is sys.stdout:
            devnull = os.open(os.devnull, os.O_WRONLY)
            os.dup2(devnull, sys.stdout.fileno())


def print_command(command: str, stream: Optional[TextIO] = None) -> None:
    """
    Write the trimmed command to stdout.

    A trailing newline is added only when stdout is a terminal so that
    `$(clai run ...)` and pipes receive the bare command.
    """
    stream = stream if stream is not None else sys.stdout
    text = command.strip()
    if stream.isatty():
        text += "\n"
    _write(stream, text)


def print_commands(commands: Iterable[str], stream: Optional[TextIO] = None) -> None:
    """Dry-run listing: every candidate on its own line."""
    stream = stream if stream is not None else sys.stdout
    _write(stream, "".join(f"{command.strip()}\n" for command in commands))


def print_error(error: ClaiError, console: Console, verbose: int = 0) -> None:
    console.print(str(error), style="bold red", markup=False)
    if verbose >= 1:
        for cause in error.cause_chain()[1:]:
            console.print(f"  Caused by: {cause}", style="red", markup=False)


def print_debug_request(request: ChatRequest, console: Console, num_options: Optional[int] = None) -> None:
    """Dump the outgoing request for --debug."""
    console.print("\n=== DEBUG: Request to be sent to AI ===", style="bold cyan", markup=False)
    console.print(f"Model: {request.model}", markup=False)
    console.print(f"Temperature: {request.temperature}", markup=False)
    console.print(f"Max Tokens: {request.max_tokens}", markup=False)
    if num_options is not None:
        console.print(f"Number of options requested: {num_options}", markup=False)
    console.print("\nMessages:", markup=False)
    for i, message in enumerate(request.messages, 1):
        console.print(f"  {i}. Role: {message.role.value}", markup=False)
        console.print(f"     Content: {message.content}", markup=False)
    console.print("=== END DEBUG ===\n", style="bold cyan", markup=False)
