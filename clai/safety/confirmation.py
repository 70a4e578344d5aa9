"""Line-based confirmation prompt shown before a dangerous command is emitted."""

from enum import Enum
from typing import TextIO

from rich.console import Console

PROMPT = "[E]xecute/[C]opy/[A]bort? "


class Decision(Enum):
    EXECUTE = "Execute"
    COPY = "Copy"
    ABORT = "Abort"


class ConfirmationError(Exception):
    """The answer could not be read or was not one of E, C or A."""


_CHOICES = {"E": Decision.EXECUTE, "C": Decision.COPY, "A": Decision.ABORT}


def prompt_dangerous_confirmation(command: str, stdin: TextIO, console: Console) -> Decision:
    """
    Warn about `command` and read one line of input.

    The first non-whitespace character picks the decision (case-insensitive).
    End of input and an empty line both resolve to ABORT.

    Args:
        command: The command that matched a dangerous pattern
        stdin: Stream the answer is read from
        console: stderr console used for the warning and the prompt

    Returns:
        The user's Decision

    Raises:
        ConfirmationError: Unreadable input or an unrecognised answer
    """
    console.print(f"⚠️  DANGEROUS: {command}", style="bold yellow", markup=False, highlight=False)
    console.print(PROMPT, end="", markup=False, highlight=False)
    console.file.flush()

    try:
        line = stdin.readline()
    except (OSError, ValueError) as e:
        raise ConfirmationError(f"Failed to read from stdin: {e}") from e

    if not line:
        console.print()
        return Decision.ABORT

    answer = line.strip()
    if not answer:
        return Decision.ABORT

    decision = _CHOICES.get(answer[0].upper())
    if decision is None:
        raise ConfirmationError(f"Invalid input: '{answer}'. Expected E, C, or A")
    return decision
