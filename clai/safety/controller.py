"""Decides how a generated command reaches the user.

Given the danger classification, the terminal state and the run flags, one
of three interactions applies:

    DANGER_PROMPT     dangerous command, confirmation required
    SELECTION_PROMPT  safe command(s), fully interactive session
    DIRECT_EMIT       everything else: print the first candidate
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TextIO


def _isatty(stream: Optional[TextIO]) -> bool:
    if stream is None:
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


@dataclass(frozen=True)
class TerminalState:
    stdin_tty: bool
    stdout_tty: bool
    stderr_tty: bool

    @classmethod
    def detect(
        cls,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> "TerminalState":
        return cls(
            stdin_tty=_isatty(stdin if stdin is not None else sys.stdin),
            stdout_tty=_isatty(stdout if stdout is not None else sys.stdout),
            stderr_tty=_isatty(stderr if stderr is not None else sys.stderr),
        )

    @property
    def interactive(self) -> bool:
        """Both stdin and stdout are terminals."""
        return self.stdin_tty and self.stdout_tty


class Interaction(Enum):
    DANGER_PROMPT = "danger_prompt"
    SELECTION_PROMPT = "selection_prompt"
    DIRECT_EMIT = "direct_emit"


def should_prompt(terminal: TerminalState, confirm_dangerous: bool, force: bool) -> bool:
    """Whether a dangerous command must be confirmed before it is emitted."""
    return terminal.interactive and confirm_dangerous and not force


def is_interactive_mode(terminal: TerminalState, interactive_flag: bool) -> bool:
    return interactive_flag and terminal.interactive


def select_interaction(
    dangerous: bool,
    terminal: TerminalState,
    interactive_flag: bool,
    confirm_dangerous: bool,
    force: bool,
) -> Interaction:
    """
    Pick the interaction for the first candidate.

    A dangerous command is confirmed only when `should_prompt` holds;
    otherwise piped output, --force or a disabled confirmation setting let it
    through unprompted.
    """
    if dangerous:
        if should_prompt(terminal, confirm_dangerous, force):
            return Interaction.DANGER_PROMPT
        return Interaction.DIRECT_EMIT

    if is_interactive_mode(terminal, interactive_flag):
        return Interaction.SELECTION_PROMPT

    return Interaction.DIRECT_EMIT
