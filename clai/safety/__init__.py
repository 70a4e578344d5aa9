"""Dangerous-command detection and the interactions that gate emission."""

from .confirmation import ConfirmationError, Decision, prompt_dangerous_confirmation
from .controller import Interaction, TerminalState, select_interaction, should_prompt
from .detector import is_dangerous, matching_pattern
from .interactive import CommandAction, CommandSelector, SelectionError, select_command
from .patterns import (
    DEFAULT_DANGEROUS_PATTERNS,
    DangerousPatternSet,
    PatternCompileError,
    compile_dangerous_patterns,
)

__all__ = [
    "CommandAction",
    "CommandSelector",
    "ConfirmationError",
    "DEFAULT_DANGEROUS_PATTERNS",
    "DangerousPatternSet",
    "Decision",
    "Interaction",
    "PatternCompileError",
    "SelectionError",
    "TerminalState",
    "compile_dangerous_patterns",
    "is_dangerous",
    "matching_pattern",
    "prompt_dangerous_confirmation",
    "select_command",
    "select_interaction",
    "should_prompt",
]
