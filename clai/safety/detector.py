"""Dangerous-command classification against a compiled pattern set."""

from typing import Optional, Tuple

from .patterns import DangerousPatternSet


def is_dangerous(command: str, patterns: DangerousPatternSet) -> bool:
    """
    True when any pattern matches the command.

    If the pattern set failed to compile, every command is reported as
    dangerous: a command that cannot be checked is never treated as checked.
    """
    if not patterns.ok:
        return True
    return any(regex.search(command) for regex in patterns.regexes)


def matching_pattern(command: str, patterns: DangerousPatternSet) -> Optional[Tuple[int, str]]:
    """Return (index, source) of the first matching pattern, or None."""
    if not patterns.ok:
        return None
    for index, regex in enumerate(patterns.regexes):
        if regex.search(command):
            return index, patterns.sources[index]
    return None
