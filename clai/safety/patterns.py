"""Dangerous-command regex patterns.

Patterns come from `[safety] dangerous_patterns` or, when that list is empty,
from DEFAULT_DANGEROUS_PATTERNS. They are compiled once into an immutable
DangerousPatternSet which the pipeline owns for the rest of the run.
"""

import logging
import re
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from clai.core.configs import SafetyConfig
from clai.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_DANGEROUS_PATTERNS: Tuple[str, ...] = (
    r"rm\s+-rf\s+/",              # rm -rf /
    r"rm\s+-rf\s+/\s*$",          # rm -rf / at end of line
    r"dd\s+if=/dev/zero",         # zero-fill a device
    r"mkfs\.\w+\s+/dev/",         # make a filesystem on a device
    r"sudo\s+rm\s+-rf\s+/",       # sudo rm -rf /
    r">\s*/dev/",                 # redirect into a device
    r"format\s+[c-z]:",           # format C: (Windows)
    r"del\s+/f\s+/s\s+[c-z]:\\",  # del /f /s C:\ (Windows)
)


class PatternCompileError(ConfigError):
    """A dangerous pattern is not a valid regular expression."""

    def __init__(self, index: int, pattern: str, reason: str):
        super().__init__(
            f"Failed to compile dangerous pattern '{pattern}' at index {index}: {reason}"
        )
        self.index = index
        self.pattern = pattern


def compile_dangerous_patterns(patterns: Iterable[str]) -> List[Pattern]:
    """
    Compile every pattern, failing on the first invalid one.

    Raises:
        PatternCompileError: A pattern failed to compile
    """
    compiled = []
    for index, pattern in enumerate(patterns):
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise PatternCompileError(index, pattern, str(e)) from e
    return compiled


class DangerousPatternSet:
    """
    Compiled dangerous patterns, or the error that prevented compiling them.

    A set holding an error is "poisoned": the detector treats every command
    checked against it as dangerous.
    """

    def __init__(self, sources: Sequence[str]):
        self.sources: Tuple[str, ...] = tuple(sources)
        self.error: Optional[PatternCompileError] = None
        try:
            self.regexes: Tuple[Pattern, ...] = tuple(compile_dangerous_patterns(self.sources))
        except PatternCompileError as e:
            logger.warning("Invalid dangerous pattern at index %d: '%s'", e.index, e.pattern)
            self.error = e
            self.regexes = ()

    @classmethod
    def defaults(cls) -> "DangerousPatternSet":
        return cls(DEFAULT_DANGEROUS_PATTERNS)

    @classmethod
    def from_config(cls, safety: SafetyConfig) -> "DangerousPatternSet":
        return cls(safety.dangerous_patterns or DEFAULT_DANGEROUS_PATTERNS)

    @property
    def ok(self) -> bool:
        return self.error is None

    def __len__(self) -> int:
        return len(self.regexes)

    def __repr__(self) -> str:
        state = "ok" if self.ok else "invalid"
        return f"DangerousPatternSet({len(self.sources)} patterns, {state})"
