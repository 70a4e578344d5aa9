"""Collects system, directory, history and piped-stdin context for a request."""

import getpass
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from .shell import ShellHistoryReader, detect_os, detect_shell

logger = logging.getLogger(__name__)

MAX_STDIN_CHARS = 10 * 1024
MAX_PATH_LENGTH = 80


@dataclass
class ContextData:
    system: Dict[str, str] = field(default_factory=dict)
    cwd: str = ""
    files: List[str] = field(default_factory=list)
    history: List[str] = field(default_factory=list)
    stdin: Optional[str] = None

    def system_context(self) -> str:
        return json.dumps(self.system, sort_keys=True)

    def dir_context(self) -> str:
        listing = "\n".join(f"  {name}" for name in self.files)
        summary = f"Current directory: {self.cwd}\nFiles: {len(self.files)}"
        return f"{summary}\n{listing}" if listing else summary


def _system_info() -> Dict[str, str]:
    os_family, os_fullname = detect_os()
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "unknown"
    return {
        "os": os_family,
        "os_version": os_fullname,
        "shell": detect_shell(),
        "user": user,
    }


def scan_directory(path: Path, max_files: int) -> List[str]:
    """First `max_files` entry names of `path`, sorted; long names are shortened."""
    if max_files <= 0:
        return []
    try:
        names = sorted(entry.name for entry in os.scandir(path))
    except OSError as e:
        logger.debug("Could not list %s: %s", path, e)
        return []

    shortened = []
    for name in names[:max_files]:
        if len(name) > MAX_PATH_LENGTH:
            name = name[: MAX_PATH_LENGTH - 3] + "..."
        shortened.append(name)
    return shortened


def read_piped_stdin(stream: Optional[TextIO], limit: int = MAX_STDIN_CHARS) -> Optional[str]:
    """Read at most `limit` characters from a non-terminal stdin."""
    if stream is None or stream.isatty():
        return None
    try:
        return stream.read(limit)
    except (OSError, ValueError) as e:
        logger.debug("Could not read piped stdin: %s", e)
        return None


def gather_context(
    max_files: int = 10,
    max_history: int = 3,
    stdin: Optional[TextIO] = None,
    cwd: Optional[Path] = None,
    history_reader: Optional[ShellHistoryReader] = None,
) -> ContextData:
    """
    Gather everything the model sees besides the instruction.

    Every source is optional: a failure leaves that part empty instead of
    failing the request.
    """
    try:
        cwd = cwd or Path.cwd()
    except OSError:
        cwd = Path(".")

    reader = history_reader or ShellHistoryReader(detect_shell())
    return ContextData(
        system=_system_info(),
        cwd=str(cwd),
        files=scan_directory(cwd, max_files),
        history=reader.get_recent(count=max_history),
        stdin=read_piped_stdin(stdin if stdin is not None else sys.stdin),
    )
