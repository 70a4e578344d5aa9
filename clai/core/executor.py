"""Run a confirmed command through the user's shell."""

import logging
import os
import subprocess
from typing import Mapping, Optional

from clai.core.errors import GeneralError

logger = logging.getLogger(__name__)

FALLBACK_SHELL = "/bin/sh"


def user_shell(environ: Optional[Mapping[str, str]] = None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get("SHELL") or FALLBACK_SHELL


def execute_command(command: str, shell: Optional[str] = None) -> int:
    """
    Run `shell -c command` in the foreground and wait for it.

    The child inherits stdin, stdout and stderr so interactive programs
    behave normally.

    Returns:
        The child's exit code (negative when killed by a signal)

    Raises:
        GeneralError: The shell could not be started
    """
    shell = shell or user_shell()
    logger.info("Executing with %s: %s", shell, command)
    try:
        completed = subprocess.run([shell, "-c", command], check=False)
    except OSError as e:
        raise GeneralError(f"Failed to execute command with {shell}: {e}") from e
    return completed.returncode
