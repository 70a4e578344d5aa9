"""Shell environment and command history detection.

Detects:
- Operating system and shell type (from the environment)
- Recent command history from shell history files
- Filters sensitive commands (passwords, tokens, API keys)
"""

import os
import platform
import re
from pathlib import Path
from typing import List, Optional, Tuple


def detect_os() -> Tuple[str, str]:
    """
    Detect OS family and full name.

    Returns:
        tuple: (os_family, os_fullname), e.g. ("Linux", "Linux 6.1.0")
    """
    system = platform.system()

    if system == "Darwin":
        return "MacOS", f"macOS {platform.mac_ver()[0]}"
    elif system == "Linux":
        return "Linux", f"Linux {platform.release()}"
    elif system == "Windows":
        return "Windows", f"Windows {platform.release()}"

    return system, platform.platform()


def detect_shell() -> str:
    """Shell name taken from the basename of $SHELL ("unknown" when unset)."""
    shell_path = os.environ.get("SHELL", "")
    return Path(shell_path).name or "unknown"


class ShellHistoryReader:
    """Read and parse shell history files."""

    HISTORY_PATHS = {
        "zsh": "~/.zsh_history",
        "bash": "~/.bash_history",
        "fish": "~/.local/share/fish/fish_history",
    }

    # Commands matching any of these never leave the machine.
    SENSITIVE_PATTERNS = [
        r"password",
        r"token",
        r"api[_-]?key",
        r"secret",
        r"credential",
        r"export.*KEY",
        r"export.*TOKEN",
        r"export.*SECRET",
        r"export.*PASSWORD",
    ]

    def __init__(self, shell_type: str, history_path: Optional[Path] = None):
        self.shell_type = shell_type
        self.history_path = history_path or self._resolve_path()

    def _resolve_path(self) -> Optional[Path]:
        path_template = self.HISTORY_PATHS.get(self.shell_type)
        if not path_template:
            return None
        return Path(path_template).expanduser()

    def get_recent(self, count: int = 3, max_len: int = 200) -> List[str]:
        """
        Get the last `count` non-sensitive commands, oldest first.

        Long commands are truncated to `max_len` characters. History is
        optional context, so unreadable files yield an empty list.
        """
        if not self.history_path or count <= 0:
            return []

        try:
            commands = self._read_history()
        except OSError:
            return []

        recent: List[str] = []
        for cmd in reversed(commands):
            if self._is_sensitive(cmd):
                continue
            if len(cmd) > max_len:
                cmd = cmd[:max_len] + "..."
            recent.append(cmd)
            if len(recent) >= count:
                break

        recent.reverse()
        return recent

    def _read_history(self) -> List[str]:
        if not self.history_path.exists():
            return []

        text = self.history_path.read_text(errors="ignore")
        if self.shell_type == "zsh":
            return self._parse_zsh(text)
        elif self.shell_type == "fish":
            return self._parse_fish(text)
        return [line.strip() for line in text.splitlines() if line.strip()]

    @staticmethod
    def _parse_zsh(text: str) -> List[str]:
        """Extended format: `: timestamp:duration;command`."""
        commands = []
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue
            if line.startswith(":") and ";" in line:
                line = line.split(";", 1)[1].strip()
            if line:
                commands.append(line)
        return commands

    @staticmethod
    def _parse_fish(text: str) -> List[str]:
        """YAML-like format: `- cmd: git status` followed by `when:` lines."""
        commands = []
        for line in text.splitlines():
            line = line.strip()
            if line.startswith("- cmd:"):
                cmd = line[len("- cmd:"):].strip()
                if cmd:
                    commands.append(cmd)
        return commands

    def _is_sensitive(self, cmd: str) -> bool:
        return any(re.search(p, cmd, re.IGNORECASE) for p in self.SENSITIVE_PATTERNS)
