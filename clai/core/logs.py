"""Logging setup for clai.

Two independent channels:

- Diagnostics for the user go through the standard `logging` tree to stderr,
  rendered by rich. stdout is reserved for the generated command.
- An optional JSON-lines debug file (`--debug-file`) records every model
  request, response and error. Writing to it never fails a request.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.logging import RichHandler

from clai.ai.types import ChatMessage, Usage

LOGGER_NAME = "clai"

# Debug log is truncated on open once it grows past this size.
MAX_LOG_SIZE = 10 * 1024 * 1024


def configure_logging(verbose: int = 0, quiet: bool = False, color: bool = True) -> logging.Logger:
    """
    Attach a stderr RichHandler to the package logger.

    Args:
        verbose: 0 -> WARNING, 1 -> INFO, 2+ -> DEBUG
        quiet: Only report errors (overrides verbose)
        color: Allow ANSI styling on stderr

    Returns:
        The configured package logger
    """
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    console = Console(stderr=True, no_color=not color, highlight=False)
    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=verbose >= 2,
        markup=False,
        rich_tracebacks=verbose >= 2,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


class _JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "event": record.getMessage(),
        }
        entry.update(getattr(record, "data", {}) or {})
        return json.dumps(entry, default=str)


class FileLogger:
    """
    Structured JSON-lines logger for model traffic.

    Each call appends one object: {"ts", "level", "event", ...data}.
    All methods swallow their own failures so that logging can never break
    the request that is being logged.
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists() and self.path.stat().st_size > MAX_LOG_SIZE:
            self.path.unlink()

        self._handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        self._handler.setFormatter(_JsonLineFormatter())
        self._logger = logging.getLogger(f"{LOGGER_NAME}.debugfile.{id(self)}")
        self._logger.handlers = [self._handler]
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

    def log(self, level: int, event: str, **data: Any) -> None:
        try:
            self._logger.log(level, event, extra={"data": data})
        except Exception:
            pass

    def log_request(
        self,
        model: Optional[str],
        messages: Iterable[ChatMessage],
        temperature: Optional[float],
        max_tokens: Optional[int],
        provider: str = "",
    ) -> None:
        self.log(
            logging.DEBUG,
            "ai_request",
            provider=provider,
            model=model,
            messages=[m.to_dict() for m in messages],
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def log_response(
        self,
        model: Optional[str],
        status: int,
        content: str,
        usage: Optional[Usage],
        provider: str = "",
    ) -> None:
        self.log(
            logging.DEBUG,
            "ai_response",
            provider=provider,
            model=model,
            status=status,
            content=content,
            usage=usage.to_dict() if usage else None,
        )

    def log_error(self, event: str, error: str, **context: Any) -> None:
        self.log(logging.ERROR, event, error=error, **context)

    def close(self) -> None:
        try:
            self._handler.close()
        except Exception:
            pass
