"""Error taxonomy for clai.

Every failure that reaches the CLI is a ClaiError carrying the exit code the
process should terminate with. The categories mirror the exit-code scheme:

    1  general failure
    2  usage error
    3  configuration error
    4  API / provider failure (optionally with the HTTP status code)
    5  safety abort (user declined or prompt defaulted to abort)
  130  interrupted by signal
"""

from enum import Enum
from typing import Optional


class ClaiError(Exception):
    """Base class for all errors surfaced to the CLI."""

    exit_code = 1
    label = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"

    def cause_chain(self) -> list:
        """Return the chain of messages from this error down to its root cause."""
        chain = [str(self)]
        current = self.__cause__ or self.__context__
        while current is not None:
            chain.append(str(current))
            current = current.__cause__ or current.__context__
        return chain


class GeneralError(ClaiError):
    exit_code = 1


class UsageError(ClaiError):
    exit_code = 2
    label = "Usage error"


class ConfigError(ClaiError):
    exit_code = 3
    label = "Configuration error"


class ApiError(ClaiError):
    """Provider or model-output failure. Carries the HTTP status when known."""

    exit_code = 4
    label = "API error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SafetyError(ClaiError):
    exit_code = 5
    label = "Safety error"


class Interrupted(ClaiError):
    exit_code = 130
    label = "Interrupted"

    def __init__(self, message: str = "Interrupted by signal"):
        super().__init__(message)


class ErrorCategory(Enum):
    """Human-readable classification of a provider failure."""

    AUTHENTICATION = "Authentication error"
    RATE_LIMIT = "Rate limit error"
    TIMEOUT = "Timeout error"
    API = "API error"
    NETWORK = "Network error"
    PARSE = "Parse error"


class ProviderError(ApiError):
    """
    A single provider call failed.

    Attributes:
        category: ErrorCategory of the failure
        status_code: HTTP status code, None for transport or parse failures
        body: Raw response text (or exception text) for diagnostics
        provider: Name of the provider that raised it
    """

    def __init__(
        self,
        category: ErrorCategory,
        detail: str,
        status_code: Optional[int] = None,
        body: str = "",
        provider: str = "",
    ):
        if status_code is not None:
            message = f"{category.value} ({status_code}): {detail}"
        else:
            message = f"{category.value}: {detail}"
        if body:
            message = f"{message} {body}"
        super().__init__(message, status_code=status_code)
        self.category = category
        self.detail = detail
        self.body = body
        self.provider = provider

    def __str__(self) -> str:
        return self.message

    @property
    def retryable(self) -> bool:
        """Only rate limiting is worth retrying."""
        return self.status_code == 429

    @classmethod
    def from_status(
        cls, status_code: int, body: str, provider: str = ""
    ) -> "ProviderError":
        """Classify a non-2xx HTTP response."""
        if status_code in (401, 403):
            category, detail = ErrorCategory.AUTHENTICATION, "Invalid or missing API key."
        elif status_code == 429:
            category, detail = ErrorCategory.RATE_LIMIT, "Too many requests."
        elif status_code in (408, 504):
            category, detail = ErrorCategory.TIMEOUT, "Request timed out."
        else:
            category, detail = ErrorCategory.API, "Request failed."
        return cls(category, detail, status_code=status_code, body=body, provider=provider)


class ProviderUnavailable(ApiError):
    """A provider could not be initialised or reported itself unavailable."""


class ResponseParseError(ApiError):
    """The model reply could not be turned into at least one command."""

    def __init__(self, message: str, raw: str):
        super().__init__(f"{message}. Response: {raw}")
        self.raw = raw
