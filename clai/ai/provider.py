"""Abstract provider interface for chat completions."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, TypeVar

from clai.ai.types import ChatRequest, ChatResponse
from clai.core.errors import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
INITIAL_RETRY_DELAY = 1.0


class Provider(ABC):
    """
    Abstract base class for chat-completion backends.

    Each backend (OpenRouter, Mistral, ...) implements this interface so the
    provider chain can treat them uniformly.
    """

    name: str = "provider"

    @abstractmethod
    def complete(self, request: ChatRequest) -> ChatResponse:
        """
        Send a chat request and return the model's reply.

        Args:
            request: Immutable chat request

        Returns:
            ChatResponse with the generated text

        Raises:
            ProviderError: Transport, HTTP status or response decoding failure
        """

    def is_available(self) -> bool:
        """
        Cheap local check that the provider can be used (e.g. a key is set).

        Must not perform network I/O.
        """
        return True


def call_with_retry(
    call: Callable[[], T],
    sleep: Callable[[float], None] = time.sleep,
    max_retries: int = MAX_RETRIES,
    initial_delay: float = INITIAL_RETRY_DELAY,
    provider: Optional[str] = None,
) -> T:
    """
    Run `call`, retrying rate-limited failures with exponential backoff.

    Only ProviderError instances whose status is 429 are retried, at most
    `max_retries` times, sleeping initial_delay, 2x, 4x ... between attempts.
    Anything else propagates on the first failure.
    """
    retries = max_retries
    delay = initial_delay

    while True:
        try:
            return call()
        except ProviderError as e:
            if not e.retryable or retries <= 0:
                raise
            retries -= 1
            logger.info(
                "%s rate limited, retrying in %.0fs (%d retries left)",
                provider or "provider",
                delay,
                retries,
            )
            sleep(delay)
            delay *= 2
