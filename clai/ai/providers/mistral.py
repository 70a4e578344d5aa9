"""Mistral provider using the native mistralai SDK."""

import logging
import time
from typing import Any, Callable, Optional, TYPE_CHECKING

import httpx

from clai.ai.provider import Provider, call_with_retry
from clai.ai.types import ChatRequest, ChatResponse, Usage
from clai.core.client_cache import get_cached_client
from clai.core.errors import ErrorCategory, ProviderError
from clai.core.logs import FileLogger

if TYPE_CHECKING:
    from mistralai import Mistral

logger = logging.getLogger(__name__)

DEFAULT_MISTRAL_MODEL = "codestral-latest"
API_KEY_ENV = "MISTRAL_API_KEY"


class MistralProvider(Provider):
    """
    Provider calling Mistral's chat API directly through the official SDK.

    Bypasses heavier frameworks and reuses pooled HTTP connections via the
    client cache. Shares the retry policy of every other provider: only
    rate-limited (429) calls are retried.
    """

    name = "mistralai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: Optional[str] = None,
        server_url: Optional[str] = None,
        use_cache: bool = True,
        client: Optional["Mistral"] = None,
        file_logger: Optional[FileLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            api_key: Mistral API key (not needed if client is provided)
            default_model: Model used when the request does not name one
            server_url: Override of the SDK's API base URL
            use_cache: Reuse a cached client for connection pooling
            client: Pre-initialised client (tests pass a stub here)
            file_logger: Optional JSON-lines logger for request/response records
            sleep: Delay function used between retries
        """
        self.api_key = api_key or ""
        self.default_model = default_model
        self.file_logger = file_logger
        self.sleep = sleep

        if client is not None:
            self.client = client
        elif use_cache and api_key:
            self.client = get_cached_client(api_key, server_url)
        elif api_key:
            from mistralai import Mistral
            self.client = Mistral(api_key=api_key, server_url=server_url)
        else:
            raise ValueError("Either api_key or client must be provided")

    def is_available(self) -> bool:
        return bool(self.api_key) or self.client is not None

    def complete(self, request: ChatRequest) -> ChatResponse:
        model = request.model or self.default_model or DEFAULT_MISTRAL_MODEL

        kwargs: dict = {
            "model": model,
            "messages": [message.to_dict() for message in request.messages],
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.max_tokens is not None:
            kwargs["max_tokens"] = request.max_tokens

        if self.file_logger:
            self.file_logger.log_request(
                model, request.messages, request.temperature, request.max_tokens, provider=self.name
            )

        response = call_with_retry(lambda: self._call(kwargs), sleep=self.sleep, provider=self.name)
        parsed = self.from_sdk_response(response, model)

        if self.file_logger:
            self.file_logger.log_response(parsed.model, 200, parsed.content, parsed.usage, provider=self.name)

        return parsed

    def _call(self, kwargs: dict) -> Any:
        try:
            return self.client.chat.complete(**kwargs)
        except httpx.TimeoutException as e:
            raise self._fail(
                ProviderError(ErrorCategory.TIMEOUT, f"Request to Mistral timed out: {e}", provider=self.name)
            ) from e
        except httpx.HTTPError as e:
            raise self._fail(
                ProviderError(ErrorCategory.NETWORK, f"Failed to send request to Mistral: {e}", provider=self.name)
            ) from e
        except ProviderError:
            raise
        except Exception as e:
            # SDK errors (SDKError, HTTPValidationError, ...) expose status_code.
            status = getattr(e, "status_code", None)
            if isinstance(status, int):
                body = getattr(e, "body", None) or str(e)
                raise self._fail(ProviderError.from_status(status, str(body), provider=self.name)) from e
            raise self._fail(
                ProviderError(ErrorCategory.API, f"Mistral request failed: {e}", provider=self.name)
            ) from e

    @staticmethod
    def from_sdk_response(response: Any, requested_model: str) -> ChatResponse:
        """
        Convert an SDK ChatCompletionResponse into a ChatResponse.

        Structure: response.choices[0].message.content
        """
        choices = getattr(response, "choices", None)
        if not choices:
            raise ProviderError(ErrorCategory.PARSE, "Mistral response contained no choices", provider="mistralai")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", "")
        if isinstance(content, list):
            content = "\n".join(str(getattr(part, "text", part)) for part in content)
        content = "" if content is None else str(content)

        usage = None
        raw_usage = getattr(response, "usage", None)
        if raw_usage is not None:
            usage = Usage(
                prompt_tokens=int(getattr(raw_usage, "prompt_tokens", 0) or 0),
                completion_tokens=int(getattr(raw_usage, "completion_tokens", 0) or 0),
                total_tokens=int(getattr(raw_usage, "total_tokens", 0) or 0),
            )

        return ChatResponse(
            content=content,
            model=getattr(response, "model", None) or requested_model,
            usage=usage,
        )

    def _fail(self, error: ProviderError) -> ProviderError:
        logger.debug("%s request failed: %s", self.name, error)
        if self.file_logger:
            self.file_logger.log_error("ai_error", str(error), provider=self.name, status=error.status_code)
        return error
