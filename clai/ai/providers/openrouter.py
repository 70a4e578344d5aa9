"""OpenRouter provider over the OpenAI-compatible chat-completions API."""

import json
import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx

from clai.ai.provider import Provider, call_with_retry
from clai.ai.types import ChatRequest, ChatResponse, Usage
from clai.core.errors import ErrorCategory, ProviderError
from clai.core.logs import FileLogger

logger = logging.getLogger(__name__)

OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_OPENROUTER_MODEL = "qwen/qwen3-coder"
API_KEY_ENV = "OPENROUTER_API_KEY"
REQUEST_TIMEOUT = 60.0


class OpenRouterProvider(Provider):
    """
    Provider for any OpenAI-compatible `/chat/completions` endpoint.

    Model resolution: request.model > provider default_model >
    DEFAULT_OPENROUTER_MODEL. Rate-limited calls (429) are retried with
    exponential backoff; every other failure is raised immediately.
    """

    name = "openrouter"

    def __init__(
        self,
        api_key: str,
        default_model: Optional[str] = None,
        endpoint: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        file_logger: Optional[FileLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            api_key: Bearer token sent with every request
            default_model: Model used when the request does not name one
            endpoint: Override for the chat-completions URL
            client: Pre-built httpx client (tests inject a MockTransport here)
            file_logger: Optional JSON-lines logger for request/response records
            sleep: Delay function used between retries
        """
        self.api_key = api_key
        self.default_model = default_model
        self.endpoint = endpoint or OPENROUTER_API_URL
        self.client = client or httpx.Client(timeout=REQUEST_TIMEOUT)
        self.file_logger = file_logger
        self.sleep = sleep

    def is_available(self) -> bool:
        return bool(self.api_key)

    def complete(self, request: ChatRequest) -> ChatResponse:
        model = request.model or self.default_model or DEFAULT_OPENROUTER_MODEL
        payload = self.to_openai_request(request, model)

        if self.file_logger:
            self.file_logger.log_request(
                model, request.messages, request.temperature, request.max_tokens, provider=self.name
            )

        return call_with_retry(lambda: self._post(payload), sleep=self.sleep, provider=self.name)

    @staticmethod
    def to_openai_request(request: ChatRequest, model: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [message.to_dict() for message in request.messages],
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        return payload

    @staticmethod
    def from_openai_response(body: Dict[str, Any]) -> ChatResponse:
        """
        Convert a decoded 200 body into a ChatResponse.

        Raises:
            ProviderError: PARSE when the body does not have the
                chat-completions shape
        """
        choices = body.get("choices") or []
        if not isinstance(choices, list):
            raise _shape_error("'choices' is not a list")

        content: Any = ""
        if choices:
            choice = choices[0]
            if not isinstance(choice, dict):
                raise _shape_error("choice is not an object")
            message = choice.get("message") or {}
            if not isinstance(message, dict):
                raise _shape_error("'message' is not an object")
            content = message.get("content")

        if isinstance(content, list):
            content = "\n".join(
                str(part.get("text", "")) if isinstance(part, dict) else str(part) for part in content
            )
        elif content is None:
            content = ""
        elif not isinstance(content, str):
            raise _shape_error(f"'content' has type {type(content).__name__}")

        usage = None
        raw_usage = body.get("usage")
        if isinstance(raw_usage, dict):
            usage = Usage(
                prompt_tokens=_token_count(raw_usage.get("prompt_tokens")),
                completion_tokens=_token_count(raw_usage.get("completion_tokens")),
                total_tokens=_token_count(raw_usage.get("total_tokens")),
            )

        model = body.get("model")
        return ChatResponse(content=content, model=model if isinstance(model, str) else None, usage=usage)

    def _post(self, payload: Dict[str, Any]) -> ChatResponse:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://github.com/clai",
            "X-Title": "clai",
        }

        try:
            response = self.client.post(self.endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise self._fail(
                ProviderError(ErrorCategory.TIMEOUT, f"Request to OpenRouter timed out: {e}", provider=self.name)
            ) from e
        except httpx.HTTPError as e:
            raise self._fail(
                ProviderError(
                    ErrorCategory.NETWORK, f"Failed to send request to OpenRouter: {e}", provider=self.name
                )
            ) from e

        if not response.is_success:
            raise self._fail(
                ProviderError.from_status(response.status_code, response.text, provider=self.name)
            )

        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise self._fail(
                ProviderError(
                    ErrorCategory.PARSE, f"Failed to parse OpenRouter response: {e}", provider=self.name
                )
            ) from e

        if not isinstance(body, dict):
            raise self._fail(
                ProviderError(
                    ErrorCategory.PARSE, "Failed to parse OpenRouter response: expected an object",
                    provider=self.name,
                )
            )

        try:
            parsed = self.from_openai_response(body)
        except ProviderError as e:
            raise self._fail(e)

        if self.file_logger:
            self.file_logger.log_response(
                parsed.model, response.status_code, parsed.content, parsed.usage, provider=self.name
            )

        return parsed

    def _fail(self, error: ProviderError) -> ProviderError:
        logger.debug("%s request failed: %s", self.name, error)
        if self.file_logger:
            self.file_logger.log_error(
                "ai_error", str(error), provider=self.name, status=error.status_code
            )
        return error


def _token_count(value: Any) -> int:
    """Usage counts are informational; anything unreadable counts as 0."""
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _shape_error(detail: str) -> ProviderError:
    return ProviderError(
        ErrorCategory.PARSE,
        f"Unexpected OpenRouter response shape: {detail}",
        provider=OpenRouterProvider.name,
    )
