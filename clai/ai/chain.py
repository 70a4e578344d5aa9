"""Ordered provider chain with lazy initialisation and sequential fallback."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from clai.ai.provider import Provider
from clai.ai.providers import mistral, openrouter
from clai.ai.types import ChatRequest, ChatResponse
from clai.core.configs import FileConfig, ProviderSettings
from clai.core.errors import ApiError, ClaiError, ProviderUnavailable
from clai.core.logs import FileLogger

logger = logging.getLogger(__name__)

# builder(settings, api_key, file_logger, sleep) -> Provider
ProviderBuilder = Callable[
    [ProviderSettings, str, Optional[FileLogger], Callable[[float], None]], Provider
]


@dataclass(frozen=True)
class ProviderSpec:
    """How to build one named provider and where its credential lives by default."""

    builder: ProviderBuilder
    api_key_env: str
    label: str


def _build_openrouter(settings, api_key, file_logger, sleep) -> Provider:
    return openrouter.OpenRouterProvider(
        api_key=api_key,
        default_model=settings.model,
        endpoint=settings.endpoint,
        file_logger=file_logger,
        sleep=sleep,
    )


def _build_mistral(settings, api_key, file_logger, sleep) -> Provider:
    return mistral.MistralProvider(
        api_key=api_key,
        default_model=settings.model,
        server_url=settings.endpoint,
        file_logger=file_logger,
        sleep=sleep,
    )


PROVIDERS: Dict[str, ProviderSpec] = {
    "openrouter": ProviderSpec(_build_openrouter, openrouter.API_KEY_ENV, "OpenRouter"),
    "mistralai": ProviderSpec(_build_mistral, mistral.API_KEY_ENV, "Mistral"),
}


class ProviderChain(Provider):
    """
    Try providers in configured priority order until one answers.

    The order is the default provider followed by the configured fallbacks,
    with duplicates removed. Instances are created on first use and cached
    per position; a provider that fails to initialise is skipped, never
    retried within the same chain.
    """

    name = "provider-chain"

    def __init__(
        self,
        config: FileConfig,
        file_logger: Optional[FileLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
        registry: Optional[Dict[str, ProviderSpec]] = None,
    ):
        self.config = config
        self.file_logger = file_logger
        self.sleep = sleep
        self.registry = PROVIDERS if registry is None else registry

        names: List[str] = []
        for name in [config.provider.default, *config.provider.fallback]:
            if name and name not in names:
                names.append(name)
        self._providers = names

        self._instances: Dict[int, Provider] = {}
        self._lock = threading.Lock()

    def providers(self) -> List[str]:
        return list(self._providers)

    def parse_model(self, model: str) -> Tuple[str, str]:
        """
        Split "provider/model" on the first slash.

        An unscoped model name is attributed to the first provider in the chain.
        """
        if "/" in model:
            provider, model_name = model.split("/", 1)
            return provider, model_name
        default = self._providers[0] if self._providers else self.config.provider.default
        return default, model

    def _init_provider(self, name: str) -> Provider:
        spec = self.registry.get(name)
        if spec is None:
            raise ProviderUnavailable(
                f"Unknown provider: {name}. Available providers: {', '.join(self.registry)}"
            )

        settings = self.config.provider_settings(name)
        api_key = settings.resolve_api_key(spec.api_key_env, self.config.environ())
        if not api_key:
            raise ProviderUnavailable(
                f"{spec.label} API key not found (set {settings.api_key_env or spec.api_key_env} "
                f"or [{name}] api_key)"
            )

        logger.debug("Initialising provider %s", name)
        return spec.builder(settings, api_key, self.file_logger, self.sleep)

    def _get_provider(self, index: int) -> Provider:
        with self._lock:
            cached = self._instances.get(index)
            if cached is not None:
                return cached

            if index >= len(self._providers):
                raise ProviderUnavailable("Provider index out of bounds")

            provider = self._init_provider(self._providers[index])
            self._instances[index] = provider
            return provider

    def complete(self, request: ChatRequest) -> ChatResponse:
        last_error: Optional[ClaiError] = None

        for index, name in enumerate(self._providers):
            try:
                provider = self._get_provider(index)
            except ClaiError as e:
                logger.info("Skipping provider %s: %s", name, e.message)
                last_error = e
                continue

            if not provider.is_available():
                logger.info("Provider %s is not available", name)
                last_error = ProviderUnavailable(f"Provider {name} is not available")
                continue

            try:
                return provider.complete(request)
            except ApiError as e:
                logger.info("Provider %s failed: %s", name, e.message)
                wrapped = ApiError(f"Provider {name} failed: {e.message}", status_code=e.status_code)
                wrapped.__cause__ = e
                last_error = wrapped

        if last_error is not None:
            raise last_error
        raise ApiError("All providers in chain failed")

    def is_available(self) -> bool:
        """True when at least one provider in the chain has a credential."""
        environ = self.config.environ()
        for name in self._providers:
            spec = self.registry.get(name)
            if spec is None:
                continue
            settings = self.config.provider_settings(name)
            if settings.resolve_api_key(spec.api_key_env, environ):
                return True
        return False

    def __repr__(self) -> str:
        return f"ProviderChain(providers={self._providers!r}, cached={len(self._instances)})"
