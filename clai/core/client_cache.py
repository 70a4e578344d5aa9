"""
Process-wide cache of Mistral SDK clients.

A client owns an HTTP connection pool, so every MistralProvider built for the
same credential and server shares one. The chain may build providers from
several threads, hence the lock.
"""

import threading
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from mistralai import Mistral  # pragma: no cover


CacheKey = Tuple[int, Optional[str]]

_client_cache: Dict[CacheKey, Any] = {}
_lock = threading.Lock()


def get_cached_client(api_key: str, server_url: Optional[str] = None) -> "Mistral":
    """
    Return the client for (api_key, server_url), creating it on first use.

    Only a hash of the key is stored in the cache key. `server_url` is the
    `endpoint` setting of the [mistralai] section; None means the SDK default.
    """
    cache_key = (hash(api_key), server_url)

    with _lock:
        client = _client_cache.get(cache_key)
        if client is None:
            # Importing the SDK is the slowest part of startup.
            from mistralai import Mistral

            kwargs = {"api_key": api_key}
            if server_url:
                kwargs["server_url"] = server_url
            client = _client_cache[cache_key] = Mistral(**kwargs)
        return client


def clear_client_cache() -> None:
    with _lock:
        _client_cache.clear()


def get_cache_stats() -> Dict[str, int]:
    with _lock:
        return {"cached_clients": len(_client_cache)}
