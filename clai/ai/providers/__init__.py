"""Concrete provider implementations.

Import directly from the submodules. The mistralai SDK is only imported when
the first Mistral client is built.
"""

__all__ = []
