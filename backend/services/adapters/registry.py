"""Lazy registry of source adapters, keyed by upstream source name."""

import logging

from services.adapters.base import BaseSourceAdapter

logger = logging.getLogger(__name__)

_registry: dict[str, BaseSourceAdapter] = {}

SOURCES = ("jne", "platform")


def _create_adapter(name: str) -> BaseSourceAdapter:
    """Factory: create an adapter by source name with deferred imports."""
    if name == "jne":
        from services.adapters.jne import JNEAdapter
        return JNEAdapter()
    elif name == "platform":
        from services.adapters.platform import PlatformAdapter
        return PlatformAdapter()
    else:
        raise ValueError(f"Unknown source: {name}")


def get_adapter(name: str) -> BaseSourceAdapter:
    """Get the adapter for a source, creating it on first access."""
    if name not in _registry:
        _registry[name] = _create_adapter(name)
        logger.debug("Adapter registered: %s", name)
    return _registry[name]


def clear() -> None:
    """Drop all cached adapters. Useful for testing."""
    _registry.clear()
