"""Provider registry for selecting a classification backend by name.

This module provides a registry for provider classes, so the configured backend is looked up once at startup
instead of being branched on throughout the code.
"""

from typing import ClassVar

from categorizer.providers.base import ClassificationProvider


class ProviderRegistry:
    """Registry for provider classes."""

    _registry: ClassVar[dict[str, type[ClassificationProvider]]] = {}

    @classmethod
    def register(cls, name: str, provider_cls: type[ClassificationProvider]) -> None:
        """Register a provider class with a given name."""
        cls._registry[name] = provider_cls

    @classmethod
    def get(cls, name: str) -> type[ClassificationProvider]:
        """Retrieve a provider class by name."""
        try:
            return cls._registry[name]
        except KeyError:
            msg = f"Unknown provider '{name}', available: {', '.join(cls.available())}"
            raise ValueError(msg) from None

    @classmethod
    def available(cls) -> list[str]:
        """List all available provider names."""
        return list(cls._registry.keys())
