"""Providers package: the classification contract, its Groq and Ollama implementations, and their registry."""

from .base import ClassificationProvider
from .groq_provider import GroqProvider
from .ollama_provider import OllamaProvider
from .registry import ProviderRegistry

ProviderRegistry.register(GroqProvider.name, GroqProvider)
ProviderRegistry.register(OllamaProvider.name, OllamaProvider)

__all__ = ["ClassificationProvider", "GroqProvider", "OllamaProvider", "ProviderRegistry"]
