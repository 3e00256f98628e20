"""OllamaProvider: classification through a locally hosted Ollama model."""

import httpx

from categorizer.core.exceptions import ProviderError
from categorizer.core.settings import Settings
from categorizer.core.utils import get_logger
from categorizer.providers.base import ClassificationProvider

logger = get_logger("firefly-categorizer.provider.ollama")


class OllamaProvider(ClassificationProvider):
    """Provider backed by an Ollama server; no authentication."""

    name = "ollama"

    def __init__(self, http_client: httpx.Client, model: str, language: str = "FR") -> None:
        """Initialize the provider with an HTTP client bound to the Ollama base URL."""
        super().__init__(language)
        self._client = http_client
        self._model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "OllamaProvider":
        """Build the provider and its HTTP client from settings."""
        # Allow extra time for model loading (cold start)
        timeout = httpx.Timeout(connect=5.0, read=settings.ollama_timeout, write=10.0, pool=5.0)
        client = httpx.Client(base_url=settings.ollama_base_url.rstrip("/"), timeout=timeout)
        return cls(client, settings.ollama_model, settings.language)

    def _complete(self, prompt: str) -> str:
        payload = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": 0.1, "top_p": 0.9, "num_predict": 100},
        }
        logger.info(f"Calling Ollama model {self._model}...")
        try:
            response = self._client.post("/api/generate", json=payload)
        except httpx.HTTPError as exc:
            raise ProviderError(self.name, None, str(exc) or repr(exc)) from exc
        if response.is_error:
            raise ProviderError(self.name, response.status_code, response.text)
        return response.json().get("response", "")
