"""GroqProvider: classification through a hosted chat-completions model.

This module defines the remote provider. It sends the classification prompt to a hosted model through the Groq
SDK, collects the answer (streamed or not) and strips reasoning blocks before handing the text to the parser.
"""

import re

import groq

from categorizer.core.exceptions import ProviderError
from categorizer.core.settings import Settings
from categorizer.core.utils import get_logger
from categorizer.providers.base import ClassificationProvider

logger = get_logger("firefly-categorizer.provider.groq")

# An answer cut off by the output limit can end inside an unclosed block.
THINK_BLOCK_RE = re.compile(r"<think>.*?(?:</think>|\Z)", re.DOTALL)

# Reasoning model families reject ``max_tokens`` and only accept ``max_completion_tokens``.
COMPLETION_TOKENS_PREFIXES = ("o1", "o3", "o4", "gpt-5", "openai/gpt-oss", "deepseek-r1", "qwen/qwen3")


def output_limit_parameter(model: str) -> str:
    """Name of the output-length parameter accepted by the given model family."""
    if model.lower().startswith(COMPLETION_TOKENS_PREFIXES):
        return "max_completion_tokens"
    return "max_tokens"


class GroqProvider(ClassificationProvider):
    """Provider backed by a hosted model reached with an API key."""

    name = "groq"

    def __init__(self, llm_client: object, settings: Settings) -> None:
        """Initialize the provider with a Groq client and settings."""
        super().__init__(settings.language)
        self._client = llm_client
        self._model = settings.groq_model
        self._temperature = settings.groq_temperature
        self._top_p = settings.groq_top_p
        self._max_output_tokens = settings.groq_max_output_tokens
        self._stream = settings.groq_stream

    @classmethod
    def from_settings(cls, settings: Settings) -> "GroqProvider":
        """Build the provider and its authenticated client from settings."""
        if not settings.groq_api_key:
            msg = "GROQ_API_KEY is required when PROVIDER=groq"
            raise ValueError(msg)
        return cls(groq.Groq(api_key=settings.groq_api_key), settings)

    def _complete(self, prompt: str) -> str:
        """Call the chat completions API and return the answer as produced by the model."""
        request = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._temperature,
            "top_p": self._top_p,
            "stream": self._stream,
            output_limit_parameter(self._model): self._max_output_tokens,
        }
        try:
            logger.info(f"Calling {self._model}...")
            completion = self._client.chat.completions.create(**request)
            raw_output = self._collect_llm_output(completion) if self._stream else completion.choices[0].message.content
        except groq.APIStatusError as exc:
            raise ProviderError(self.name, exc.status_code, exc.response.text) from exc
        except groq.APIError as exc:
            raise ProviderError(self.name, None, str(exc)) from exc
        return raw_output or ""

    def _clean_output(self, raw: str) -> str:
        """Drop reasoning blocks, closed or cut off, from the answer."""
        return THINK_BLOCK_RE.sub("", raw)

    def _collect_llm_output(self, completion: object) -> str:
        """Collect the full output from the LLM completion stream."""
        raw_output = ""
        for chunk in completion:
            if chunk.choices:
                raw_output += chunk.choices[0].delta.content or ""
        return raw_output
