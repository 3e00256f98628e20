"""Base provider abstraction for transaction classification.

This module defines the abstract base class shared by every classification backend. The base class owns the
contract: it validates input, renders the prompt in the configured language and parses the answer; concrete
providers only implement the call to their model.
"""

from abc import ABC, abstractmethod
from collections.abc import Collection

from categorizer.core.models import ClassificationResult
from categorizer.core.settings import Settings
from categorizer.core.utils import get_logger
from categorizer.providers.prompts import PROMPTS, build_prompt
from categorizer.providers.response_parser import parse_response

logger = get_logger("firefly-categorizer.provider")


class ClassificationProvider(ABC):
    """Abstract base class for all classification providers."""

    name = "provider"

    def __init__(self, language: str = "FR") -> None:
        """Initialize the provider with the prompt language (``EN`` or ``FR``)."""
        if language not in PROMPTS:
            msg = f"Unsupported language: {language}"
            raise ValueError(msg)
        self._language = language

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: Settings) -> "ClassificationProvider":
        """Build the provider and its client from settings."""

    def classify(
        self,
        categories: Collection[str],
        destination_name: str | None,
        description: str,
        transaction_type: str,
        accounts: Collection[str] = (),
        want_account: bool = False,
        budgets: Collection[str] = (),
        want_budget: bool = False,
    ) -> ClassificationResult:
        """Ask the model to classify a transaction against the known category, account and budget names."""
        if not description:
            msg = "A transaction description is required for classification"
            raise ValueError(msg)
        prompt = build_prompt(
            self._language,
            categories,
            destination_name,
            description,
            transaction_type,
            accounts,
            want_account,
            budgets,
            want_budget,
        )
        logger.debug(f"[{self.name}] PROMPT: {prompt}")
        raw = self._complete(prompt)
        logger.debug(f"[{self.name}] OUTPUT: {raw}")
        text = self._clean_output(raw).strip()
        result = parse_response(text, categories, accounts, budgets, want_account, want_budget)
        return result.model_copy(update={"prompt": prompt, "response": raw})

    @abstractmethod
    def _complete(self, prompt: str) -> str:
        """Send the prompt to the model and return its raw textual answer."""

    def _clean_output(self, raw: str) -> str:
        """Strip provider-specific noise from the raw answer before parsing."""
        return raw
