"""Shared fixtures: settings, an in-memory Firefly ledger and a scripted classification provider."""

import copy
from collections.abc import Callable, Iterator

import pytest

from categorizer.core.db import init_db
from categorizer.core.exceptions import LedgerError
from categorizer.core.models import TransactionGroup, TransactionSplit
from categorizer.core.settings import Settings
from categorizer.providers.base import ClassificationProvider
from categorizer.workers.job_queue import WorkQueue
from categorizer.workers.job_registry import JobRegistry


def make_group(
    group_id: str, description: str = "CB CARREFOUR 12/03", tags: list[str] | None = None
) -> TransactionGroup:
    """Build a one-split withdrawal."""
    return TransactionGroup(
        id=group_id,
        transactions=[
            TransactionSplit(
                transaction_journal_id=f"{group_id}0",
                type="withdrawal",
                description=description,
                destination_name="Carrefour",
                tags=tags,
            )
        ],
    )


class FakeLedger:
    """In-memory stand-in for FireflyClient that records every call in a shared log."""

    def __init__(self, log: list[str] | None = None) -> None:
        """Start with a few categories, accounts and budgets."""
        self.log = log if log is not None else []
        self.categories = {"Food": "1", "Transport": "2"}
        self.accounts = {"Amazon": "10"}
        self.budgets = {"Household": "20"}
        self.groups: dict[str, TransactionGroup] = {}
        self.updates: list[tuple[str, dict]] = []
        self.created: list[tuple[str, str]] = []
        self.fail_updates = False
        self.fail_tag_removal = False
        self._next_id = 100

    def add(self, group: TransactionGroup) -> None:
        """Store a transaction group."""
        self.groups[group.id] = group

    def get_categories(self) -> dict[str, str]:
        """Return a copy, like a fresh fetch."""
        self.log.append("get_categories")
        return dict(self.categories)

    def get_expense_accounts(self) -> dict[str, str]:
        """Return a copy, like a fresh fetch."""
        self.log.append("get_expense_accounts")
        return dict(self.accounts)

    def get_budgets(self) -> dict[str, str]:
        """Return a copy, like a fresh fetch."""
        self.log.append("get_budgets")
        return dict(self.budgets)

    def _create(self, kind: str, store: dict[str, str], name: str) -> str:
        self._next_id += 1
        store[name] = str(self._next_id)
        self.created.append((kind, name))
        self.log.append(f"create_{kind}:{name}")
        return str(self._next_id)

    def create_category(self, name: str) -> str:
        """Create a category."""
        return self._create("category", self.categories, name)

    def create_expense_account(self, name: str) -> str:
        """Create an expense account."""
        return self._create("account", self.accounts, name)

    def get_transaction(self, transaction_id: str) -> TransactionGroup:
        """Return a copy of the stored group."""
        return copy.deepcopy(self.groups[transaction_id])

    def get_transactions_by_tag(self, tag: str, limit: int) -> list[TransactionGroup]:
        """Return stored groups carrying ``tag``."""
        self.log.append(f"list_tag:{tag}")
        tagged = [g for g in self.groups.values() if any(tag in (s.tags or []) for s in g.transactions)]
        return [copy.deepcopy(g) for g in tagged[:limit]]

    def update_transaction(self, transaction_id: str, body: dict) -> None:
        """Record the update and apply tags, category and destination to the stored group."""
        if self.fail_updates:
            raise LedgerError(500, "ledger down")
        if self.fail_tag_removal and not body["apply_rules"]:
            raise LedgerError(503, "tag removal refused")
        self.log.append(f"update:{transaction_id}")
        self.updates.append((transaction_id, copy.deepcopy(body)))
        group = self.groups.get(transaction_id)
        if group is None:
            return
        by_journal = {s.transaction_journal_id: s for s in group.transactions}
        for change in body["transactions"]:
            split = by_journal[change["transaction_journal_id"]]
            split.tags = change.get("tags", split.tags)
            split.category_id = change.get("category_id", split.category_id)
            split.destination_id = change.get("destination_id", split.destination_id)

    def ensure_webhook(self, url: str) -> dict:
        """Pretend the webhook exists."""
        self.log.append(f"ensure_webhook:{url}")
        return {"id": "1", "attributes": {"url": url, "title": "AI Categorizer"}}


class ScriptedProvider(ClassificationProvider):
    """Provider whose model answer is computed by a callable instead of a remote call."""

    name = "scripted"

    def __init__(
        self, answer: str | Callable[[str], str] = '{"category": "Food"}', log: list[str] | None = None
    ) -> None:
        """Answer every prompt with ``answer`` (or ``answer(prompt)``)."""
        super().__init__("EN")
        self.answer = answer
        self.log = log if log is not None else []
        self.prompts: list[str] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScriptedProvider":
        """Not configurable from settings."""
        return cls()

    def _complete(self, prompt: str) -> str:
        self.log.append("classify")
        self.prompts.append(prompt)
        return self.answer(prompt) if callable(self.answer) else self.answer


@pytest.fixture
def settings() -> Settings:
    """Settings with an in-memory job store and no polling timer."""
    return Settings(
        _env_file=None,
        provider="ollama",
        language="EN",
        database_url="sqlite://",
        firefly_tag="AI categorized",
        firefly_tag_filter="reprocess",
        tag_poll_interval=0,
        job_timeout=5,
    )


@pytest.fixture
def registry() -> JobRegistry:
    """Job registry on an in-memory SQLite database."""
    return JobRegistry(init_db("sqlite://"))


@pytest.fixture
def queue(registry: JobRegistry) -> Iterator[WorkQueue]:
    """Work queue bound to the registry, shut down after the test."""
    work_queue = WorkQueue(registry, timeout=5)
    yield work_queue
    work_queue.shutdown(wait=True)


@pytest.fixture
def call_log() -> list[str]:
    """Ordered log shared by the fake ledger and provider."""
    return []


@pytest.fixture
def ledger(call_log: list[str]) -> FakeLedger:
    """In-memory ledger."""
    return FakeLedger(call_log)


@pytest.fixture
def provider(call_log: list[str]) -> ScriptedProvider:
    """Provider answering with a known category."""
    return ScriptedProvider(log=call_log)
