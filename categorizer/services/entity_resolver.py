"""Entity indexes and the resolver mapping classified names to Firefly ids.

Indexes are fetched fresh for every job and never shared between jobs. Entity creation is check-then-create with
no locking: it relies on the work queue running a single job at a time. Running jobs in parallel would need a lock
per entity kind around ``_get_or_create``.
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field

from categorizer.core.models import ClassificationResult
from categorizer.core.settings import Settings
from categorizer.core.utils import get_logger
from categorizer.services.firefly_client import FireflyClient

logger = get_logger("firefly-categorizer.resolver")


class EntityIndex(Mapping[str, str]):
    """Case-sensitive name to id mapping for one kind of ledger entity."""

    def __init__(self, kind: str, ids_by_name: Mapping[str, str] | None = None) -> None:
        """Initialize the index for ``kind`` with the names currently known to the ledger."""
        self.kind = kind
        self._ids = dict(ids_by_name or {})

    def __getitem__(self, name: str) -> str:
        return self._ids[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def names(self) -> frozenset[str]:
        """Known names, as sent to the provider."""
        return frozenset(self._ids)

    def add(self, name: str, entity_id: str) -> None:
        """Record an entity created during the current job."""
        self._ids[name] = entity_id


@dataclass
class EntityIndexes:
    """The indexes fetched for one job."""

    categories: EntityIndex
    accounts: EntityIndex = field(default_factory=lambda: EntityIndex("account"))
    budgets: EntityIndex = field(default_factory=lambda: EntityIndex("budget"))


@dataclass(frozen=True)
class Resolution:
    """Ids to apply, and the names they correspond to."""

    category_id: str | None = None
    category: str | None = None
    destination_account_id: str | None = None
    destination_account: str | None = None
    budget_id: str | None = None
    budget: str | None = None
    created: tuple[str, ...] = ()

    @property
    def has_changes(self) -> bool:
        """Whether anything can be written to the transaction."""
        return bool(self.category_id or self.destination_account_id)


class EntityResolver:
    """Resolve classified names against the ledger, creating entities where the policy allows it."""

    def __init__(self, ledger: FireflyClient, settings: Settings) -> None:
        """Initialize the resolver with the ledger client and the creation policy from settings."""
        self._ledger = ledger
        self._want_account = settings.auto_destination_account
        self._create_accounts = settings.create_destination_accounts
        self._want_budget = settings.auto_budget

    def load_indexes(self) -> EntityIndexes:
        """Fetch the current categories, plus accounts and budgets when they are requested."""
        indexes = EntityIndexes(categories=EntityIndex("category", self._ledger.get_categories()))
        if self._want_account:
            indexes.accounts = EntityIndex("account", self._ledger.get_expense_accounts())
        if self._want_budget:
            indexes.budgets = EntityIndex("budget", self._ledger.get_budgets())
        logger.debug(
            f"Indexes loaded: {len(indexes.categories)} categories, "
            f"{len(indexes.accounts)} accounts, {len(indexes.budgets)} budgets"
        )
        return indexes

    def resolve(self, result: ClassificationResult, indexes: EntityIndexes) -> Resolution:
        """Turn a classification into ids, creating a suggested category (always) or account (if enabled)."""
        created: list[str] = []

        category = result.category or result.suggested_category
        category_id = None
        if result.category:
            category_id = indexes.categories.get(result.category)
        elif result.suggested_category:
            category_id = self._get_or_create(
                indexes.categories, result.suggested_category, self._ledger.create_category, created
            )

        account = None
        account_id = None
        if self._want_account:
            if result.destination_account:
                account = result.destination_account
                account_id = indexes.accounts.get(account)
            elif result.suggested_destination_account and self._create_accounts:
                account = result.suggested_destination_account
                account_id = self._get_or_create(
                    indexes.accounts, account, self._ledger.create_expense_account, created
                )
            elif result.suggested_destination_account:
                logger.info(
                    f"Destination account '{result.suggested_destination_account}' suggested but account creation "
                    "is disabled"
                )

        budget_id = indexes.budgets.get(result.budget) if self._want_budget and result.budget else None

        return Resolution(
            category_id=category_id,
            category=category if category_id else None,
            destination_account_id=account_id,
            destination_account=account if account_id else None,
            budget_id=budget_id,
            budget=result.budget if budget_id else None,
            created=tuple(created),
        )

    def _get_or_create(
        self, index: EntityIndex, name: str, create: Callable[[str], str], created: list[str]
    ) -> str:
        if name in index:
            return index[name]
        logger.info(f"Creating new {index.kind}: {name}")
        entity_id = create(name)
        index.add(name, entity_id)
        created.append(f"{index.kind}:{name}")
        return entity_id
