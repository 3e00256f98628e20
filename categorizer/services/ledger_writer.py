"""LedgerWriter: write classifications and tag changes back to Firefly III."""

from collections.abc import Sequence

from categorizer.core.models import TransactionSplit
from categorizer.core.utils import get_logger
from categorizer.services.firefly_client import FireflyClient

logger = get_logger("firefly-categorizer.writer")


class LedgerWriter:
    """Apply category, destination account and marker tag to a transaction in one update."""

    def __init__(self, ledger: FireflyClient, marker_tag: str) -> None:
        """Initialize the writer with the ledger client and the marker tag added to processed transactions."""
        self._ledger = ledger
        self._marker_tag = marker_tag

    def apply_classification(
        self,
        transaction_id: str,
        transaction_lines: Sequence[TransactionSplit],
        category_id: str | None,
        destination_account_id: str | None,
    ) -> None:
        """Write the ids and the marker tag to every split, letting Firefly run its rules and webhooks."""
        body = {"apply_rules": True, "fire_webhooks": True, "transactions": []}
        for line in transaction_lines:
            tags = list(line.tags or [])
            if self._marker_tag not in tags:
                tags.append(self._marker_tag)
            update = {"transaction_journal_id": line.transaction_journal_id, "tags": tags}
            if category_id:
                update["category_id"] = category_id
            if destination_account_id:
                update["destination_id"] = destination_account_id
            body["transactions"].append(update)
        self._ledger.update_transaction(transaction_id, body)
        logger.info(
            f"Transaction {transaction_id} updated (category={category_id}, destination={destination_account_id})"
        )

    def remove_tag(self, transaction_id: str, tag_name: str) -> None:
        """Drop ``tag_name`` from every split without re-running rules or webhooks."""
        group = self._ledger.get_transaction(transaction_id)
        if not any(tag_name in (line.tags or []) for line in group.transactions):
            logger.debug(f"Transaction {transaction_id} does not carry tag '{tag_name}'")
            return
        body = {
            "apply_rules": False,
            "fire_webhooks": False,
            "transactions": [
                {
                    "transaction_journal_id": line.transaction_journal_id,
                    "tags": [tag for tag in (line.tags or []) if tag != tag_name],
                }
                for line in group.transactions
            ],
        }
        self._ledger.update_transaction(transaction_id, body)
        logger.info(f"Tag '{tag_name}' removed from transaction {transaction_id}")
