"""Validation of Firefly III webhook deliveries."""

from typing import Any

from pydantic import ValidationError

from categorizer.core.exceptions import WebhookValidationError
from categorizer.core.models import TransactionGroup

SUPPORTED_TYPES = ("withdrawal", "deposit")


def parse_webhook(payload: Any) -> TransactionGroup:
    """Check a STORE_TRANSACTION delivery and return the transaction group it carries."""
    if not isinstance(payload, dict):
        msg = "Webhook body must be a JSON object"
        raise WebhookValidationError(msg)
    if payload.get("trigger") != "STORE_TRANSACTION":
        msg = "trigger is not STORE_TRANSACTION. Request will not be processed"
        raise WebhookValidationError(msg)
    if payload.get("response") != "TRANSACTIONS":
        msg = "response is not TRANSACTIONS. Request will not be processed"
        raise WebhookValidationError(msg)

    content = payload.get("content")
    if not isinstance(content, dict):
        msg = "content must be a JSON object"
        raise WebhookValidationError(msg)
    if not content.get("id"):
        msg = "Missing content.id"
        raise WebhookValidationError(msg)
    transactions = content.get("transactions")
    if not isinstance(transactions, list) or not transactions:
        msg = "No transactions are available in content.transactions"
        raise WebhookValidationError(msg)

    first = transactions[0]
    if not isinstance(first, dict):
        msg = "content.transactions[0] must be an object"
        raise WebhookValidationError(msg)
    if first.get("type") not in SUPPORTED_TYPES:
        msg = "content.transactions[0].type has to be 'withdrawal' or 'deposit'. Transaction will be ignored."
        raise WebhookValidationError(msg)
    if not first.get("description"):
        msg = "Missing content.transactions[0].description"
        raise WebhookValidationError(msg)
    if not first.get("destination_name"):
        msg = "Missing content.transactions[0].destination_name"
        raise WebhookValidationError(msg)

    try:
        return TransactionGroup(id=str(content["id"]), transactions=transactions)
    except ValidationError as exc:
        msg = f"Malformed content.transactions: {exc.errors()[0]['msg']}"
        raise WebhookValidationError(msg) from exc
