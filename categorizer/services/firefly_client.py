"""FireflyClient: the Firefly III REST calls used by the categorizer.

Every method maps to one endpoint of the Firefly III API v1. Non-success answers and transport failures are raised
as LedgerError so they fail the enclosing job.
"""

from typing import Any
from urllib.parse import quote

import httpx

from categorizer.core.exceptions import LedgerError
from categorizer.core.models import TransactionGroup, TransactionSplit
from categorizer.core.settings import Settings
from categorizer.core.utils import get_logger

logger = get_logger("firefly-categorizer.firefly")

WEBHOOK_TITLE = "AI Categorizer"


def _group_from_resource(resource: dict[str, Any]) -> TransactionGroup:
    """Build a TransactionGroup from a Firefly ``transactions`` JSON:API resource."""
    splits = [TransactionSplit(**split) for split in resource["attributes"]["transactions"]]
    return TransactionGroup(id=str(resource["id"]), transactions=splits)


class FireflyClient:
    """Thin typed wrapper over the Firefly III API."""

    def __init__(self, http_client: httpx.Client) -> None:
        """Initialize the client with an httpx client bound to the Firefly base URL."""
        self._http = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "FireflyClient":
        """Build an authenticated client from settings."""
        client = httpx.Client(
            base_url=settings.firefly_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {settings.firefly_personal_token}",
                "Accept": "application/vnd.api+json",
            },
            timeout=30.0,
        )
        return cls(client)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise LedgerError(None, str(exc) or repr(exc)) from exc
        if response.is_error:
            raise LedgerError(response.status_code, response.text)
        if not response.content:
            return {}
        return response.json()

    def _list(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Fetch every page of a paginated collection."""
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            data = self._request("GET", path, params={**(params or {}), "page": page})
            items.extend(data.get("data", []))
            total_pages = data.get("meta", {}).get("pagination", {}).get("total_pages", 1)
            if page >= total_pages:
                return items
            page += 1

    def _names_to_ids(self, path: str, params: dict[str, Any] | None = None) -> dict[str, str]:
        return {item["attributes"]["name"]: str(item["id"]) for item in self._list(path, params)}

    def get_categories(self) -> dict[str, str]:
        """Map every category name to its id."""
        return self._names_to_ids("/api/v1/categories")

    def get_expense_accounts(self) -> dict[str, str]:
        """Map every expense (destination) account name to its id."""
        return self._names_to_ids("/api/v1/accounts", {"type": "expense"})

    def get_budgets(self) -> dict[str, str]:
        """Map every budget name to its id."""
        return self._names_to_ids("/api/v1/budgets")

    def create_category(self, name: str) -> str:
        """Create a category and return its id."""
        data = self._request("POST", "/api/v1/categories", json={"name": name})
        category_id = str(data["data"]["id"])
        logger.info(f"New category created: {name} (ID: {category_id})")
        return category_id

    def create_expense_account(self, name: str) -> str:
        """Create an expense account and return its id."""
        data = self._request("POST", "/api/v1/accounts", json={"name": name, "type": "expense"})
        account_id = str(data["data"]["id"])
        logger.info(f"New destination account created: {name} (ID: {account_id})")
        return account_id

    def get_transaction(self, transaction_id: str) -> TransactionGroup:
        """Fetch a transaction group with its splits and their tags."""
        data = self._request("GET", f"/api/v1/transactions/{transaction_id}")
        return _group_from_resource(data["data"])

    def get_transactions_by_tag(self, tag: str, limit: int) -> list[TransactionGroup]:
        """Fetch the most recent ``limit`` transaction groups carrying ``tag``."""
        path = f"/api/v1/tags/{quote(tag, safe='')}/transactions"
        data = self._request("GET", path, params={"limit": limit, "page": 1})
        return [_group_from_resource(resource) for resource in data.get("data", [])[:limit]]

    def update_transaction(self, transaction_id: str, body: dict[str, Any]) -> None:
        """Apply a partial update to a transaction group."""
        self._request("PUT", f"/api/v1/transactions/{transaction_id}", json=body)

    def get_webhooks(self) -> list[dict[str, Any]]:
        """List the configured webhooks."""
        return self._list("/api/v1/webhooks")

    def create_webhook(self, url: str) -> dict[str, Any]:
        """Register a webhook firing on every stored transaction."""
        payload = {
            "title": WEBHOOK_TITLE,
            "trigger": "STORE_TRANSACTION",
            "response": "TRANSACTIONS",
            "delivery": "JSON",
            "url": url,
            "active": True,
        }
        return self._request("POST", "/api/v1/webhooks", json=payload)["data"]

    def ensure_webhook(self, url: str) -> dict[str, Any]:
        """Return the webhook pointing at ``url``, creating it if it does not exist yet."""
        for webhook in self.get_webhooks():
            if webhook["attributes"]["url"] == url:
                logger.info(f"Webhook already configured: {webhook['attributes']['title']}")
                return webhook
        webhook = self.create_webhook(url)
        logger.info(f"Webhook created: id={webhook['id']} url={url}")
        return webhook
