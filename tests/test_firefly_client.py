"""Tests for the Firefly III client against a mocked HTTP transport."""

import json

import httpx
import pytest

from categorizer.core.exceptions import LedgerError
from categorizer.services.firefly_client import FireflyClient


def make_client(handler: object) -> FireflyClient:
    """FireflyClient over httpx.MockTransport."""
    return FireflyClient(httpx.Client(base_url="http://firefly", transport=httpx.MockTransport(handler)))


def named(items: list[tuple[str, str]], page: int, total_pages: int) -> dict:
    """A JSON:API page of named resources."""
    return {
        "data": [{"id": item_id, "attributes": {"name": name}} for item_id, name in items],
        "meta": {"pagination": {"current_page": page, "total_pages": total_pages}},
    }


def transaction_resource(group_id: str, tags: list[str]) -> dict:
    """A Firefly transaction group resource with integer journal ids, as the API returns them."""
    return {
        "id": group_id,
        "attributes": {
            "transactions": [
                {
                    "transaction_journal_id": int(group_id) * 10,
                    "type": "withdrawal",
                    "description": "CB LIDL",
                    "destination_name": "Lidl",
                    "tags": tags,
                    "amount": "12.50",
                }
            ]
        },
    }


def test_categories_follow_pagination() -> None:
    """All pages are fetched and merged into one name->id map."""
    pages = {1: named([("1", "Food")], 1, 2), 2: named([("2", "Transport")], 2, 2)}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=pages[int(request.url.params["page"])])

    categories = make_client(handler).get_categories()
    if categories != {"Food": "1", "Transport": "2"}:
        msg = f"Unexpected categories {categories}"
        raise AssertionError(msg)


def test_expense_accounts_are_filtered_by_type() -> None:
    """Only expense accounts are requested."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=named([(10, "Amazon")], 1, 1))

    accounts = make_client(handler).get_expense_accounts()
    if seen[0].url.params["type"] != "expense" or accounts != {"Amazon": "10"}:
        msg = f"Unexpected request/result {seen[0].url} {accounts}"
        raise AssertionError(msg)


def test_create_category_returns_id() -> None:
    """The id of the created category is returned."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method != "POST" or json.loads(request.content) != {"name": "Snacks"}:
            return httpx.Response(400)
        return httpx.Response(200, json={"data": {"id": "42", "attributes": {"name": "Snacks"}}})

    if make_client(handler).create_category("Snacks") != "42":
        msg = "Expected id 42"
        raise AssertionError(msg)


def test_error_status_raises_ledger_error() -> None:
    """Non-success answers keep their status and body."""
    client = make_client(lambda request: httpx.Response(422, text='{"message":"duplicate"}'))
    with pytest.raises(LedgerError) as excinfo:
        client.create_expense_account("Amazon")
    if excinfo.value.status_code != 422 or "duplicate" not in excinfo.value.body:
        msg = f"Unexpected error {excinfo.value!r}"
        raise AssertionError(msg)


def test_transport_error_raises_ledger_error() -> None:
    """Connection failures become LedgerError without status code."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(LedgerError):
        make_client(handler).get_budgets()


def test_transactions_by_tag() -> None:
    """Tagged transactions are listed with their splits and tags."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path != "/api/v1/tags/reprocess/transactions" or request.url.params["limit"] != "5":
            return httpx.Response(404)
        return httpx.Response(200, json={"data": [transaction_resource("7", ["reprocess"])]})

    groups = make_client(handler).get_transactions_by_tag("reprocess", 5)
    split = groups[0].primary
    if groups[0].id != "7" or split.transaction_journal_id != "70" or split.tags != ["reprocess"]:
        msg = f"Unexpected groups {groups}"
        raise AssertionError(msg)


def test_transactions_by_tag_escapes_tag() -> None:
    """Reserved characters in a tag stay inside the path segment."""
    seen: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.raw_path)
        return httpx.Response(200, json={"data": []})

    make_client(handler).get_transactions_by_tag("to do/later?#1", 5)
    if not seen or not seen[0].startswith(b"/api/v1/tags/to%20do%2Flater%3F%231/transactions?"):
        msg = f"Tag not escaped: {seen}"
        raise AssertionError(msg)


def test_update_transaction_puts_body() -> None:
    """Updates are PUT to the transaction group."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": transaction_resource("7", [])})

    make_client(handler).update_transaction("7", {"transactions": []})
    if seen[0].method != "PUT" or seen[0].url.path != "/api/v1/transactions/7":
        msg = f"Unexpected request {seen[0].method} {seen[0].url}"
        raise AssertionError(msg)


def test_ensure_webhook_is_idempotent() -> None:
    """An existing webhook for the same URL is reused; otherwise one is created."""
    created: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            created.append(json.loads(request.content))
            return httpx.Response(200, json={"data": {"id": "2", "attributes": {"url": created[-1]["url"]}}})
        hooks = [{"id": "1", "attributes": {"url": "http://me/webhook", "title": "AI Categorizer"}}]
        return httpx.Response(200, json={"data": hooks, "meta": {"pagination": {"total_pages": 1}}})

    client = make_client(handler)
    client.ensure_webhook("http://me/webhook")
    if created:
        msg = "Existing webhook must not be recreated"
        raise AssertionError(msg)
    client.ensure_webhook("http://other/webhook")
    if len(created) != 1 or created[0]["trigger"] != "STORE_TRANSACTION" or created[0]["response"] != "TRANSACTIONS":
        msg = f"Unexpected creations {created}"
        raise AssertionError(msg)
