"""Turn a model's free-form answer into a ClassificationResult.

Models do not reliably follow format instructions, so parsing degrades through four tiers and the first one that
succeeds wins:

1. the whole answer is a JSON object;
2. the first ``{...}`` span inside the answer is a JSON object;
3. the answer is ``Category|Account|Budget`` with exactly the requested number of parts;
4. the whole answer is a bare category name.

Every extracted name is then checked against the names the ledger already knows: known names land in the plain
field, unknown ones in the matching ``suggested_*`` field.

A JSON object without a category key yields no category: the object text itself is never taken for a name.
"""

import json
import re
from collections.abc import Collection

from categorizer.core.models import ClassificationResult
from categorizer.core.utils import get_logger

logger = get_logger("firefly-categorizer.parser")

JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
QUOTES = "\"'`"


def _clean(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip().strip(QUOTES).strip()
    return value or None


def _load_object(text: str) -> dict | None:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _from_json(text: str) -> dict | None:
    data = _load_object(text)
    if data is None:
        match = JSON_OBJECT_RE.search(text)
        if not match:
            return None
        data = _load_object(match.group(0))
        if data is None:
            return None
        logger.debug("Extracted JSON object from surrounding text")
    # Keys are matched ignoring case and underscores.
    values = {str(key).lower().replace("_", ""): value for key, value in data.items()}
    if values.get("category") is None:
        logger.warning(f"JSON answer has no category key: {sorted(data)}")
    return {
        "category": _clean(values.get("category")),
        "destination_account": _clean(values.get("destinationaccount")),
        "budget": _clean(values.get("budget")),
    }


def _from_pipes(text: str, want_account: bool, want_budget: bool) -> dict | None:
    expected = 1 + want_account + want_budget
    parts = [part.strip() for part in text.split("|")]
    if expected == 1 or len(parts) != expected or not all(parts):
        return None
    names = {"category": _clean(parts.pop(0))}
    if want_account:
        names["destination_account"] = _clean(parts.pop(0))
    if want_budget:
        names["budget"] = _clean(parts.pop(0))
    return names


def _split(name: str | None, known: Collection[str]) -> tuple[str | None, str | None]:
    if name is None:
        return None, None
    if name in known:
        return name, None
    return None, name


def parse_response(
    raw: str,
    categories: Collection[str],
    accounts: Collection[str] = (),
    budgets: Collection[str] = (),
    want_account: bool = False,
    want_budget: bool = False,
) -> ClassificationResult:
    """Parse the raw answer of a provider into a ClassificationResult (``prompt`` is left unset)."""
    text = (raw or "").strip()
    if not text:
        logger.warning("Empty model response, nothing to classify")
        return ClassificationResult(response=raw)

    names = _from_json(text) or _from_pipes(text, want_account, want_budget) or {"category": _clean(text)}

    category, suggested_category = _split(names.get("category"), categories)
    fields = {"category": category, "suggested_category": suggested_category}
    if want_account:
        account, suggested_account = _split(names.get("destination_account"), accounts)
        fields.update(destination_account=account, suggested_destination_account=suggested_account)
    if want_budget:
        budget, suggested_budget = _split(names.get("budget"), budgets)
        fields.update(budget=budget, suggested_budget=suggested_budget)
    return ClassificationResult(response=raw, **fields)
