"""Predicate evaluation against catalog assets.

Supported predicate types: ``type``, ``path``, ``fulltext``, ``property``,
``daterange`` and nested groups. Query parameters (``p.*``) and
``orderby`` predicates are directives and never filter.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from dateutil import parser as dt_parser

from AssetSearch.backends.catalog.loader import CatalogAsset
from AssetSearch.core.predicates import Predicate, PredicateGroup
from AssetSearch.search.errors import SearchBackendError
from AssetSearch.search.safety import is_directive

_VALUE_RE = re.compile(r"^(?:(\d+)_)?value$")


def _is_true(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def _values(raw: Any) -> list[str]:
    """Property values as strings; list properties are multi-valued."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [_stringify(item) for item in raw]
    return [_stringify(raw)]


def _stringify(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _property_name(name: str) -> str:
    return name.lstrip("@").rsplit("/", 1)[-1]


def _eval_type(predicate: Predicate, asset: CatalogAsset) -> bool:
    return not predicate.value or asset.type == predicate.value


def _eval_path(predicate: Predicate, asset: CatalogAsset) -> bool:
    root = predicate.value.rstrip("/") or "/"
    if _is_true(predicate.get("exact")):
        return asset.path == root
    prefix = root if root == "/" else f"{root}/"
    if _is_true(predicate.get("flat")):
        return asset.path.startswith(prefix) and "/" not in asset.path[len(prefix):]
    if _is_true(predicate.get("self")) and asset.path == root:
        return True
    return asset.path == root or asset.path.startswith(prefix)


def _searchable_text(asset: CatalogAsset) -> str:
    parts = [asset.name]
    for raw in asset.properties.values():
        parts.extend(_values(raw))
    return " ".join(parts).casefold()


def fulltext_score(predicate: Predicate, asset: CatalogAsset) -> float:
    """Count term occurrences; zero when any term is missing."""
    terms = predicate.value.casefold().split()
    text = _searchable_text(asset)
    counts = [text.count(term) for term in terms]
    if not counts or not all(counts):
        return 0.0
    return float(sum(counts))


def _like(pattern: str) -> re.Pattern[str]:
    regex = "".join(
        ".*" if char == "%" else "." if char == "_" else re.escape(char) for char in pattern
    )
    return re.compile(f"^{regex}$", re.IGNORECASE | re.DOTALL)


def _eval_property(predicate: Predicate, asset: CatalogAsset) -> bool:
    name = _property_name(predicate.value)
    present = name in asset.properties
    actual = _values(asset.properties.get(name))
    operation = (predicate.get("operation") or "equals").strip().lower()

    expected = [
        value
        for key, value in sorted(
            ((key, value) for key, value in predicate.params.items() if _VALUE_RE.match(key)),
            key=lambda pair: int(_VALUE_RE.match(pair[0]).group(1) or 0),
        )
    ]

    if operation == "exists":
        wanted = predicate.get("value", "true")
        return present if _is_true(wanted) else not present
    if operation == "not":
        return not present
    if not expected:
        return present

    if operation == "equals":
        checks = [value in actual for value in expected]
    elif operation == "unequals":
        checks = [value not in actual for value in expected]
    elif operation == "like":
        checks = [any(_like(value).match(item) for item in actual) for value in expected]
    else:
        raise SearchBackendError(f"Unsupported property operation: {operation}")
    return all(checks) if _is_true(predicate.get("and")) else any(checks)


def _parse_dt(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = dt_parser.parse(str(value))
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _eval_daterange(predicate: Predicate, asset: CatalogAsset) -> bool:
    name = _property_name(predicate.get("property") or "")
    if not name:
        raise SearchBackendError("daterange predicate needs a property")
    actual = _parse_dt(asset.properties.get(name))
    if actual is None:
        return False

    lower_raw = predicate.get("lowerBound")
    upper_raw = predicate.get("upperBound")
    lower = _parse_dt(lower_raw)
    upper = _parse_dt(upper_raw)
    if (lower_raw and lower is None) or (upper_raw and upper is None):
        raise SearchBackendError(f"Invalid daterange bounds: {lower_raw!r}, {upper_raw!r}")

    if lower is not None:
        if predicate.get("lowerOperation", ">=") == ">":
            if not actual > lower:
                return False
        elif not actual >= lower:
            return False
    if upper is not None:
        if predicate.get("upperOperation", "<=") == "<":
            if not actual < upper:
                return False
        elif not actual <= upper:
            return False
    return True


_EVALUATORS: dict[str, Callable[[Predicate, CatalogAsset], bool]] = {
    "type": _eval_type,
    "path": _eval_path,
    "fulltext": lambda predicate, asset: fulltext_score(predicate, asset) > 0,
    "property": _eval_property,
    "daterange": _eval_daterange,
}


def matches(item: Predicate | PredicateGroup, asset: CatalogAsset) -> bool:
    """Return True when ``asset`` satisfies ``item``.

    Raises:
        SearchBackendError: If a predicate type has no evaluator.
    """
    if isinstance(item, PredicateGroup):
        filters = [child for child in item.items if not is_directive(child)]
        if not filters:
            return True
        check = all if item.all_required else any
        return check(matches(child, asset) for child in filters)

    evaluator = _EVALUATORS.get(item.type)
    if evaluator is None:
        raise SearchBackendError(f"No evaluator for predicate type: {item.type}")
    return evaluator(item, asset)


def relevance(query: PredicateGroup, asset: CatalogAsset) -> float:
    """Sum of fulltext scores over every fulltext predicate of the query."""
    return sum(fulltext_score(p, asset) for p in query.walk() if p.type == "fulltext")


def describe(item: Predicate | PredicateGroup) -> str:
    """Readable boolean rendering of the filtering part of a query."""
    if isinstance(item, PredicateGroup):
        filters = [child for child in item.items if not is_directive(child)]
        if not filters:
            return "*"
        joiner = " AND " if item.all_required else " OR "
        return "(" + joiner.join(describe(child) for child in filters) + ")"
    extras = "".join(f", {key}={value}" for key, value in item.params.items())
    return f"{item.type}[{item.value}{extras}]"


def describe_ordering(orderings: Iterable[Predicate]) -> str:
    parts = [f"{p.value} {(p.get('sort') or 'asc').lower()}" for p in orderings if p.value]
    return f" ORDER BY {', '.join(parts)}" if parts else ""
