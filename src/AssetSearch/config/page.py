"""Page configuration: server-authored search defaults for one search page.

Every field is read on its own: a malformed ``limit`` falls back to its
default without affecting ``orderBy`` and so on. Nothing here raises on bad
author input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from AssetSearch.config.common import coerce_int, coerce_str, coerce_str_list
from AssetSearch.core.paths import canonical_path, is_under
from AssetSearch.core.predicates import PredicateGroup, create_predicates
from AssetSearch.utils.log import log

MAX_LIMIT = 1000
DEFAULT_LIMIT = 50
MAX_GUESS_TOTAL = 2000
DEFAULT_GUESS_TOTAL = "250"
CONTINUOUS_GUESS_TOTAL = "true"
DEFAULT_ORDER_BY = "@jcr:score"
DEFAULT_ORDER_BY_SORT = "desc"
ASSETS_ROOT = "/content/dam"
DEFAULT_PATHS: tuple[str, ...] = (ASSETS_ROOT,)
ASSET_TYPE = "dam:Asset"

PN_PATHS = "paths"
PN_LIMIT = "limit"
PN_GUESS_TOTAL = "guessTotal"
PN_ORDER_BY = "orderBy"
PN_ORDER_BY_SORT = "orderBySort"
PN_SEARCH_PREDICATES = "searchPredicates"
PN_HIDDEN_PREDICATES = "hiddenPredicates"


@dataclass(frozen=True, slots=True)
class PageConfig:
    """Resolved, read-only search settings of one page.

    Attributes:
        paths: Allowed search roots, all under ``ASSETS_ROOT``; never empty.
        limit: Default result window size in ``[1, MAX_LIMIT]``.
        guess_total: ``"true"`` or a count in ``[1, MAX_GUESS_TOTAL]`` as string.
        order_by: Default ordering property.
        order_by_sort: Default ordering direction.
        search_predicates: Names of registered filters applied to every query.
        hidden_predicates: Always-on filter groups authored on the page.
    """

    paths: tuple[str, ...] = DEFAULT_PATHS
    limit: int = DEFAULT_LIMIT
    guess_total: str = DEFAULT_GUESS_TOTAL
    order_by: str = DEFAULT_ORDER_BY
    order_by_sort: str = DEFAULT_ORDER_BY_SORT
    search_predicates: tuple[str, ...] = ()
    hidden_predicates: tuple[PredicateGroup, ...] = field(default=())


def resolve_limit(value: Any, fallback: int = DEFAULT_LIMIT) -> int:
    """Resolve a result limit.

    Args:
        value: Raw limit; may be missing, non-numeric or out of range.
        fallback: Used when ``value`` is not an integer at all.

    Returns:
        ``fallback`` for non-numeric input, ``DEFAULT_LIMIT`` below 1,
        ``MAX_LIMIT`` above it, the value itself otherwise.
    """
    limit = coerce_int(value)
    if limit is None:
        limit = fallback
    if limit > MAX_LIMIT:
        return MAX_LIMIT
    if limit < 1:
        return DEFAULT_LIMIT
    return limit


def resolve_guess_total(value: Any) -> str:
    """Resolve a total-count estimation mode.

    Returns:
        ``"true"`` (continuous estimate) as given, an integer string in
        ``[1, MAX_GUESS_TOTAL]``, or ``DEFAULT_GUESS_TOTAL`` for anything else.
    """
    if isinstance(value, str) and value.strip().lower() == CONTINUOUS_GUESS_TOTAL:
        return value.strip()
    if value is True:
        return CONTINUOUS_GUESS_TOTAL
    guess_total = coerce_int(value)
    if guess_total is None or guess_total < 1 or guess_total > MAX_GUESS_TOTAL:
        return DEFAULT_GUESS_TOTAL
    return str(guess_total)


def resolve_paths(value: Any) -> tuple[str, ...]:
    """Keep configured roots under ``ASSETS_ROOT``; fall back to ``DEFAULT_PATHS``."""
    candidates = coerce_str_list(value)
    if candidates is None:
        return DEFAULT_PATHS
    paths: list[str] = []
    for candidate in candidates:
        path = canonical_path(candidate)
        if path is not None and is_under(path, DEFAULT_PATHS) and path not in paths:
            paths.append(path)
    if not paths:
        if candidates:
            log.warning("Configured search paths escape %s, using defaults: %s", ASSETS_ROOT, candidates)
        return DEFAULT_PATHS
    return tuple(paths)


def _resolve_hidden_predicates(value: Any) -> tuple[PredicateGroup, ...]:
    if value is None:
        return ()
    if isinstance(value, Mapping):
        value = [value]
    if not isinstance(value, list):
        log.warning("Ignoring %s: expected a list of parameter maps", PN_HIDDEN_PREDICATES)
        return ()
    groups: list[PredicateGroup] = []
    for idx, item in enumerate(value):
        if not isinstance(item, Mapping) or not item:
            log.warning("Ignoring %s[%d]: expected a parameter map", PN_HIDDEN_PREDICATES, idx)
            continue
        groups.append(create_predicates({str(k): str(v) for k, v in item.items()}, name="group"))
    return tuple(groups)


def resolve_page_config(properties: Mapping[str, Any] | None) -> PageConfig:
    """Resolve raw page properties into a `PageConfig`.

    Args:
        properties: Raw properties from the configuration store; may be None.

    Returns:
        Page configuration with every missing or malformed field defaulted.
    """
    props: Mapping[str, Any] = properties if isinstance(properties, Mapping) else {}
    return PageConfig(
        paths=resolve_paths(props.get(PN_PATHS)),
        limit=resolve_limit(props.get(PN_LIMIT), DEFAULT_LIMIT),
        guess_total=resolve_guess_total(props.get(PN_GUESS_TOTAL, DEFAULT_GUESS_TOTAL)),
        order_by=coerce_str(props.get(PN_ORDER_BY)) or DEFAULT_ORDER_BY,
        order_by_sort=coerce_str(props.get(PN_ORDER_BY_SORT)) or DEFAULT_ORDER_BY_SORT,
        search_predicates=tuple(coerce_str_list(props.get(PN_SEARCH_PREDICATES)) or ()),
        hidden_predicates=_resolve_hidden_predicates(props.get(PN_HIDDEN_PREDICATES)),
    )


class PageConfigStore:
    """Read-only store of raw page properties keyed by page identifier."""

    def __init__(self, pages: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._pages = {str(page).rstrip("/") or "/": dict(props) for page, props in (pages or {}).items()}

    def get_properties(self, page: str) -> Mapping[str, Any]:
        """Return raw properties of ``page``; unknown pages have none."""
        return self._pages.get(page.rstrip("/") or "/", {})

    def resolve(self, page: str) -> PageConfig:
        """Resolve the page configuration for one request."""
        if (page.rstrip("/") or "/") not in self._pages:
            log.debug("No search configuration for page %s, using defaults", page)
        return resolve_page_config(self.get_properties(page))
