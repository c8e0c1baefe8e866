"""Merge request parameters with page configuration into one query.

The request is parsed first. Server-side categories are then merged in:

- type, paths, hidden filters and named filters are always appended; the
  request cannot drop them, it can only replace the paths with valid ones;
- ``p.limit`` and ``p.guessTotal`` take the request value when present, run
  through the same clamping as the page configuration;
- ``orderby``/``orderby.sort`` keep whatever the request supplied and fill
  in the rest from the page configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from AssetSearch.config.page import ASSET_TYPE, PageConfig, resolve_guess_total, resolve_limit
from AssetSearch.core.predicates import Predicate, PredicateGroup, create_predicates, to_params
from AssetSearch.search.filters import FilterRegistry
from AssetSearch.search.paths import PATH, lift_paths, sandbox_request_paths
from AssetSearch.search.safety import is_directive
from AssetSearch.utils.log import log

if TYPE_CHECKING:
    from AssetSearch.search.provider import SearchRequest

TYPE = "type"
ORDER_BY = "orderby"
SORT = "sort"
LIMIT = "p.limit"
GUESS_TOTAL = "p.guessTotal"

IGNORED_PARAMS = ("mode", "layout", "wcmmode", "forceeditcontext")


class ParamType(Enum):
    """Categories of server-side predicates a caller can exclude."""

    NODE_TYPE = "type"
    PATH = "path"
    HIDDEN_PREDICATES = "hidden"
    SEARCH_PREDICATES = "search"
    LIMIT = "limit"
    GUESS_TOTAL = "guessTotal"
    ORDER = "order"


def clean_params(params: Mapping[str, Any]) -> dict[str, str]:
    """Flatten raw request parameters and drop UI/transport markers.

    Multi-valued parameters keep their first value.
    """
    cleaned: dict[str, str] = {}
    for key, value in params.items():
        if key in IGNORED_PARAMS:
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = value[0]
        cleaned[str(key)] = "" if value is None else str(value)
    return cleaned


@dataclass(frozen=True, slots=True)
class PagePredicate:
    """Server-side predicates of one search page.

    Attributes:
        config: Resolved page configuration.
        registry: Named filter registry; named filters are skipped without one.
        request: Current request, handed to named filters.
        params: Cleaned request parameters for the request-aware accessors.
    """

    config: PageConfig
    registry: FilterRegistry | None = None
    request: SearchRequest | None = None
    params: Mapping[str, str] = field(default_factory=dict)

    def get_limit(self) -> int:
        return resolve_limit(self.params.get(LIMIT), self.config.limit)

    def get_guess_total(self) -> str:
        value = self.params.get(GUESS_TOTAL)
        if value is None:
            return self.config.guess_total
        return resolve_guess_total(value)

    def get_order_by(self) -> str:
        return (self.params.get(ORDER_BY) or "").strip() or self.config.order_by

    def get_order_by_sort(self) -> str:
        return (self.params.get(f"{ORDER_BY}.{SORT}") or "").strip() or self.config.order_by_sort

    def get_paths(self) -> tuple[str, ...]:
        return self.config.paths

    def get_predicate_group(self, *exclude: ParamType) -> PredicateGroup:
        """Build the server-side predicate group, minus excluded categories."""
        root = PredicateGroup()

        if ParamType.NODE_TYPE not in exclude:
            root = root.add(Predicate(TYPE, ASSET_TYPE))

        if ParamType.PATH not in exclude:
            paths = tuple(Predicate(f"{idx}_{PATH}", path) for idx, path in enumerate(self.get_paths()))
            root = root.add(PredicateGroup(name=root.next_group_name(), all_required=False, items=paths))

        if ParamType.HIDDEN_PREDICATES not in exclude:
            for hidden in self.config.hidden_predicates:
                root = root.add(replace(hidden, name=root.next_group_name()))

        if ParamType.SEARCH_PREDICATES not in exclude and self.registry is not None:
            for search_predicate in self.registry.resolve(self.config.search_predicates):
                group = search_predicate.get_predicate_group(self.request)
                root = root.add(replace(group, name=root.next_group_name()))

        if ParamType.LIMIT not in exclude:
            root = root.add(Predicate(LIMIT, str(self.get_limit())))

        if ParamType.GUESS_TOTAL not in exclude:
            root = root.add(Predicate(GUESS_TOTAL, self.get_guess_total()))

        return root

    def get_params(self, *exclude: ParamType) -> dict[str, str]:
        """Return `get_predicate_group` flattened into a parameter map."""
        return to_params(self.get_predicate_group(*exclude))


def build_query(
    params: Mapping[str, Any],
    config: PageConfig,
    registry: FilterRegistry | None = None,
    *,
    request: SearchRequest | None = None,
    exclude: Iterable[ParamType] = (),
) -> PredicateGroup:
    """Merge raw request parameters and page configuration into one query.

    Args:
        params: Raw, untrusted request parameters.
        config: Resolved page configuration.
        registry: Registry used to resolve the page's named filters.
        request: Current request, handed to named filters.
        exclude: Server-side categories to leave out.

    Returns:
        The merged query; equal inputs give structurally equal queries.
    """
    cleaned = clean_params(params)
    decision = sandbox_request_paths(create_predicates(cleaned), config.paths)

    excluded = set(exclude)
    if decision.provided:
        log.debug("Request paths replace page paths: %s", list(decision.accepted))
        excluded.add(ParamType.PATH)

    root = decision.group
    lifted = None
    if decision.provided and not decision.mandatory:
        # An accepted path under an OR branch would not bound the query.
        root, lifted = lift_paths(root)
    if not root.all_required:
        root = _isolate_request_or(root)
    if lifted is not None:
        root = root.add(replace(lifted, name=root.next_group_name()))
    if ParamType.LIMIT not in excluded:
        root = root.without(LIMIT)
    if ParamType.GUESS_TOTAL not in excluded:
        root = root.without(GUESS_TOTAL)

    page = PagePredicate(config=config, registry=registry, request=request, params=cleaned)
    root = _merge(root, page.get_predicate_group(*excluded))

    if ParamType.ORDER not in excluded:
        root = _with_ordering(root, page)
    return root


def _isolate_request_or(group: PredicateGroup) -> PredicateGroup:
    """Move the filters of an OR request root into their own OR group.

    The merged root is always an AND group so server-side predicates stay
    mandatory whatever ``p.or`` the request sends.
    """
    directives = tuple(item for item in group.items if is_directive(item))
    filters = tuple(item for item in group.items if not is_directive(item))
    if not filters:
        return PredicateGroup(name=group.name, items=directives)
    nested = PredicateGroup(name=group.next_group_name(), all_required=False, items=filters)
    return PredicateGroup(name=group.name, items=(nested,) + directives)


def _merge(root: PredicateGroup, server: PredicateGroup) -> PredicateGroup:
    """Append server-side children under names that do not clash with the request's."""
    for item in server.items:
        if isinstance(item, PredicateGroup):
            root = root.add(replace(item, name=root.next_group_name()))
        else:
            root = root.add(replace(item, name=root.unique_name(item.name)))
    return root


def _with_ordering(root: PredicateGroup, page: PagePredicate) -> PredicateGroup:
    orderings = [
        item for item in root.items if isinstance(item, Predicate) and item.type == ORDER_BY
    ]
    current = root.get_by_name(ORDER_BY)
    if isinstance(current, Predicate):
        params = dict(current.params)
        params[SORT] = page.get_order_by_sort()
        return root.replace_item(ORDER_BY, Predicate(ORDER_BY, page.get_order_by(), params))
    if orderings:
        # Ordinal orderings (1_orderby, ...) are a complete request-side sort.
        return root
    return root.add(Predicate(ORDER_BY, page.get_order_by(), {SORT: page.get_order_by_sort()}))


__all__ = [
    "IGNORED_PARAMS",
    "PagePredicate",
    "ParamType",
    "build_query",
    "clean_params",
]
