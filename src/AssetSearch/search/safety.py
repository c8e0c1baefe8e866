"""Reject queries that would force a full index traversal."""

from __future__ import annotations

from AssetSearch.core.predicates import Predicate, PredicateGroup
from AssetSearch.search.errors import UnsafeSearchError
from AssetSearch.search.paths import PATH

# Predicate types that never narrow the candidate set on their own.
NON_SELECTIVE_TYPES = frozenset({"type", "orderby"})


def is_directive(item: Predicate | PredicateGroup) -> bool:
    """Return True for query parameters and orderings, which filter nothing."""
    return isinstance(item, Predicate) and (item.is_parameter or item.type == "orderby")


def is_selective(item: Predicate | PredicateGroup) -> bool:
    """Return True when ``item`` restricts the candidate set by itself.

    A predicate is selective when it is not a query parameter, ordering or
    type constraint and carries a value or a sub-parameter (``daterange``
    has only the latter); a path of ``/`` selects everything.
    An AND group needs one selective child, an OR group needs every child to
    be selective since any unselective branch matches the whole index.
    """
    if isinstance(item, PredicateGroup):
        filters = [child for child in item.items if not is_directive(child)]
        if not filters:
            return False
        if item.all_required:
            return any(is_selective(child) for child in filters)
        return all(is_selective(child) for child in filters)

    if is_directive(item) or item.type in NON_SELECTIVE_TYPES:
        return False
    value = item.value.strip()
    if item.type == PATH:
        return bool(value) and value.rstrip("/") != ""
    return bool(value) or any(param.strip() for param in item.params.values())


class SearchSafety:
    """Gate run on the fully merged query, after every default is applied."""

    def is_safe(self, query: PredicateGroup) -> bool:
        return is_selective(query)

    def check(self, query: PredicateGroup) -> None:
        """Raise when ``query`` has no selective constraint.

        Raises:
            UnsafeSearchError: If the query would traverse the whole index.
        """
        if not self.is_safe(query):
            raise UnsafeSearchError("Search query will initiate a traversing query")
