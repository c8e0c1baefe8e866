"""Named, reusable filter fragments pages can reference by name."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Iterable, Protocol

from AssetSearch.core.predicates import PredicateGroup, create_predicates
from AssetSearch.utils.log import log

if TYPE_CHECKING:
    from AssetSearch.search.provider import SearchRequest

EXPIRATION_DATE = "prism:expirationDate"
STATUS = "dam:status"


class SearchPredicate(Protocol):
    """Protocol for a named filter fragment contributed by a plug-in."""

    name: str
    title: str

    def get_predicate_group(self, request: SearchRequest | None) -> PredicateGroup:
        """Return the predicates this filter adds to every query."""
        raise NotImplementedError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class NotExpiredSearchPredicate:
    """Exclude assets whose expiration date lies in the past.

    The bound is truncated to the minute so queries built within the same
    minute are equal.
    """

    name: str = "not-expired"
    title: str = "Exclude expired assets"
    now: Callable[[], datetime] = field(default=_utcnow)

    def get_predicate_group(self, request: SearchRequest | None) -> PredicateGroup:
        del request
        return create_predicates(
            {
                "p.or": "true",
                "1_property": EXPIRATION_DATE,
                "1_property.operation": "not",
                "1_daterange.property": EXPIRATION_DATE,
                "1_daterange.lowerBound": self.now().replace(second=0, microsecond=0).isoformat(),
            },
            name="group",
        )


@dataclass(slots=True)
class ApprovedSearchPredicate:
    """Restrict results to approved assets."""

    name: str = "approved"
    title: str = "Approved assets only"

    def get_predicate_group(self, request: SearchRequest | None) -> PredicateGroup:
        del request
        return create_predicates({"property": STATUS, "property.value": "approved"}, name="group")


class FilterRegistry:
    """Registry resolving filter names to `SearchPredicate` plug-ins."""

    def __init__(self, predicates: Iterable[SearchPredicate] = ()) -> None:
        self._predicates: dict[str, SearchPredicate] = {}
        for predicate in predicates:
            self.register(predicate)

    def register(self, predicate: SearchPredicate) -> None:
        """Register a filter; a later registration with the same name wins."""
        if predicate.name in self._predicates:
            log.debug("Replacing registered search predicate: %s", predicate.name)
        self._predicates[predicate.name] = predicate

    def get(self, name: str) -> SearchPredicate | None:
        return self._predicates.get(name)

    def resolve(self, names: Iterable[str]) -> list[SearchPredicate]:
        """Resolve names in order, silently skipping unknown ones."""
        resolved: list[SearchPredicate] = []
        for name in names:
            predicate = self._predicates.get(name)
            if predicate is None:
                log.debug("Unknown search predicate ignored: %s", name)
                continue
            resolved.append(predicate)
        return resolved

    def names(self) -> tuple[str, ...]:
        return tuple(self._predicates)


def default_registry() -> FilterRegistry:
    """Return a registry holding the built-in filters."""
    return FilterRegistry([NotExpiredSearchPredicate(), ApprovedSearchPredicate()])
