"""In-memory search backend over a loaded asset catalog.

Composes predicate evaluation, ordering and result windowing into a
`SearchBackend` implementation. Each executed query opens one
`CatalogSession` shared by all of its hits.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from AssetSearch.backends.catalog.evaluate import describe, describe_ordering, matches, relevance
from AssetSearch.backends.catalog.loader import CatalogAsset
from AssetSearch.config.common import coerce_int
from AssetSearch.core.models import Hit, SearchResult
from AssetSearch.core.predicates import Predicate, PredicateGroup
from AssetSearch.utils.log import log

DEFAULT_QUERY_LIMIT = 10
SCORE = "@jcr:score"


@dataclass(slots=True)
class CatalogSession:
    """Resource session opened for one query."""

    closed: bool = False
    close_calls: int = 0

    def close(self) -> None:
        self.close_calls += 1
        if self.closed:
            log.warning("Catalog session closed more than once")
            return
        self.closed = True


class CatalogResolver:
    """Resolve asset paths to resources of the catalog."""

    def __init__(self, assets: Sequence[CatalogAsset]) -> None:
        self._assets = {asset.path: asset for asset in assets}

    def get_resource(self, path: str) -> Mapping[str, Any] | None:
        asset = self._assets.get(path)
        if asset is None:
            return None
        return {"path": asset.path, "type": asset.type, "properties": dict(asset.properties)}


@dataclass(frozen=True, slots=True)
class QueryOptions:
    """Result window options read from the ``p.*`` parameters of a query."""

    limit: int = DEFAULT_QUERY_LIMIT
    offset: int = 0
    guess_total: str | None = None

    @classmethod
    def from_query(cls, query: PredicateGroup) -> QueryOptions:
        def param(name: str) -> str | None:
            item = query.get_by_name(name)
            return item.value if isinstance(item, Predicate) else None

        limit = coerce_int(param("p.limit"))
        offset = coerce_int(param("p.offset"))
        guess_total = (param("p.guessTotal") or "").strip() or None
        return cls(
            limit=DEFAULT_QUERY_LIMIT if limit is None else limit,
            offset=max(offset or 0, 0),
            guess_total=guess_total,
        )

    def estimate_total(self, actual: int) -> int:
        """Apply ``p.guessTotal`` to the exact match count."""
        if self.guess_total is None:
            return actual
        window_end = self.offset + self.limit if self.limit >= 0 else actual
        if self.guess_total.lower() == "true":
            return min(actual, window_end)
        cap = coerce_int(self.guess_total)
        if cap is None:
            return actual
        return min(actual, max(cap, window_end))


@dataclass(slots=True)
class CatalogSearchBackend:
    """`SearchBackend` evaluating predicate queries over catalog assets."""

    assets: tuple[CatalogAsset, ...]

    def execute(self, query: PredicateGroup, session: Any = None) -> SearchResult:
        """Execute ``query`` and return one result window.

        Args:
            query: Merged predicate query.
            session: Caller's session handle; the catalog needs none.

        Returns:
            Hits for the requested window plus match metadata.

        Raises:
            SearchBackendError: If the query uses an unsupported predicate.
        """
        del session
        started = time.perf_counter()
        options = QueryOptions.from_query(query)
        orderings = [
            item for item in query.items if isinstance(item, Predicate) and item.type == "orderby"
        ]

        matched = [(asset, relevance(query, asset)) for asset in self.assets if matches(query, asset)]
        ordered = _sort(matched, orderings)

        if options.limit >= 0:
            window = ordered[options.offset : options.offset + options.limit]
        else:
            window = ordered[options.offset :]

        total = options.estimate_total(len(ordered))
        page_size = len(window) or options.limit
        result_pages = math.ceil(total / page_size) if page_size > 0 else 1
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        return SearchResult(
            hits=tuple(Hit(path=asset.path, score=score) for asset, score in window),
            total_matches=total,
            start_index=options.offset,
            execution_time_ms=elapsed_ms,
            query_statement=describe(query) + describe_ordering(orderings),
            has_more=options.offset + len(window) < len(ordered),
            result_pages=result_pages,
            session=CatalogSession(),
        )


def _sort(
    matched: list[tuple[CatalogAsset, float]],
    orderings: list[Predicate],
) -> list[tuple[CatalogAsset, float]]:
    """Stable multi-key sort, applying the last ordering first."""
    ordered = list(matched)
    for ordering in reversed(orderings):
        key = ordering.value.strip()
        if not key:
            continue
        descending = (ordering.get("sort") or "asc").strip().lower() == "desc"
        if key == SCORE:
            ordered.sort(key=lambda pair: pair[1], reverse=descending)
            continue
        present = [pair for pair in ordered if _sort_value(key, pair[0]) is not None]
        missing = [pair for pair in ordered if _sort_value(key, pair[0]) is None]
        present.sort(key=lambda pair: _sort_value(key, pair[0]), reverse=descending)
        ordered = present + missing
    return ordered


def _sort_value(key: str, asset: CatalogAsset) -> str | None:
    if key == "path":
        return asset.path
    if key == "nodename":
        return asset.name
    raw = asset.properties.get(key.lstrip("@").rsplit("/", 1)[-1])
    if raw is None:
        return None
    return str(raw).casefold()
