"""Map raw backend hits to typed results."""

from __future__ import annotations

from contextlib import ExitStack
from typing import Any, Callable, Mapping, Optional, Protocol

from AssetSearch.core.models import AssetResult, SearchResult, SearchResults
from AssetSearch.utils.log import log

ResultFactory = Callable[[str, Mapping[str, Any]], Optional[AssetResult]]


class ResourceResolver(Protocol):
    """Request-scoped resource resolution context."""

    def get_resource(self, path: str) -> Mapping[str, Any] | None:
        """Return the resource at ``path``, or None when it does not exist."""
        raise NotImplementedError


def map_results(
    search_result: SearchResult,
    resolver: ResourceResolver,
    factory: ResultFactory = AssetResult.from_resource,
) -> SearchResults:
    """Resolve every hit and wrap the outcome in a results envelope.

    Hits that cannot be resolved or adapted are logged and skipped. The
    backend session shared by all hits is closed exactly once when mapping
    ends, whether it completes or not.

    Args:
        search_result: Raw backend output.
        resolver: Resolver of the request that issued the query.
        factory: Builds a result from a path and its resource; returning
            None skips the hit.

    Returns:
        Results in backend order with the backend metadata copied verbatim.
    """
    results: list[AssetResult] = []
    with ExitStack() as stack:
        if search_result.session is not None:
            stack.callback(search_result.session.close)

        for hit in search_result.hits:
            try:
                resource = resolver.get_resource(hit.path)
                if resource is None:
                    log.warning("Search hit no longer resolves, skipping: %s", hit.path)
                    continue
                result = factory(hit.path, resource)
            except Exception as error:  # noqa: BLE001 - one bad hit must not fail the response
                log.error("Could not retrieve search result %s: %s", hit.path, error)
                continue
            if result is not None:
                results.append(result)

    log.debug("Adapted [ %d ] results to Result models", len(results))
    return SearchResults(
        results=results,
        size=len(search_result.hits),
        total=search_result.total_matches,
        offset=search_result.start_index,
        has_more=search_result.has_more,
        result_pages=search_result.result_pages,
        execution_time_ms=search_result.execution_time_ms,
        query_statement=search_result.query_statement,
    )
