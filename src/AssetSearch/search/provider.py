"""Query-based search provider: assemble, gate, execute, map, post-process."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from AssetSearch.config.page import PageConfigStore
from AssetSearch.core.models import AssetResult, SearchResult, SearchResults
from AssetSearch.core.predicates import PredicateGroup, create_predicates, to_params
from AssetSearch.search.builder import build_query
from AssetSearch.search.errors import SearchBackendError
from AssetSearch.search.filters import FilterRegistry
from AssetSearch.search.mapper import ResourceResolver, ResultFactory, map_results
from AssetSearch.search.safety import SearchSafety
from AssetSearch.utils.log import log


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """One incoming search request.

    Attributes:
        page: Identifier of the search page whose configuration applies.
        params: Raw, untrusted request parameters.
        resolver: Resource resolver bound to the requesting user.
    """

    page: str
    params: Mapping[str, Any] = field(default_factory=dict)
    resolver: ResourceResolver | None = None


class SearchBackend(Protocol):
    """Protocol for the search index the provider queries.

    All hits of one `SearchResult` must share the single ``session`` attached
    to it; the provider closes that session once after mapping.
    """

    def execute(self, query: PredicateGroup, session: Any = None) -> SearchResult:
        raise NotImplementedError


class QuerySearchPreProcessor(Protocol):
    def process(self, request: SearchRequest, params: dict[str, str]) -> PredicateGroup:
        """Turn the assembled parameter map into the query to run."""
        raise NotImplementedError


class QueryParameterPostProcessor(Protocol):
    def process(self, request: SearchRequest, params: dict[str, str]) -> dict[str, str]:
        """Rewrite the assembled parameter map."""
        raise NotImplementedError


class QuerySearchPostProcessor(Protocol):
    def process(
        self,
        request: SearchRequest,
        query: PredicateGroup,
        results: SearchResults,
        search_result: SearchResult,
    ) -> SearchResults:
        """Transform the results envelope before it is returned."""
        raise NotImplementedError


@dataclass(slots=True)
class QuerySearchProvider:
    """Default search provider backed by a predicate query.

    Hooks are optional single-instance slots; an empty slot is a pass-through.
    """

    backend: SearchBackend
    pages: PageConfigStore
    registry: FilterRegistry | None = None
    safety: SearchSafety = field(default_factory=SearchSafety)
    pre_processor: QuerySearchPreProcessor | None = None
    post_processor: QuerySearchPostProcessor | None = None
    parameter_post_processor: QueryParameterPostProcessor | None = None
    result_factory: ResultFactory = AssetResult.from_resource

    def accepts(self, request: SearchRequest) -> bool:
        """Accept every request; this is the lowest-ranked, default provider."""
        del request
        return True

    def get_params(self, request: SearchRequest) -> dict[str, str]:
        """Assemble the flat query parameters for ``request``."""
        config = self.pages.resolve(request.page)
        query = build_query(request.params, config, self.registry, request=request)
        params = to_params(query)
        if self.parameter_post_processor is not None:
            params = self.parameter_post_processor.process(request, dict(params))
        return params

    def get_results(self, request: SearchRequest) -> SearchResults:
        """Run the search for ``request``.

        Raises:
            UnsafeSearchError: If the assembled query has no selective
                constraint; the backend is not contacted.
            SearchBackendError: If the backend fails to execute the query.
            ValueError: If the request carries no resource resolver.
        """
        if request.resolver is None:
            raise ValueError("Search request has no resource resolver")

        params = self.get_params(request)
        if self.pre_processor is not None:
            query = self.pre_processor.process(request, params)
        else:
            query = create_predicates(params)

        self.safety.check(query)
        _debug_pre_query(query)

        try:
            search_result = self.backend.execute(query, session=request.resolver)
        except SearchBackendError:
            raise
        except Exception as error:  # noqa: BLE001 - normalize backend failures
            raise SearchBackendError(f"Search backend failed: {error}") from error

        _debug_post_query(search_result)

        results = map_results(search_result, request.resolver, self.result_factory)
        if self.post_processor is not None:
            return self.post_processor.process(request, query, results, search_result)
        return results


def format_params(query: PredicateGroup) -> str:
    """Render a query as sorted ``key = value`` lines."""
    return "".join(f"\n{key} = {value}" for key, value in sorted(to_params(query).items()))


def _debug_pre_query(query: PredicateGroup) -> None:
    if log.isEnabledFor(logging.DEBUG):
        log.debug("Query Builder Parameters: %s", format_params(query))


def _debug_post_query(search_result: SearchResult) -> None:
    if not log.isEnabledFor(logging.DEBUG):
        return
    log.debug("Executed query statement:\n%s", search_result.query_statement)
    log.debug("Search results - Hits size [ %d ]", len(search_result.hits))
    log.debug("Search results - Page count [ %d ]", search_result.result_pages)
    log.debug("Search results - Page start index [ %d ]", search_result.start_index)
    log.debug("Search results - Running total [ %d ]", search_result.start_index + len(search_result.hits))
    log.debug("Search results - Has more results [ %s ]", search_result.has_more)
    log.debug("Search results - Total matches [ %d ]", search_result.total_matches)
    log.debug("Search results - Execution time in ms [ %d ]", search_result.execution_time_ms)
