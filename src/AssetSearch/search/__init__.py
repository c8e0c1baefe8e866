"""Search layer for AssetSearch.

Assembles sandboxed queries from request parameters and page configuration,
gates them for safety and maps backend hits to results. Also provides the
factory wiring the bundled catalog backend.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from AssetSearch.search.errors import SearchBackendError, SearchError, UnsafeSearchError
from AssetSearch.search.filters import FilterRegistry, default_registry
from AssetSearch.search.provider import QuerySearchProvider, SearchRequest

if TYPE_CHECKING:
    from AssetSearch.backends.catalog.backend import CatalogResolver
    from AssetSearch.config import AppConfig


def create_search_provider(
    config: AppConfig,
    registry: FilterRegistry | None = None,
) -> tuple[QuerySearchProvider, CatalogResolver]:
    """Create a search provider over the configured asset catalog.

    Args:
        config: Application configuration.
        registry: Named filter registry; the built-in filters when omitted.

    Returns:
        The provider and a resolver for requests against the same catalog.
    """
    from AssetSearch.backends.catalog.backend import CatalogResolver, CatalogSearchBackend
    from AssetSearch.backends.catalog.loader import load_catalog

    assets = load_catalog(Path(config.catalog.path))
    provider = QuerySearchProvider(
        backend=CatalogSearchBackend(assets=assets),
        pages=config.pages,
        registry=registry if registry is not None else default_registry(),
    )
    return provider, CatalogResolver(assets)


__all__ = [
    "FilterRegistry",
    "QuerySearchProvider",
    "SearchBackendError",
    "SearchError",
    "SearchRequest",
    "UnsafeSearchError",
    "create_search_provider",
    "default_registry",
]
