"""Command runner for coordinating CLI execution.

Manages logging configuration, component creation and error handling for
command execution.
"""

from __future__ import annotations

from typing import Mapping

import click

from AssetSearch.config import AppConfig
from AssetSearch.core.predicates import to_params
from AssetSearch.renderers import render
from AssetSearch.search import (
    SearchRequest,
    UnsafeSearchError,
    create_search_provider,
    default_registry,
)
from AssetSearch.search.builder import build_query
from AssetSearch.utils.log import configure_logging, log

UNSAFE_SEARCH_EXIT_CODE = 3


class UnsafeSearchAbort(click.ClickException):
    """Search rejected as too broad; distinct from a failing backend."""

    exit_code = UNSAFE_SEARCH_EXIT_CODE


class CommandRunner:
    """Orchestrates command execution with logging and error handling."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def _configure_logging(self, action: str) -> None:
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )

    def run_search(
        self,
        action: str,
        *,
        page: str,
        params: Mapping[str, str],
        output_format: str,
    ) -> str:
        """Execute one search and render its results.

        Args:
            action: The CLI command name (e.g., 'search').
            page: Search page whose configuration applies.
            params: Raw request parameters.
            output_format: Renderer name.

        Returns:
            Rendered results.

        Raises:
            UnsafeSearchAbort: When the query is rejected as too broad.
            click.Abort: When the search fails.
        """
        self._configure_logging(action)
        try:
            provider, resolver = create_search_provider(self.config)
            request = SearchRequest(page=page, params=dict(params), resolver=resolver)
            results = provider.get_results(request)
        except UnsafeSearchError as e:
            log.warning("Search rejected: %s", e)
            raise UnsafeSearchAbort(f"Search rejected as too broad: {e}") from e
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Search failed: %s", e)
            raise click.Abort from e

        log.info("Fetched %d results of %d total", len(results.results), results.total)
        return render(results, output_format)

    def run_params(self, action: str, *, page: str, params: Mapping[str, str]) -> dict[str, str]:
        """Assemble the query for a request without executing it."""
        self._configure_logging(action)
        query = build_query(params, self.config.pages.resolve(page), default_registry())
        return to_params(query)
