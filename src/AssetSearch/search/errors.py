"""Exceptions raised by the search pipeline."""

from __future__ import annotations


class SearchError(Exception):
    """Base class for search failures surfaced to the caller."""


class UnsafeSearchError(SearchError):
    """The assembled query has no selective constraint and would traverse the index."""


class SearchBackendError(SearchError):
    """The search backend failed to execute the query."""
