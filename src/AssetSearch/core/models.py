from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Protocol, Sequence


class ResourceSession(Protocol):
    """Closeable handle a search backend opens while producing hits."""

    def close(self) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Hit:
    """One raw match returned by a search backend.

    Attributes:
        path: Repository path of the matching resource.
        score: Backend relevance score.
    """

    path: str
    score: float = 0.0


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Raw backend output for one executed query.

    All hits of one query share ``session``; whoever maps the hits owns it and
    must close it exactly once.

    Attributes:
        hits: Matches for the requested result window, in backend order.
        total_matches: Total matches, exact or estimated per ``p.guessTotal``.
        start_index: Offset of the first hit in the full match list.
        execution_time_ms: Backend execution time.
        query_statement: Human-readable description of the executed query.
        has_more: Whether matches exist beyond this window.
        result_pages: Number of pages of ``len(hits)`` size known to exist.
        session: Secondary resource session opened by the backend, if any.
    """

    hits: Sequence[Hit]
    total_matches: int
    start_index: int = 0
    execution_time_ms: int = 0
    query_statement: str = ""
    has_more: bool = False
    result_pages: int = 0
    session: Optional[ResourceSession] = None


@dataclass(frozen=True, slots=True)
class AssetResult:
    """Typed search result for one asset.

    Attributes:
        path: Repository path of the asset.
        title: Display title; falls back to the asset node name.
        properties: Read-only asset properties as resolved.
    """

    path: str
    title: str
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def name(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    @classmethod
    def from_resource(cls, path: str, resource: Mapping[str, Any]) -> AssetResult:
        """Build a result from a resolved resource.

        Raises:
            ValueError: If the resource carries no usable path.
        """
        resource_path = str(resource.get("path") or path).strip()
        if not resource_path.startswith("/"):
            raise ValueError(f"Resource has no absolute path: {resource_path!r}")
        properties = resource.get("properties") or {}
        if not isinstance(properties, Mapping):
            raise ValueError(f"Resource properties must be a mapping: {resource_path}")
        title = properties.get("dc:title") or properties.get("jcr:title") or resource_path.rsplit("/", 1)[-1]
        return cls(path=resource_path, title=str(title), properties=properties)


@dataclass(frozen=True, slots=True)
class SearchResults:
    """Results envelope returned to the caller.

    Attributes:
        results: Mapped results in backend order.
        size: Number of hits the backend returned for this window.
        total: Backend total-matches figure, copied verbatim.
        offset: Start index of this window.
        has_more: Whether the backend reported further matches.
        result_pages: Page count reported by the backend.
        execution_time_ms: Backend execution time.
        query_statement: Executed query description.
    """

    results: Sequence[AssetResult]
    size: int
    total: int
    offset: int = 0
    has_more: bool = False
    result_pages: int = 0
    execution_time_ms: int = 0
    query_statement: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", tuple(self.results))
