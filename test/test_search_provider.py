"""Tests for the query search provider flow."""

from __future__ import annotations

import sys
import unittest
from dataclasses import replace
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from AssetSearch.config.page import PageConfigStore
from AssetSearch.core.models import Hit, SearchResult
from AssetSearch.core.predicates import create_predicates
from AssetSearch.search.errors import SearchBackendError, UnsafeSearchError
from AssetSearch.search.provider import QuerySearchProvider, SearchRequest

PAGE = "/content/asset-share/search"


class _Session:
    def __init__(self) -> None:
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1


class _Backend:
    def __init__(self, paths=(), error: Exception | None = None) -> None:
        self.paths = tuple(paths)
        self.error = error
        self.calls = []
        self.sessions = []

    def execute(self, query, session=None):
        self.calls.append((query, session))
        if self.error is not None:
            raise self.error
        opened = _Session()
        self.sessions.append(opened)
        return SearchResult(
            hits=tuple(Hit(path=p) for p in self.paths),
            total_matches=len(self.paths),
            session=opened,
        )


class _Resolver:
    def get_resource(self, path: str):
        return {"path": path, "properties": {"dc:title": path.rsplit("/", 1)[-1].upper()}}


class _StripPaths:
    def process(self, request, params):
        return {k: v for k, v in params.items() if "path" not in k}


class _FixedQuery:
    def __init__(self) -> None:
        self.seen = []

    def process(self, request, params):
        self.seen.append(params)
        return create_predicates({"path": "/content/dam/fixed", "p.limit": "5"})


class _Retotal:
    def process(self, request, query, results, search_result):
        return replace(results, total=99)


def _provider(backend, **kwargs) -> QuerySearchProvider:
    pages = PageConfigStore({PAGE: {"paths": ["/content/dam/marketing"], "limit": 10}})
    return QuerySearchProvider(backend=backend, pages=pages, **kwargs)


def _request(params=None, resolver=None) -> SearchRequest:
    return SearchRequest(page=PAGE, params=params or {}, resolver=resolver or _Resolver())


class TestQuerySearchProvider(unittest.TestCase):
    def test_accepts_every_request(self) -> None:
        self.assertTrue(_provider(_Backend()).accepts(_request()))

    def test_get_params_clamps_and_merges(self) -> None:
        provider = _provider(_Backend())
        params = provider.get_params(_request({"p.limit": "5000", "fulltext": "beach"}))

        self.assertEqual(params["p.limit"], "1000")
        self.assertEqual(params["1_group.0_path"], "/content/dam/marketing")
        self.assertEqual(params["type"], "dam:Asset")

    def test_unknown_page_uses_defaults(self) -> None:
        provider = _provider(_Backend())
        params = provider.get_params(SearchRequest(page="/content/nowhere", resolver=_Resolver()))

        self.assertEqual(params["1_group.0_path"], "/content/dam")
        self.assertEqual(params["p.limit"], "50")

    def test_results_are_mapped_and_session_released(self) -> None:
        backend = _Backend(["/content/dam/marketing/a.png", "/content/dam/marketing/b.png"])
        resolver = _Resolver()
        results = _provider(backend).get_results(_request({"fulltext": "x"}, resolver))

        self.assertEqual([r.title for r in results.results], ["A.PNG", "B.PNG"])
        self.assertEqual(results.size, 2)
        self.assertEqual(len(backend.calls), 1)
        self.assertIs(backend.calls[0][1], resolver)
        self.assertEqual(backend.sessions[0].close_calls, 1)

    def test_unsafe_query_never_reaches_backend(self) -> None:
        backend = _Backend()
        provider = _provider(backend, parameter_post_processor=_StripPaths())

        with self.assertRaises(UnsafeSearchError):
            provider.get_results(_request())
        self.assertEqual(backend.calls, [])

    def test_pre_processor_builds_the_query(self) -> None:
        backend = _Backend()
        pre = _FixedQuery()
        _provider(backend, pre_processor=pre).get_results(_request())

        self.assertEqual(pre.seen[0]["p.limit"], "10")
        query = backend.calls[0][0]
        self.assertEqual(query.get_by_name("path").value, "/content/dam/fixed")

    def test_post_processor_transforms_results(self) -> None:
        results = _provider(_Backend(), post_processor=_Retotal()).get_results(_request())
        self.assertEqual(results.total, 99)

    def test_backend_failures_are_wrapped(self) -> None:
        cause = RuntimeError("index offline")
        with self.assertRaises(SearchBackendError) as ctx:
            _provider(_Backend(error=cause)).get_results(_request())
        self.assertIs(ctx.exception.__cause__, cause)

    def test_backend_search_errors_pass_through(self) -> None:
        error = SearchBackendError("bad predicate")
        with self.assertRaises(SearchBackendError) as ctx:
            _provider(_Backend(error=error)).get_results(_request())
        self.assertIs(ctx.exception, error)

    def test_request_without_resolver_is_rejected(self) -> None:
        backend = _Backend()
        with self.assertRaises(ValueError):
            _provider(backend).get_results(SearchRequest(page=PAGE))
        self.assertEqual(backend.calls, [])


if __name__ == "__main__":
    unittest.main()
