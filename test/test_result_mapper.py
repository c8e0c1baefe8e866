"""Tests for mapping backend hits to results."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from AssetSearch.core.models import AssetResult, Hit, SearchResult
from AssetSearch.search.mapper import map_results


class _Session:
    def __init__(self) -> None:
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1


class _Resolver:
    def __init__(self, resources) -> None:
        self.resources = resources

    def get_resource(self, path: str):
        resource = self.resources.get(path)
        if isinstance(resource, Exception):
            raise resource
        return resource


def _resource(path: str, title: str | None = None) -> dict:
    props = {"dc:title": title} if title else {}
    return {"path": path, "properties": props}


def _search_result(paths, session, **kwargs) -> SearchResult:
    defaults = dict(
        total_matches=40,
        start_index=20,
        execution_time_ms=7,
        query_statement="(path[/content/dam])",
        has_more=True,
        result_pages=4,
    )
    defaults.update(kwargs)
    return SearchResult(hits=tuple(Hit(path=p) for p in paths), session=session, **defaults)


class TestMapResults(unittest.TestCase):
    def test_skips_failing_hits_and_keeps_order(self) -> None:
        session = _Session()
        resolver = _Resolver(
            {
                "/content/dam/a.png": _resource("/content/dam/a.png", "A"),
                "/content/dam/broken.png": RuntimeError("access denied"),
                "/content/dam/b.png": _resource("/content/dam/b.png"),
            }
        )
        search_result = _search_result(
            ["/content/dam/a.png", "/content/dam/gone.png", "/content/dam/broken.png", "/content/dam/b.png"],
            session,
        )

        with self.assertLogs("AssetSearch", level="WARNING") as logs:
            results = map_results(search_result, resolver)

        self.assertEqual([r.path for r in results.results], ["/content/dam/a.png", "/content/dam/b.png"])
        self.assertEqual([r.title for r in results.results], ["A", "b.png"])
        self.assertEqual(session.close_calls, 1)
        self.assertTrue(any("gone.png" in line for line in logs.output))
        self.assertTrue(any("broken.png" in line for line in logs.output))

    def test_copies_backend_metadata(self) -> None:
        results = map_results(_search_result([], _Session()), _Resolver({}))

        self.assertEqual(results.results, ())
        self.assertEqual(results.size, 0)
        self.assertEqual(results.total, 40)
        self.assertEqual(results.offset, 20)
        self.assertTrue(results.has_more)
        self.assertEqual(results.result_pages, 4)
        self.assertEqual(results.execution_time_ms, 7)
        self.assertEqual(results.query_statement, "(path[/content/dam])")

    def test_factory_may_skip_hits(self) -> None:
        resolver = _Resolver({"/content/dam/a.png": _resource("/content/dam/a.png")})

        def only_titled(path, resource):
            if not resource["properties"]:
                return None
            return AssetResult.from_resource(path, resource)

        results = map_results(_search_result(["/content/dam/a.png"], None), resolver, only_titled)
        self.assertEqual(results.results, ())
        self.assertEqual(results.size, 1)

    def test_session_closed_when_mapping_aborts(self) -> None:
        session = _Session()

        def hits():
            yield Hit(path="/content/dam/a.png")
            raise RuntimeError("index went away")

        search_result = SearchResult(hits=hits(), total_matches=1, session=session)
        resolver = _Resolver({"/content/dam/a.png": _resource("/content/dam/a.png")})

        with self.assertRaises(RuntimeError):
            map_results(search_result, resolver)
        self.assertEqual(session.close_calls, 1)


class TestAssetResult(unittest.TestCase):
    def test_title_fallbacks(self) -> None:
        self.assertEqual(
            AssetResult.from_resource("/x", {"path": "/content/dam/a.png", "properties": {"jcr:title": "J"}}).title,
            "J",
        )
        self.assertEqual(AssetResult.from_resource("/content/dam/a.png", {}).name, "a.png")

    def test_rejects_unusable_resources(self) -> None:
        with self.assertRaises(ValueError):
            AssetResult.from_resource("relative", {})
        with self.assertRaises(ValueError):
            AssetResult.from_resource("/content/dam/a.png", {"properties": ["x"]})


if __name__ == "__main__":
    unittest.main()
