"""Tests for the click command-line interface."""

from __future__ import annotations

import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from AssetSearch.cli.runner import UNSAFE_SEARCH_EXIT_CODE
from AssetSearch.cli.ui import cli
from AssetSearch.search import SearchBackendError, UnsafeSearchError
from AssetSearch.utils.log import log

PAGE = "/content/search"


def _config_yaml() -> str:
    catalog = (REPO_ROOT / "config" / "catalog.yml").as_posix()
    return f"""
log:
  level: WARNING
  to_file: false

catalog:
  path: "{catalog}"

pages:
  {PAGE}:
    paths: [/content/dam/marketing, /content/dam/products]
    hiddenPredicates:
      - property: dam:status
        property.operation: unequals
        property.value: rejected
"""


class _FailingProvider:
    def __init__(self, error: Exception) -> None:
        self.error = error

    def get_results(self, request):
        del request
        raise self.error


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self._tmp.name) / "config.yml"
        self.config_path.write_text(_config_yaml(), encoding="utf-8")
        self.runner = CliRunner()

    def tearDown(self) -> None:
        log.handlers.clear()
        log.propagate = True
        self._tmp.cleanup()

    def _invoke(self, *args: str):
        return self.runner.invoke(cli, ["--config", str(self.config_path), *args])

    def test_search_renders_json(self) -> None:
        result = self._invoke("search", "--page", PAGE, "-p", "fulltext=sunset")

        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.stdout)
        self.assertEqual(payload["size"], 1)
        self.assertEqual([r["path"] for r in payload["results"]], ["/content/dam/marketing/beach.jpg"])

    def test_search_renders_console_text(self) -> None:
        result = self._invoke("search", "--page", PAGE, "-p", "fulltext=sunset", "--format", "console")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Beach at sunset", result.stdout)

    def test_config_from_environment(self) -> None:
        result = self.runner.invoke(
            cli,
            ["search", "--page", PAGE, "-p", "fulltext=widget"],
            env={"ASSET_SEARCH_CONFIG": str(self.config_path)},
        )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.stdout)["results"][0]["title"], "Widget product shot")

    def test_params_prints_assembled_query(self) -> None:
        result = self._invoke("params", "--page", PAGE, "-p", "p.limit=5000", "-p", "path=/etc")

        self.assertEqual(result.exit_code, 0, result.output)
        lines = result.stdout.splitlines()
        self.assertIn("p.limit=1000", lines)
        self.assertIn("1_group.0_path=/content/dam/marketing", lines)
        self.assertNotIn("path=/etc", lines)

    def test_unsafe_search_exit_code(self) -> None:
        provider = _FailingProvider(UnsafeSearchError("Search query will initiate a traversing query"))
        with patch("AssetSearch.cli.runner.create_search_provider", return_value=(provider, object())):
            result = self._invoke("search", "--page", PAGE)

        self.assertEqual(result.exit_code, UNSAFE_SEARCH_EXIT_CODE)

    def test_backend_failure_aborts(self) -> None:
        provider = _FailingProvider(SearchBackendError("index offline"))
        with patch("AssetSearch.cli.runner.create_search_provider", return_value=(provider, object())):
            result = self._invoke("search", "--page", PAGE)

        self.assertEqual(result.exit_code, 1)

    def test_malformed_param_is_usage_error(self) -> None:
        result = self._invoke("search", "--page", PAGE, "-p", "nonsense")
        self.assertEqual(result.exit_code, 2)

    def test_filters_lists_registry(self) -> None:
        result = self._invoke("filters")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("not-expired", result.stdout)
        self.assertIn("approved", result.stdout)


if __name__ == "__main__":
    unittest.main()
