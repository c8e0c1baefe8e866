"""Tests for layered config parsing and validation."""

import sys
import tempfile
import unittest
from copy import deepcopy
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from AssetSearch.config import load_config_with_defaults, parse_config_dict
from AssetSearch.config.app import merge_config_dicts, parse_yaml


def _base_raw_config() -> dict:
    return {
        "log": {"level": "info", "to_file": False, "dir": "log"},
        "catalog": {"path": "config/catalog.yml"},
        "pages": {
            "/content/search": {
                "paths": ["/content/dam/marketing"],
                "limit": 24,
                "searchPredicates": ["not-expired"],
            },
        },
    }


_BASE_YAML = """
log:
  level: INFO
  to_file: false

catalog:
  path: config/catalog.yml

pages:
  /content/search:
    paths: [/content/dam/marketing]
    limit: 24
    orderBy: "@dc:title"
"""


class TestConfigLayering(unittest.TestCase):
    def test_parse_success_nested_access(self) -> None:
        cfg = parse_config_dict(_base_raw_config())

        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.runtime.dir, "log")
        self.assertEqual(cfg.catalog.path, "config/catalog.yml")
        page = cfg.pages.resolve("/content/search")
        self.assertEqual(page.paths, ("/content/dam/marketing",))
        self.assertEqual(page.search_predicates, ("not-expired",))

    def test_missing_log_section(self) -> None:
        raw = _base_raw_config()
        del raw["log"]
        with self.assertRaisesRegex(ValueError, "log"):
            parse_config_dict(raw)

    def test_unknown_log_level(self) -> None:
        raw = _base_raw_config()
        raw["log"]["level"] = "LOUD"
        with self.assertRaisesRegex(ValueError, "log\\.level"):
            parse_config_dict(raw)

    def test_to_file_type_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["log"]["to_file"] = "yes"
        with self.assertRaisesRegex(TypeError, "log\\.to_file"):
            parse_config_dict(raw)

    def test_catalog_path_required(self) -> None:
        raw = _base_raw_config()
        raw["catalog"] = {}
        with self.assertRaisesRegex(ValueError, "catalog\\.path"):
            parse_config_dict(raw)
        raw["catalog"] = {"path": "  "}
        with self.assertRaisesRegex(ValueError, "catalog\\.path"):
            parse_config_dict(raw)

    def test_pages_shape(self) -> None:
        raw = deepcopy(_base_raw_config())
        raw["pages"]["relative/page"] = {}
        with self.assertRaisesRegex(TypeError, "pages"):
            parse_config_dict(raw)

        raw = deepcopy(_base_raw_config())
        raw["pages"]["/content/search"] = ["not", "a", "map"]
        with self.assertRaisesRegex(TypeError, "pages\\./content/search"):
            parse_config_dict(raw)

    def test_malformed_page_properties_do_not_fail_loading(self) -> None:
        raw = deepcopy(_base_raw_config())
        raw["pages"]["/content/search"]["limit"] = "lots"
        cfg = parse_config_dict(raw)
        self.assertEqual(cfg.pages.resolve("/content/search").limit, 50)

    def test_merge_replaces_lists_and_merges_mappings(self) -> None:
        merged = merge_config_dicts(
            {"log": {"level": "INFO", "dir": "log"}, "pages": {"/a": {"paths": ["/content/dam/a"]}}},
            {"log": {"level": "DEBUG"}, "pages": {"/a": {"paths": ["/content/dam/b"]}}},
        )
        self.assertEqual(merged["log"], {"level": "DEBUG", "dir": "log"})
        self.assertEqual(merged["pages"]["/a"]["paths"], ["/content/dam/b"])

    def test_yaml_root_must_be_mapping(self) -> None:
        with self.assertRaises(ValueError):
            parse_yaml("- a\n- b\n")
        self.assertEqual(parse_yaml(""), {})


class TestConfigOverride(unittest.TestCase):
    def test_override_merges_with_defaults(self) -> None:
        override_yaml = """
log:
  level: DEBUG

pages:
  /content/search:
    limit: 5000
"""
        with tempfile.TemporaryDirectory() as tmp:
            default_path = Path(tmp) / "default.yml"
            default_path.write_text(_BASE_YAML, encoding="utf-8")
            override_path = Path(tmp) / "override.yml"
            override_path.write_text(override_yaml, encoding="utf-8")

            cfg = load_config_with_defaults(override_path, default_path=default_path)

        page = cfg.pages.resolve("/content/search")
        self.assertEqual(cfg.runtime.level, "DEBUG")
        self.assertEqual(page.limit, 1000)
        self.assertEqual(page.order_by, "@dc:title")
        self.assertEqual(page.paths, ("/content/dam/marketing",))

    def test_empty_override_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            default_path = Path(tmp) / "default.yml"
            default_path.write_text(_BASE_YAML, encoding="utf-8")
            override_path = Path(tmp) / "override.yml"
            override_path.write_text("{}", encoding="utf-8")

            cfg = load_config_with_defaults(override_path, default_path=default_path)

        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.pages.resolve("/content/search").limit, 24)


if __name__ == "__main__":
    unittest.main()
