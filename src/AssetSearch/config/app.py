from __future__ import annotations

"""Application config orchestration and YAML loading entrypoints."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from AssetSearch.config.catalog import CatalogConfig, check_catalog_config, load_catalog_config
from AssetSearch.config.common import get_section
from AssetSearch.config.page import PageConfigStore
from AssetSearch.config.runtime import RuntimeConfig, check_runtime, load_runtime


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application root configuration."""

    runtime: RuntimeConfig
    catalog: CatalogConfig
    pages: PageConfigStore


def load_pages(raw: Mapping[str, Any]) -> PageConfigStore:
    """Load the ``pages`` section into a configuration store.

    Page properties themselves are read leniently at request time; only the
    section shape is validated here.

    Raises:
        TypeError: If the section or a page entry is not a mapping.
    """
    section = get_section(raw, "pages", required=False)
    pages: dict[str, Mapping[str, Any]] = {}
    for page, props in section.items():
        if not isinstance(page, str) or not page.startswith("/"):
            raise TypeError(f"pages keys must be absolute page paths: {page!r}")
        if props is None:
            props = {}
        if not isinstance(props, Mapping):
            raise TypeError(f"pages.{page} must be an object")
        pages[page] = props
    return PageConfigStore(pages)


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Parse normalized mapping into AppConfig."""
    runtime = load_runtime(raw)
    catalog = load_catalog_config(raw)
    pages = load_pages(raw)

    check_runtime(runtime)
    check_catalog_config(catalog)

    return AppConfig(runtime=runtime, catalog=catalog, pages=pages)


def load_config(path: Path) -> AppConfig:
    """Load YAML config file without default merge."""
    return load_config_with_defaults(path, default_path=path)


def load_config_with_defaults(
    config_path: Path, default_path: Path = Path("config/default.yml")
) -> AppConfig:
    """Load config by merging an override file onto the defaults."""
    base = parse_yaml(default_path.read_text(encoding="utf-8"))
    if config_path == default_path:
        return parse_config_dict(base)
    override = parse_yaml(config_path.read_text(encoding="utf-8"))
    return parse_config_dict(merge_config_dicts(base, override))


def parse_yaml(text: str) -> dict[str, Any]:
    """Parse raw YAML text into a mapping."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Config root must be a mapping/object")
    return dict(data)


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two config mappings; lists and scalars are replaced."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
