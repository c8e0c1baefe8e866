from __future__ import annotations

"""Public configuration API for AssetSearch."""

from AssetSearch.config.app import (
    AppConfig,
    load_config,
    load_config_with_defaults,
    parse_config_dict,
)
from AssetSearch.config.catalog import CatalogConfig
from AssetSearch.config.page import PageConfig, PageConfigStore, resolve_page_config
from AssetSearch.config.runtime import RuntimeConfig

__all__ = [
    "RuntimeConfig",
    "CatalogConfig",
    "PageConfig",
    "PageConfigStore",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "parse_config_dict",
    "resolve_page_config",
]
