"""Catalog domain configuration for the bundled search backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from AssetSearch.config.common import expect_str, get_required_value, get_section


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    """Location of the asset catalog served by the in-memory backend."""

    path: str


def load_catalog_config(raw: Mapping[str, Any]) -> CatalogConfig:
    """Load the ``catalog`` section.

    Raises:
        TypeError: If ``catalog.path`` is not a string.
        ValueError: If the section or ``catalog.path`` is missing.
    """
    section = get_section(raw, "catalog", required=True)
    return CatalogConfig(
        path=expect_str(get_required_value(section, "path", "catalog.path"), "catalog.path"),
    )


def check_catalog_config(config: CatalogConfig) -> None:
    if not config.path.strip():
        raise ValueError("catalog.path must not be empty")
