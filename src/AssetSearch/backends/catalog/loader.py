"""Asset catalog loading.

The catalog is a YAML document listing assets::

    assets:
      - path: /content/dam/marketing/beach.jpg
        type: dam:Asset
        properties:
          dc:title: Beach
          dam:status: approved
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from AssetSearch.core.paths import canonical_path

DEFAULT_ASSET_TYPE = "dam:Asset"


@dataclass(frozen=True, slots=True)
class CatalogAsset:
    """One indexed asset.

    Attributes:
        path: Canonical repository path.
        type: Node type, ``dam:Asset`` unless stated.
        properties: Read-only metadata properties.
    """

    path: str
    type: str = DEFAULT_ASSET_TYPE  # noqa: A003 - node type
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


def load_catalog(path: Path) -> tuple[CatalogAsset, ...]:
    """Load a YAML catalog file.

    Raises:
        OSError: If the file cannot be read.
        TypeError: If the catalog shape is invalid.
        ValueError: If an asset path is missing or not absolute.
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return parse_catalog(data)


def parse_catalog(raw: Any) -> tuple[CatalogAsset, ...]:
    """Parse a catalog mapping into assets, rejecting duplicate paths."""
    if not isinstance(raw, Mapping):
        raise TypeError("Catalog root must be a mapping/object")
    items = raw.get("assets") or []
    if not isinstance(items, list):
        raise TypeError("assets must be a list")

    assets: list[CatalogAsset] = []
    seen: set[str] = set()
    for idx, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise TypeError(f"assets[{idx}] must be an object")
        path = canonical_path(item.get("path", ""))
        if not path or path == "/":
            raise ValueError(f"assets[{idx}].path must be an absolute asset path")
        if path in seen:
            raise ValueError(f"assets[{idx}].path is duplicated: {path}")
        properties = item.get("properties") or {}
        if not isinstance(properties, Mapping):
            raise TypeError(f"assets[{idx}].properties must be an object")
        seen.add(path)
        assets.append(
            CatalogAsset(
                path=path,
                type=str(item.get("type") or DEFAULT_ASSET_TYPE),
                properties={str(k): v for k, v in properties.items()},
            )
        )
    return tuple(assets)
