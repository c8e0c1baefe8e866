"""Output renderers for search results."""

from __future__ import annotations

from AssetSearch.core.models import SearchResults
from AssetSearch.renderers.console import render_text
from AssetSearch.renderers.json import dumps, render_json

FORMATS = ("json", "console")


def render(results: SearchResults, output_format: str) -> str:
    """Render results in one of ``FORMATS``.

    Raises:
        ValueError: If the format is unknown.
    """
    if output_format == "json":
        return dumps(results)
    if output_format == "console":
        return render_text(results)
    raise ValueError(f"Unsupported output format: {output_format}")


__all__ = ["FORMATS", "render", "render_json", "render_text"]
