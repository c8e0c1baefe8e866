"""Console text output renderer."""

from __future__ import annotations

from AssetSearch.core.models import SearchResults


def render_text(results: SearchResults) -> str:
    """Render a results envelope into a human-readable text block."""
    lines = [f"{results.size} hits, {results.total} total (offset {results.offset})"]
    for idx, result in enumerate(results.results, start=results.offset + 1):
        lines.append(f"{idx}. {result.title}")
        lines.append(f"   Path: {result.path}")
        status = result.properties.get("dam:status")
        if status:
            lines.append(f"   Status: {status}")
    if results.has_more:
        lines.append("... more results available")
    return "\n".join(lines)
