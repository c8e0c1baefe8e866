"""JSON output renderer.

Renders a `SearchResults` envelope into JSON-serializable objects.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

from AssetSearch.core.models import SearchResults


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


def render_json(results: SearchResults) -> dict[str, Any]:
    """Render a results envelope into a JSON-serializable dict."""
    return {
        "size": results.size,
        "total": results.total,
        "offset": results.offset,
        "hasMore": results.has_more,
        "resultPages": results.result_pages,
        "executionTimeMs": results.execution_time_ms,
        "query": results.query_statement,
        "results": [
            {
                "path": result.path,
                "title": result.title,
                "properties": _jsonable(dict(result.properties)),
            }
            for result in results.results
        ],
    }


def dumps(results: SearchResults) -> str:
    return json.dumps(render_json(results), ensure_ascii=False, indent=2)
