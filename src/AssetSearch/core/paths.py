from __future__ import annotations

from typing import Iterable


def canonical_path(path: str) -> str | None:
    """Canonicalize an absolute repository path.

    Collapses repeated separators, resolves ``.`` and ``..`` and drops the
    trailing separator.

    Returns:
        Canonical path, or None for relative paths and paths climbing above ``/``.
    """
    if not isinstance(path, str):
        return None
    path = path.strip()
    if not path.startswith("/"):
        return None
    segments: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if not segments:
                return None
            segments.pop()
            continue
        segments.append(segment)
    return "/" + "/".join(segments)


def is_under(path: str, roots: Iterable[str]) -> bool:
    """Return True when canonical ``path`` equals a root or is nested under one.

    Roots are compared with a trailing separator so ``/content/dam-other``
    never matches ``/content/dam``.
    """
    for root in roots:
        canonical_root = canonical_path(root)
        if canonical_root is None:
            continue
        if path == canonical_root or path.startswith(canonical_root.rstrip("/") + "/"):
            return True
    return False
