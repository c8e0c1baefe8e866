"""Sandbox request-supplied path constraints to the page's allowed roots."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from AssetSearch.core.paths import canonical_path, is_under
from AssetSearch.core.predicates import Item, Predicate, PredicateGroup
from AssetSearch.utils.log import log

PATH = "path"


@dataclass(frozen=True, slots=True)
class PathDecision:
    """Outcome of validating request paths.

    Attributes:
        group: Request predicates with every disallowed path predicate removed
            and allowed ones canonicalized.
        accepted: Canonical request paths that were kept.
        rejected: Raw request paths that were dropped.
        mandatory: True when every accepted path is reached from the root
            through AND groups only, so the query cannot match outside it.
    """

    group: PredicateGroup
    accepted: tuple[str, ...] = ()
    rejected: tuple[str, ...] = ()
    mandatory: bool = True

    @property
    def provided(self) -> bool:
        """True when the request paths replace the page's default paths."""
        return bool(self.accepted)


def sandbox_request_paths(group: PredicateGroup, roots: Sequence[str]) -> PathDecision:
    """Validate every ``path`` predicate of a parsed request against ``roots``.

    Path predicates at any depth are checked; invalid ones are dropped along
    with their sub-parameters. The decision is all or nothing: if any request
    path survives, the request paths replace the configured ones, otherwise
    none of them take part and the configured paths apply.

    Args:
        group: Parsed request predicates.
        roots: Allowed search roots of the page.

    Returns:
        The sandboxed request group and what was accepted or rejected.
    """
    accepted: list[str] = []
    rejected: list[str] = []
    optional: list[str] = []
    sandboxed = _sandbox(group, tuple(roots), group.all_required, accepted, rejected, optional)
    if rejected:
        log.info("Rejected request paths outside %s: %s", list(roots), rejected)
    return PathDecision(
        group=sandboxed,
        accepted=tuple(accepted),
        rejected=tuple(rejected),
        mandatory=not optional,
    )


def lift_paths(group: PredicateGroup) -> tuple[PredicateGroup, PredicateGroup]:
    """Move every path predicate of ``group`` into one OR group of its own.

    Groups left empty by the move are dropped. The returned path group has the
    shape of the page path group (``0_path``, ``1_path``, ...) and is meant to
    be AND-ed at the query root.

    Returns:
        The group without path predicates, and the lifted path group.
    """
    paths = [item for item in group.walk() if item.type == PATH]
    lifted = PredicateGroup(
        name=group.next_group_name(),
        all_required=False,
        items=tuple(Predicate(f"{idx}_{PATH}", p.value, p.params) for idx, p in enumerate(paths)),
    )
    return _without_paths(group), lifted


def _without_paths(group: PredicateGroup) -> PredicateGroup:
    items: list[Item] = []
    for item in group.items:
        if isinstance(item, PredicateGroup):
            nested = _without_paths(item)
            if len(nested) or not len(item):
                items.append(nested)
        elif item.type != PATH:
            items.append(item)
    return replace(group, items=tuple(items))


def _sandbox(
    group: PredicateGroup,
    roots: tuple[str, ...],
    required: bool,
    accepted: list[str],
    rejected: list[str],
    optional: list[str],
) -> PredicateGroup:
    items: list[Item] = []
    for item in group.items:
        if isinstance(item, PredicateGroup):
            nested = _sandbox(item, roots, required and item.all_required, accepted, rejected, optional)
            if len(nested) or not len(item):
                items.append(nested)
            continue
        if item.type != PATH:
            items.append(item)
            continue
        path = canonical_path(item.value)
        if path is not None and is_under(path, roots):
            accepted.append(path)
            if not required:
                optional.append(path)
            items.append(Predicate(item.name, path, item.params))
        else:
            rejected.append(item.value)
    return replace(group, items=tuple(items))
