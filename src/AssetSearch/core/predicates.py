"""Predicate tree used to describe a search query.

A query is a tree of `PredicateGroup` objects holding `Predicate` leaves.
The flat request form is the familiar query-builder map::

    type=dam:Asset
    1_group.p.or=true
    1_group.0_path=/content/dam/a
    1_group.1_path=/content/dam/b
    1_property=jcr:content/metadata/dc:format
    1_property.value=image/png
    p.limit=50

`create_predicates` parses such a map into a tree and `to_params` flattens a
tree back. Both are pure; groups are immutable and every edit returns a new
group.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterator, Mapping, Union

ROOT = "root"
GROUP = "group"
PARAM_PREFIX = "p"
PARAM_OR = "or"

_ORDINAL_RE = re.compile(r"^(\d+)_(.+)$")


def predicate_type(name: str) -> str:
    """Return the predicate type of a name, i.e. the name without ordinal prefix."""
    match = _ORDINAL_RE.match(name)
    return match.group(2) if match else name


def _ordinal(name: str) -> int | None:
    match = _ORDINAL_RE.match(name)
    return int(match.group(1)) if match else None


def _is_true(value: str) -> bool:
    return value.strip().lower() == "true"


@dataclass(frozen=True, slots=True)
class Predicate:
    """A single named query constraint.

    Attributes:
        name: Predicate name, optionally ordinal-prefixed (``1_property``).
            Query parameters keep their dotted name (``p.limit``).
        value: Main value (``path=/content/dam`` -> ``/content/dam``).
        params: Sub-parameters (``1_property.value=foo`` -> ``{"value": "foo"}``).
    """

    name: str
    value: str = ""
    params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def type(self) -> str:  # noqa: A003 - mirrors query-builder vocabulary
        return predicate_type(self.name)

    @property
    def is_parameter(self) -> bool:
        return self.name.startswith(f"{PARAM_PREFIX}.")

    def get(self, param: str, default: str | None = None) -> str | None:
        return self.params.get(param, default)


Item = Union[Predicate, "PredicateGroup"]


@dataclass(frozen=True, slots=True)
class PredicateGroup:
    """Ordered, nameable group of predicates and nested groups.

    Attributes:
        name: Group name; ``root`` for the top level, ``N_group`` when nested.
        all_required: True for AND semantics over direct children, False for OR.
        items: Child predicates and groups in evaluation order.
    """

    name: str = ROOT
    all_required: bool = True
    items: tuple[Item, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def add(self, *items: Item) -> PredicateGroup:
        return replace(self, items=self.items + items)

    def without(self, *names: str) -> PredicateGroup:
        """Return a copy without the direct children called ``names``."""
        return replace(self, items=tuple(item for item in self.items if item.name not in names))

    def replace_item(self, name: str, new_item: Item) -> PredicateGroup:
        """Return a copy where the first direct child called ``name`` is swapped."""
        items = list(self.items)
        for idx, item in enumerate(items):
            if item.name == name:
                items[idx] = new_item
                return replace(self, items=tuple(items))
        raise KeyError(name)

    def get_by_name(self, name: str) -> Item | None:
        for item in self.items:
            if item.name == name:
                return item
        return None

    def names(self) -> set[str]:
        return {item.name for item in self.items}

    def walk(self) -> Iterator[Predicate]:
        """Yield every predicate in the tree, depth first."""
        for item in self.items:
            if isinstance(item, PredicateGroup):
                yield from item.walk()
            else:
                yield item

    def unique_name(self, base: str) -> str:
        """Return ``base`` or the first free ``N_base`` among direct children."""
        taken = self.names()
        if base not in taken:
            return base
        index = 1
        while f"{index}_{base}" in taken:
            index += 1
        return f"{index}_{base}"

    def next_group_name(self) -> str:
        """Return ``N_group`` numbered after the highest nested group ordinal."""
        ordinals = [
            _ordinal(item.name) or 0 for item in self.items if isinstance(item, PredicateGroup)
        ]
        return f"{max(ordinals, default=0) + 1}_{GROUP}"


def create_predicates(params: Mapping[str, str], name: str = ROOT) -> PredicateGroup:
    """Parse a flat parameter map into a predicate tree.

    Keys are processed in map order; a predicate's position is where its name
    is first seen, so equal maps always produce equal trees.

    Args:
        params: Flat query-builder parameters.
        name: Name of the group being built.

    Returns:
        Parsed predicate group.
    """
    all_required = True
    order: dict[str, None] = {}
    values: dict[str, str] = {}
    sub_params: dict[str, dict[str, str]] = {}
    nested: dict[str, dict[str, str]] = {}

    for raw_key, raw_value in params.items():
        key = str(raw_key).strip()
        value = "" if raw_value is None else str(raw_value)
        if not key:
            continue
        head, _, rest = key.partition(".")

        if head == PARAM_PREFIX:
            if not rest:
                continue
            if rest == PARAM_OR:
                all_required = not _is_true(value)
                continue
            order.setdefault(key, None)
            values[key] = value
            continue

        if predicate_type(head) == GROUP:
            order.setdefault(head, None)
            group_params = nested.setdefault(head, {})
            if rest:
                group_params[rest] = value
            continue

        order.setdefault(head, None)
        if rest:
            sub_params.setdefault(head, {})[rest] = value
        else:
            values[head] = value

    items: list[Item] = []
    for child in order:
        if child in nested:
            items.append(create_predicates(nested[child], name=child))
        else:
            items.append(Predicate(child, values.get(child, ""), sub_params.get(child, {})))
    return PredicateGroup(name=name, all_required=all_required, items=tuple(items))


def to_params(group: PredicateGroup) -> dict[str, str]:
    """Flatten a predicate tree into a query-builder parameter map."""
    params: dict[str, str] = {}
    _flatten(group, "", params)
    return params


def _flatten(group: PredicateGroup, prefix: str, out: dict[str, str]) -> None:
    if not group.all_required:
        out[f"{prefix}{PARAM_PREFIX}.{PARAM_OR}"] = "true"
    for item in group.items:
        if isinstance(item, PredicateGroup):
            _flatten(item, f"{prefix}{item.name}.", out)
            continue
        key = f"{prefix}{item.name}"
        if item.value:
            out[key] = item.value
        for param, value in item.params.items():
            out[f"{key}.{param}"] = value
