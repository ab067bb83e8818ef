"""Predicate model and caller-defined predicate sets.

A predicate selects records whose attribute matches any of its target
values. A ``PredicateSet`` holds predicates keyed by a caller-supplied
fingerprint, so callers decide whether two predicates on the same
attribute are distinct or collapsed into one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterable, Iterator, Mapping, Sequence

from core.errors import FilterDefinitionError
from filtering.value_coercion import coerce_scalar_text

Fingerprint = Callable[["Predicate"], Hashable]


@dataclass(frozen=True)
class Predicate:
    """One attribute predicate.

    Attributes:
        name: Record attribute to inspect.
        values: Target strings; any one matching satisfies the predicate.
        regex: Interpret each target as an unanchored regular expression.
    """

    name: str
    values: tuple[str, ...]
    regex: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise FilterDefinitionError("Filter 'name' must be a non-empty string.")
        if isinstance(self.values, str):
            raise FilterDefinitionError(
                f"Filter '{self.name}' values must be a sequence of strings, not a string."
            )
        object.__setattr__(self, "values", tuple(self.values))
        if not self.values:
            raise FilterDefinitionError(
                f"Filter '{self.name}' has no values. Provide at least one target value."
            )
        for value in self.values:
            if not isinstance(value, str):
                raise FilterDefinitionError(
                    f"Filter '{self.name}' has non-string target value {value!r}. "
                    "Pass target values as strings or build the filter with from_mapping."
                )

    @classmethod
    def from_mapping(cls, block: Mapping[str, Any]) -> "Predicate":
        """Build a predicate from a filter block.

        Args:
            block: Mapping with ``name``, ``values`` and optional ``regex`` keys.

        Returns:
            Validated predicate.

        Raises:
            FilterDefinitionError: If the block is malformed.
        """
        name = block.get("name")
        if not isinstance(name, str) or not name:
            raise FilterDefinitionError(
                f"Filter block {dict(block)!r} needs a non-empty string 'name'."
            )
        regex = block.get("regex", False)
        if not isinstance(regex, bool):
            raise FilterDefinitionError(
                f"Filter '{name}' has non-boolean 'regex' value {regex!r}. Use true or false."
            )
        values = _parse_target_values(name, block.get("values"))
        return cls(name=name, values=values, regex=regex)


def default_fingerprint(predicate: Predicate) -> Hashable:
    """Identify predicates by all of their fields."""
    return (predicate.name, predicate.values, predicate.regex)


def name_fingerprint(predicate: Predicate) -> Hashable:
    """Identify predicates by attribute name only."""
    return predicate.name


class PredicateSet:
    """Duplicate-free predicate collection with caller-defined identity."""

    def __init__(self, fingerprint: Fingerprint | None = None) -> None:
        self._fingerprint = fingerprint or default_fingerprint
        self._predicates: dict[Hashable, Predicate] = {}

    @classmethod
    def from_predicates(
        cls,
        predicates: Iterable[Predicate | Mapping[str, Any]],
        fingerprint: Fingerprint | None = None,
    ) -> "PredicateSet":
        """Build a set from predicates or filter blocks."""
        predicate_set = cls(fingerprint)
        for predicate in predicates:
            predicate_set.add(predicate)
        return predicate_set

    def add(self, predicate: Predicate | Mapping[str, Any]) -> bool:
        """Add a predicate unless one with the same fingerprint exists.

        Args:
            predicate: Predicate or filter block.

        Returns:
            True if the predicate was added.
        """
        resolved = as_predicate(predicate)
        key = self._fingerprint(resolved)
        if key in self._predicates:
            return False
        self._predicates[key] = resolved
        return True

    def remove(self, predicate: Predicate | Mapping[str, Any]) -> bool:
        """Remove the predicate sharing this predicate's fingerprint.

        Returns:
            True if a predicate was removed.
        """
        key = self._fingerprint(as_predicate(predicate))
        return self._predicates.pop(key, None) is not None

    def __contains__(self, predicate: object) -> bool:
        if not isinstance(predicate, (Predicate, Mapping)):
            return False
        try:
            resolved = as_predicate(predicate)
        except FilterDefinitionError:
            return False
        return self._fingerprint(resolved) in self._predicates

    def __iter__(self) -> Iterator[Predicate]:
        return iter(tuple(self._predicates.values()))

    def __len__(self) -> int:
        return len(self._predicates)

    def __repr__(self) -> str:
        return f"PredicateSet({list(self._predicates.values())!r})"


def as_predicate(predicate: Predicate | Mapping[str, Any]) -> Predicate:
    """Normalize a predicate or filter block into a ``Predicate``.

    Raises:
        FilterDefinitionError: If the input is neither.
    """
    if isinstance(predicate, Predicate):
        return predicate
    if isinstance(predicate, Mapping):
        return Predicate.from_mapping(predicate)
    raise FilterDefinitionError(
        f"Unsupported filter {predicate!r}: expected a Predicate or a mapping "
        "with 'name' and 'values'."
    )


def _parse_target_values(name: str, raw_values: object) -> tuple[str, ...]:
    if not isinstance(raw_values, Sequence) or isinstance(raw_values, (str, bytes, bytearray)):
        raise FilterDefinitionError(
            f"Filter '{name}' needs 'values' as a list of strings, got {type(raw_values).__name__}."
        )
    values: list[str] = []
    for raw_value in raw_values:
        text = coerce_scalar_text(raw_value)
        if text is None:
            raise FilterDefinitionError(
                f"Filter '{name}' has unsupported target value {raw_value!r}. "
                "Use strings, numbers, or booleans."
            )
        values.append(text)
    if not values:
        raise FilterDefinitionError(
            f"Filter '{name}' has no values. Provide at least one target value."
        )
    return tuple(values)
