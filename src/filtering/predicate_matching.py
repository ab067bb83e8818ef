"""Single-predicate record matching.

This module decides whether one record satisfies one predicate.
Missing attributes and unsupported value shapes never match; regex
targets are compiled up front so pattern errors surface before any
record is evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any, Mapping

from core.errors import FilterRegexError
from filtering.predicates import Predicate
from filtering.value_coercion import coerce_value


@dataclass(frozen=True)
class CompiledPredicate:
    """Predicate with its regex targets compiled.

    Attributes:
        predicate: Source predicate.
        patterns: Compiled targets when ``predicate.regex`` is set.
    """

    predicate: Predicate
    patterns: tuple[re.Pattern[str], ...] = ()

    def matches_text(self, candidate: str) -> bool:
        if self.predicate.regex:
            return any(pattern.search(candidate) for pattern in self.patterns)
        return candidate in self.predicate.values


def compile_predicate(predicate: Predicate) -> CompiledPredicate:
    """Compile regex targets of a predicate.

    Args:
        predicate: Predicate to compile.

    Returns:
        Compiled predicate ready for matching.

    Raises:
        FilterRegexError: If a regex target is not a valid pattern.
    """
    if not predicate.regex:
        return CompiledPredicate(predicate=predicate)
    patterns: list[re.Pattern[str]] = []
    for target in predicate.values:
        try:
            patterns.append(re.compile(target))
        except re.error as error:
            raise FilterRegexError(predicate.name, target, str(error)) from error
    return CompiledPredicate(predicate=predicate, patterns=tuple(patterns))


def record_matches(
    record: Mapping[str, Any],
    predicate: Predicate | CompiledPredicate,
) -> bool:
    """Check whether a record satisfies a predicate.

    Args:
        record: Attribute mapping.
        predicate: Raw or compiled predicate.

    Returns:
        True if any target matches any coerced candidate of the attribute.

    Raises:
        FilterRegexError: If an uncompiled regex predicate has a bad pattern.
    """
    compiled = predicate if isinstance(predicate, CompiledPredicate) else compile_predicate(predicate)
    attribute_name = compiled.predicate.name
    if attribute_name not in record:
        return False
    coerced = coerce_value(record[attribute_name])
    if not coerced.supported:
        return False
    return any(compiled.matches_text(candidate) for candidate in coerced.candidates)
