"""Predicate filter engine.

This module applies a set of attribute predicates to a record sequence.
Every predicate must match for a record to be kept, including several
predicates on the same attribute; values inside one predicate are ORed.
Retained records keep their input order and multiplicity.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, TypeVar

from core.logging_config import get_logger
from core.types import Record
from filtering.predicate_matching import CompiledPredicate, compile_predicate, record_matches
from filtering.predicates import Predicate, as_predicate

_LOGGER = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=Record)


def apply_filters(
    predicates: Iterable[Predicate | Mapping[str, Any]] | None,
    records: Sequence[RecordT],
) -> list[RecordT]:
    """Return the records that satisfy every predicate.

    Args:
        predicates: Optional predicate set, iterable of predicates, or filter blocks.
        records: Ordered attribute mappings to filter.

    Returns:
        New list holding the retained records in input order.

    Raises:
        FilterRegexError: If any regex predicate has an invalid pattern.
        FilterDefinitionError: If a filter block is malformed.
    """
    if predicates is None:
        return list(records)
    resolved = [as_predicate(predicate) for predicate in predicates]
    if not resolved:
        return list(records)
    if not records:
        return []
    compiled = [compile_predicate(predicate) for predicate in resolved]
    retained = [record for record in records if _matches_all(record, compiled)]
    _LOGGER.debug(
        "filters_applied",
        predicate_count=len(compiled),
        input_count=len(records),
        output_count=len(retained),
    )
    return retained


def _matches_all(record: Mapping[str, Any], compiled: list[CompiledPredicate]) -> bool:
    return all(record_matches(record, predicate) for predicate in compiled)
