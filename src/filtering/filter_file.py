"""Predicate and record file loading.

This module reads filter definitions from YAML or JSON documents and
record arrays from JSON or JSON Lines files for the ``filter`` command.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from core.errors import FilterDefinitionError
from filtering.predicates import Fingerprint, PredicateSet


def load_predicate_file(
    path: str | Path,
    fingerprint: Fingerprint | None = None,
) -> PredicateSet:
    """Load a predicate set from a YAML or JSON file.

    The document is either a list of filter blocks or a mapping with a
    ``filters`` list. JSON is a subset of YAML, so one parser handles both.

    Args:
        path: Filter file path.
        fingerprint: Optional predicate identity function.

    Returns:
        Parsed predicate set.

    Raises:
        FilterDefinitionError: If the file is missing or malformed.
    """
    filter_path = Path(path).expanduser().resolve()
    text = _read_text(filter_path, "filter")
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as error:
        raise FilterDefinitionError(
            f"Failed to parse filter file {filter_path}: {error}. Fix the YAML syntax and retry."
        ) from error
    if payload is None:
        return PredicateSet(fingerprint)
    blocks = _extract_filter_blocks(payload, filter_path)
    return PredicateSet.from_predicates(blocks, fingerprint)


def load_records_file(path: str | Path) -> list[dict[str, Any]]:
    """Load records from a JSON array or JSON Lines file.

    Args:
        path: Records file path.

    Returns:
        Records in file order.

    Raises:
        FilterDefinitionError: If the file is missing or malformed.
    """
    records_path = Path(path).expanduser().resolve()
    text = _read_text(records_path, "records")
    if records_path.suffix == ".jsonl":
        payload: object = [
            _parse_json(line, records_path, line_number)
            for line_number, line in enumerate(text.splitlines(), start=1)
            if line.strip()
        ]
    else:
        payload = _parse_json(text, records_path, None)
    if not isinstance(payload, list):
        raise FilterDefinitionError(
            f"Records file {records_path} must contain a JSON array of objects."
        )
    for index, record in enumerate(payload):
        if not isinstance(record, dict):
            raise FilterDefinitionError(
                f"Record {index} in {records_path} is {type(record).__name__}, expected an object."
            )
    return payload


def _read_text(path: Path, label: str) -> str:
    if not path.exists():
        raise FilterDefinitionError(f"The {label} file does not exist at {path}. Provide a valid path.")
    try:
        return path.read_text(encoding="utf-8")
    except OSError as error:
        raise FilterDefinitionError(
            f"Failed to read {label} file {path}: {error}. Check file permissions and retry."
        ) from error


def _parse_json(text: str, path: Path, line_number: int | None) -> object:
    try:
        return json.loads(text)
    except json.JSONDecodeError as error:
        location = f" line {line_number}" if line_number is not None else ""
        raise FilterDefinitionError(
            f"Invalid JSON in {path}{location}: {error.msg}. Fix the JSON syntax and retry."
        ) from error


def _extract_filter_blocks(payload: object, path: Path) -> Sequence[Mapping[str, Any]]:
    if isinstance(payload, Mapping):
        payload = payload.get("filters", [])
    if not isinstance(payload, list):
        raise FilterDefinitionError(
            f"Filter file {path} must hold a list of filter blocks or a 'filters' list."
        )
    for index, block in enumerate(payload):
        if not isinstance(block, Mapping):
            raise FilterDefinitionError(
                f"Filter {index} in {path} is {type(block).__name__}, expected a mapping."
            )
    return payload
