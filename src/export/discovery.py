"""Resource discovery for tenancy export.

This module resolves the export compartment, lists each selected
resource type under retry, keeps resources that pass the catalog's
discovery predicates and the optional id allow-list, and assigns
unique Terraform names.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
import time
from typing import Any, Callable, Mapping, Sequence

from core.constants import TERRAFORM_NAME_PREFIX
from core.errors import ExportConfigError, ExportDiscoveryError
from core.logging_config import get_logger
from core.types import DiscoveryFailure, ExportedResource
from export.resource_catalog import ExportableResource
from export.resource_source import ResourceSource
from export.retry import call_with_retry
from filtering.filter_engine import apply_filters
from filtering.predicates import Predicate

_LOGGER = get_logger(__name__)

_INVALID_NAME_CHARACTERS = re.compile(r"[^A-Za-z0-9_-]")


@dataclass(frozen=True)
class DiscoveryOutcome:
    """Discovered resources and per-type failures."""

    resources: tuple[ExportedResource, ...]
    failures: tuple[DiscoveryFailure, ...]


def resolve_compartment_id(
    source: ResourceSource,
    compartment_id: str | None,
    compartment_name: str | None,
    retry_timeout_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Resolve the compartment to export.

    An explicit id wins over a name; with neither, the root compartment
    is exported.

    Args:
        source: Resource source.
        compartment_id: Optional compartment OCID.
        compartment_name: Optional compartment name.
        retry_timeout_seconds: Retry budget for the compartment listing.
        sleep: Sleep function used between retries.

    Returns:
        Compartment OCID.

    Raises:
        ExportConfigError: If the name matches no or several active compartments.
    """
    if compartment_id:
        return compartment_id
    if not compartment_name:
        return source.root_compartment_id()
    compartments = call_with_retry(
        source.list_compartments,
        retry_timeout_seconds,
        "list_compartments",
        sleep=sleep,
    )
    matches = apply_filters(
        [
            Predicate(name="name", values=(compartment_name,)),
            Predicate(name="lifecycle_state", values=("ACTIVE",)),
        ],
        compartments,
    )
    if not matches:
        raise ExportConfigError(
            f"No active compartment named '{compartment_name}' was found. "
            "Check the compartment_name value or pass compartment_id instead."
        )
    if len(matches) > 1:
        raise ExportConfigError(
            f"Compartment name '{compartment_name}' matches {len(matches)} compartments. "
            "Pass compartment_id to select one."
        )
    return str(matches[0]["id"])


def discover_resources(
    source: ResourceSource,
    resources: Sequence[ExportableResource],
    compartment_id: str,
    ids: Sequence[str] = (),
    retry_timeout_seconds: float = 15.0,
    sleep: Callable[[float], None] = time.sleep,
) -> DiscoveryOutcome:
    """Discover resources of the selected types in one compartment.

    Listing failures are recorded per resource type and do not stop the
    remaining types from being discovered.

    Args:
        source: Resource source.
        resources: Selected catalog entries.
        compartment_id: Compartment OCID to list.
        ids: Optional resource ids to keep; empty keeps all.
        retry_timeout_seconds: Retry budget for each list call.
        sleep: Sleep function used between retries.

    Returns:
        Discovered resources and failures.

    Raises:
        FilterRegexError: If a discovery predicate is invalid.
    """
    discovered: list[ExportedResource] = []
    failures: list[DiscoveryFailure] = []
    for resource in resources:
        try:
            records = call_with_retry(
                lambda resource=resource: source.list_resources(resource, compartment_id),
                retry_timeout_seconds,
                f"{resource.list_method} ({resource.resource_type})",
                sleep=sleep,
            )
        except ExportDiscoveryError as error:
            _LOGGER.warning(
                "resource_discovery_failed",
                resource_type=resource.resource_type,
                compartment_id=compartment_id,
                error=str(error),
            )
            failures.append(DiscoveryFailure(resource.resource_type, str(error)))
            continue
        kept = apply_filters(_discovery_predicates(resource, ids), records)
        discovered.extend(_name_resources(resource, kept))
        _LOGGER.info(
            "resources_discovered",
            resource_type=resource.resource_type,
            listed_count=len(records),
            kept_count=len(kept),
        )
    return DiscoveryOutcome(resources=tuple(discovered), failures=tuple(failures))


def terraform_name(display_name: object) -> str:
    """Build a Terraform resource name from a display name.

    Args:
        display_name: Resource display name; may be missing.

    Returns:
        Name prefixed with ``export_`` and limited to valid characters.
    """
    cleaned = _INVALID_NAME_CHARACTERS.sub("_", str(display_name or "")).strip("_")
    if not cleaned:
        return TERRAFORM_NAME_PREFIX
    return f"{TERRAFORM_NAME_PREFIX}_{cleaned}"


def _discovery_predicates(resource: ExportableResource, ids: Sequence[str]) -> list[Predicate]:
    predicates = list(resource.discovery_filters)
    if ids:
        predicates.append(Predicate(name="id", values=tuple(ids)))
    return predicates


def _name_resources(
    resource: ExportableResource,
    records: Sequence[Mapping[str, Any]],
) -> list[ExportedResource]:
    used_names: set[str] = set()
    named: list[ExportedResource] = []
    for record in records:
        base_name = terraform_name(record.get(resource.name_attribute))
        name = base_name
        suffix = 1
        while name in used_names:
            name = f"{base_name}_{suffix}"
            suffix += 1
        used_names.add(name)
        named.append(
            ExportedResource(
                resource_type=resource.resource_type,
                service=resource.service,
                terraform_name=name,
                ocid=str(record.get("id", "")),
                attributes=record,
            )
        )
    return named
