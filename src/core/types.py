"""Shared typed models.

This module defines immutable data models used by the filter engine,
export driver, and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Mapping

Record = Mapping[str, Any]


class TfVersion(str, Enum):
    """Terraform configuration syntax versions supported by export."""

    V0_11 = "0.11"
    V0_12 = "0.12"


class ExportStatus(IntEnum):
    """Process exit status reported by the export command."""

    SUCCESS = 0
    FAILURE = 1
    PARTIAL_SUCCESS = 64


@dataclass(frozen=True)
class ExportCommandArgs:
    """Export command options.

    Attributes:
        output_dir: Directory receiving generated configuration files.
        compartment_id: Optional OCID of the compartment to export.
        compartment_name: Optional compartment name resolved to an OCID.
        services: Services to export; empty means all services.
        exclude_services: Services to skip, taking precedence over services.
        ids: Resource OCIDs to export; empty means all resources.
        generate_state: Also write a Terraform state file.
        tf_version: Configuration syntax version.
        retry_timeout_seconds: Retry budget for each API call.
    """

    output_dir: str
    compartment_id: str | None = None
    compartment_name: str | None = None
    services: tuple[str, ...] = ()
    exclude_services: tuple[str, ...] = ()
    ids: tuple[str, ...] = ()
    generate_state: bool = False
    tf_version: TfVersion = TfVersion.V0_12
    retry_timeout_seconds: float = 15.0


@dataclass(frozen=True)
class ExportedResource:
    """One discovered resource ready for rendering.

    Attributes:
        resource_type: Terraform resource type, e.g. ``oci_core_vcn``.
        service: Service group the resource type belongs to.
        terraform_name: Unique Terraform resource name within its type.
        ocid: Cloud identifier of the resource.
        attributes: Attribute mapping as returned by the resource source.
    """

    resource_type: str
    service: str
    terraform_name: str
    ocid: str
    attributes: Mapping[str, Any]


@dataclass(frozen=True)
class DiscoveryFailure:
    """A resource type that could not be discovered."""

    resource_type: str
    message: str


@dataclass(frozen=True)
class ExportResult:
    """Summary of one export run.

    Attributes:
        status: Overall export status.
        output_dir: Directory that received generated files.
        written_files: Paths of all files written by the run.
        resources: Resources rendered into configuration.
        failures: Resource types that failed discovery.
    """

    status: ExportStatus
    output_dir: Path
    written_files: tuple[Path, ...] = ()
    resources: tuple[ExportedResource, ...] = ()
    failures: tuple[DiscoveryFailure, ...] = field(default_factory=tuple)
