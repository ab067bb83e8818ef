"""Resource source contract for export discovery.

Discovery talks to the cloud through this protocol so that the OCI SDK
stays an implementation detail and tests can supply in-memory sources.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from export.resource_catalog import ExportableResource


class ResourceSource(Protocol):
    """Read-only view of a cloud tenancy."""

    @property
    def region(self) -> str | None:
        """Region the source lists resources from."""

    def root_compartment_id(self) -> str:
        """Return the tenancy (root compartment) OCID."""

    def list_compartments(self) -> list[Mapping[str, Any]]:
        """Return every compartment in the tenancy subtree."""

    def list_resources(
        self,
        resource: ExportableResource,
        compartment_id: str,
    ) -> list[Mapping[str, Any]]:
        """Return attribute mappings for one resource type in a compartment.

        Raises:
            ExportTransientError: For failures that are safe to retry.
            ExportDiscoveryError: For permanent listing failures.
        """
