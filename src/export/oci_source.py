"""OCI SDK backed resource source.

This module encapsulates OCI client creation and paginated list calls.
SDK models are converted to plain attribute mappings so the filter
engine and renderers never depend on SDK types.
"""

from __future__ import annotations

from typing import Any, Mapping

from core.config import ExportConfig
from core.constants import RETRYABLE_STATUS_CODES
from core.errors import (
    ExportConfigError,
    ExportDependencyError,
    ExportDiscoveryError,
    ExportTransientError,
)
from export.resource_catalog import ExportableResource


def _import_oci() -> Any:
    try:
        import oci
    except ImportError as error:
        raise ExportDependencyError(
            "Tenancy export requires the OCI Python SDK, but it is not installed. "
            "Install it with 'pip install oci'."
        ) from error
    return oci


class OciResourceSource:
    """Resource source that lists resources through the OCI SDK."""

    def __init__(self, config: ExportConfig) -> None:
        """Load the OCI SDK config.

        Args:
            config: Runtime config naming the OCI config file and profile.

        Raises:
            ExportDependencyError: If the OCI SDK is missing.
            ExportConfigError: If the OCI config file is invalid.
        """
        self._oci = _import_oci()
        try:
            sdk_config = self._oci.config.from_file(
                file_location=str(config.oci_config_file),
                profile_name=config.oci_profile,
            )
            if config.region:
                sdk_config["region"] = config.region
            self._oci.config.validate_config(sdk_config)
        except self._oci.exceptions.ClientError as error:
            raise ExportConfigError(
                f"Failed to load OCI config profile '{config.oci_profile}' from "
                f"{config.oci_config_file}: {error}. Check the OCI config file and retry."
            ) from error
        self._sdk_config = sdk_config
        self._clients: dict[tuple[str, str], Any] = {}
        self._namespace: str | None = None

    @property
    def region(self) -> str | None:
        return self._sdk_config.get("region")

    def root_compartment_id(self) -> str:
        return str(self._sdk_config["tenancy"])

    def list_compartments(self) -> list[Mapping[str, Any]]:
        identity = self._client("identity", "IdentityClient")
        return self._list_all(
            identity.list_compartments,
            "list_compartments",
            compartment_id=self.root_compartment_id(),
            compartment_id_in_subtree=True,
            access_level="ANY",
        )

    def list_resources(
        self,
        resource: ExportableResource,
        compartment_id: str,
    ) -> list[Mapping[str, Any]]:
        """List one resource type in a compartment.

        Args:
            resource: Catalog entry naming the SDK client and list call.
            compartment_id: Compartment OCID to list.

        Returns:
            Attribute mappings; buckets carry a synthetic import ``id``.

        Raises:
            ExportTransientError: For throttling, server, or network errors.
            ExportDiscoveryError: For other service errors.
        """
        client = self._client(resource.sdk_module, resource.sdk_client)
        list_call = getattr(client, resource.list_method)
        kwargs: dict[str, Any] = {"compartment_id": compartment_id}
        if resource.requires_namespace:
            kwargs["namespace_name"] = self._object_storage_namespace()
        records = self._list_all(list_call, resource.list_method, **kwargs)
        if resource.requires_namespace:
            return [
                {**record, "id": f"n/{record['namespace']}/b/{record['name']}"}
                for record in records
            ]
        return records

    def _client(self, module_name: str, client_name: str) -> Any:
        key = (module_name, client_name)
        if key not in self._clients:
            client_class = getattr(getattr(self._oci, module_name), client_name)
            self._clients[key] = client_class(self._sdk_config)
        return self._clients[key]

    def _object_storage_namespace(self) -> str:
        if self._namespace is None:
            client = self._client("object_storage", "ObjectStorageClient")
            response = self._call(client.get_namespace, "get_namespace")
            self._namespace = str(response.data)
        return self._namespace

    def _list_all(self, list_call: Any, operation: str, **kwargs: Any) -> list[Mapping[str, Any]]:
        response = self._call(
            lambda: self._oci.pagination.list_call_get_all_results(list_call, **kwargs),
            operation,
        )
        return [self._oci.util.to_dict(item) for item in response.data]

    def _call(self, operation: Any, description: str) -> Any:
        try:
            return operation()
        except self._oci.exceptions.ServiceError as error:
            message = f"{description} failed with {error.status} {error.code}: {error.message}"
            if error.status in RETRYABLE_STATUS_CODES:
                raise ExportTransientError(message) from error
            raise ExportDiscoveryError(message) from error
        except OSError as error:
            raise ExportTransientError(f"{description} failed: {error}") from error
