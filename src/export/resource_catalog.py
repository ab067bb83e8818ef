"""Exportable resource catalog.

This module lists the compartment-scope resource types that export can
discover, grouped by service, together with the OCI SDK list call used
to find them and the predicates that drop inactive resources.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from core.errors import ExportConfigError
from filtering.predicates import Predicate


@dataclass(frozen=True)
class ExportableResource:
    """Discovery and rendering metadata for one Terraform resource type.

    Attributes:
        resource_type: Terraform resource type name.
        service: Service group used by the services allow/deny lists.
        sdk_module: ``oci`` submodule holding the client class.
        sdk_client: Client class name inside ``sdk_module``.
        list_method: Client method listing resources in a compartment.
        name_attribute: Attribute used to derive Terraform names.
        attributes: Terraform attribute to source attribute pairs.
        block_attributes: Terraform attributes rendered as nested blocks.
        discovery_filters: Predicates a discovered resource must satisfy.
        requires_namespace: List call needs the Object Storage namespace.
    """

    resource_type: str
    service: str
    sdk_module: str
    sdk_client: str
    list_method: str
    name_attribute: str
    attributes: tuple[tuple[str, str], ...]
    block_attributes: frozenset[str] = field(default_factory=frozenset)
    discovery_filters: tuple[Predicate, ...] = ()
    requires_namespace: bool = False


def _attributes(*names: str, **renamed: str) -> tuple[tuple[str, str], ...]:
    pairs = [(name, name) for name in names]
    pairs.extend(renamed.items())
    return tuple(pairs)


def _lifecycle(*states: str) -> tuple[Predicate, ...]:
    return (Predicate(name="lifecycle_state", values=states),)


_TAG_ATTRIBUTES = ("defined_tags", "freeform_tags")

EXPORTABLE_RESOURCES: tuple[ExportableResource, ...] = (
    ExportableResource(
        resource_type="oci_core_vcn",
        service="core",
        sdk_module="core",
        sdk_client="VirtualNetworkClient",
        list_method="list_vcns",
        name_attribute="display_name",
        attributes=_attributes(
            "compartment_id", "cidr_blocks", "display_name", "dns_label", *_TAG_ATTRIBUTES
        ),
        discovery_filters=_lifecycle("AVAILABLE"),
    ),
    ExportableResource(
        resource_type="oci_core_subnet",
        service="core",
        sdk_module="core",
        sdk_client="VirtualNetworkClient",
        list_method="list_subnets",
        name_attribute="display_name",
        attributes=_attributes(
            "compartment_id",
            "vcn_id",
            "cidr_block",
            "availability_domain",
            "display_name",
            "dns_label",
            "prohibit_public_ip_on_vnic",
            "route_table_id",
            "security_list_ids",
            *_TAG_ATTRIBUTES,
        ),
        discovery_filters=_lifecycle("AVAILABLE"),
    ),
    ExportableResource(
        resource_type="oci_core_internet_gateway",
        service="core",
        sdk_module="core",
        sdk_client="VirtualNetworkClient",
        list_method="list_internet_gateways",
        name_attribute="display_name",
        attributes=_attributes(
            "compartment_id", "vcn_id", "display_name", *_TAG_ATTRIBUTES, enabled="is_enabled"
        ),
        discovery_filters=_lifecycle("AVAILABLE"),
    ),
    ExportableResource(
        resource_type="oci_core_route_table",
        service="core",
        sdk_module="core",
        sdk_client="VirtualNetworkClient",
        list_method="list_route_tables",
        name_attribute="display_name",
        attributes=_attributes(
            "compartment_id", "vcn_id", "display_name", "route_rules", *_TAG_ATTRIBUTES
        ),
        block_attributes=frozenset({"route_rules"}),
        discovery_filters=_lifecycle("AVAILABLE"),
    ),
    ExportableResource(
        resource_type="oci_core_security_list",
        service="core",
        sdk_module="core",
        sdk_client="VirtualNetworkClient",
        list_method="list_security_lists",
        name_attribute="display_name",
        attributes=_attributes(
            "compartment_id",
            "vcn_id",
            "display_name",
            "egress_security_rules",
            "ingress_security_rules",
            *_TAG_ATTRIBUTES,
        ),
        block_attributes=frozenset({"egress_security_rules", "ingress_security_rules"}),
        discovery_filters=_lifecycle("AVAILABLE"),
    ),
    ExportableResource(
        resource_type="oci_core_instance",
        service="core",
        sdk_module="core",
        sdk_client="ComputeClient",
        list_method="list_instances",
        name_attribute="display_name",
        attributes=_attributes(
            "availability_domain",
            "compartment_id",
            "display_name",
            "shape",
            "fault_domain",
            *_TAG_ATTRIBUTES,
        ),
        discovery_filters=_lifecycle("RUNNING", "STOPPED"),
    ),
    ExportableResource(
        resource_type="oci_identity_compartment",
        service="identity",
        sdk_module="identity",
        sdk_client="IdentityClient",
        list_method="list_compartments",
        name_attribute="name",
        attributes=_attributes("compartment_id", "name", "description", *_TAG_ATTRIBUTES),
        discovery_filters=_lifecycle("ACTIVE"),
    ),
    ExportableResource(
        resource_type="oci_identity_policy",
        service="identity",
        sdk_module="identity",
        sdk_client="IdentityClient",
        list_method="list_policies",
        name_attribute="name",
        attributes=_attributes(
            "compartment_id", "name", "description", "statements", *_TAG_ATTRIBUTES
        ),
        discovery_filters=_lifecycle("ACTIVE"),
    ),
    ExportableResource(
        resource_type="oci_load_balancer_load_balancer",
        service="load_balancer",
        sdk_module="load_balancer",
        sdk_client="LoadBalancerClient",
        list_method="list_load_balancers",
        name_attribute="display_name",
        attributes=_attributes(
            "compartment_id", "display_name", "shape", "subnet_ids", "is_private", *_TAG_ATTRIBUTES
        ),
        discovery_filters=_lifecycle("ACTIVE"),
    ),
    ExportableResource(
        resource_type="oci_objectstorage_bucket",
        service="object_storage",
        sdk_module="object_storage",
        sdk_client="ObjectStorageClient",
        list_method="list_buckets",
        name_attribute="name",
        attributes=_attributes("compartment_id", "name", "namespace", *_TAG_ATTRIBUTES),
        requires_namespace=True,
    ),
)


def supported_services() -> tuple[str, ...]:
    """Return service names in catalog order without duplicates."""
    services: list[str] = []
    for resource in EXPORTABLE_RESOURCES:
        if resource.service not in services:
            services.append(resource.service)
    return tuple(services)


def list_exportable_resources() -> dict[str, tuple[str, ...]]:
    """Group exportable Terraform resource types by service.

    Returns:
        Mapping of service name to resource types in catalog order.
    """
    grouped: dict[str, tuple[str, ...]] = {}
    for service in supported_services():
        grouped[service] = tuple(
            resource.resource_type
            for resource in EXPORTABLE_RESOURCES
            if resource.service == service
        )
    return grouped


def select_resources(
    services: Sequence[str] = (),
    exclude_services: Sequence[str] = (),
) -> tuple[ExportableResource, ...]:
    """Select resource types for an export run.

    Args:
        services: Services to include; empty includes every service.
        exclude_services: Services to drop; wins over ``services``.

    Returns:
        Selected resource definitions in catalog order.

    Raises:
        ExportConfigError: If a service name is unknown.
    """
    included = _normalize_services(services)
    excluded = _normalize_services(exclude_services)
    _validate_services(included | excluded)
    return tuple(
        resource
        for resource in EXPORTABLE_RESOURCES
        if (not included or resource.service in included) and resource.service not in excluded
    )


def _normalize_services(services: Iterable[str]) -> set[str]:
    return {service.strip() for service in services if service.strip()}


def _validate_services(services: set[str]) -> None:
    unknown = sorted(services - set(supported_services()))
    if unknown:
        raise ExportConfigError(
            f"Unsupported services: {', '.join(unknown)}. "
            f"Supported services: {', '.join(supported_services())}. "
            "Run list_export_resources to see exportable resources."
        )
