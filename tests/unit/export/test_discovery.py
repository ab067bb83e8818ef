"""Unit tests for export resource discovery."""

from __future__ import annotations

import pytest

from core.errors import ExportConfigError, ExportDiscoveryError, ExportTransientError
from export.discovery import discover_resources, resolve_compartment_id, terraform_name
from export.resource_catalog import select_resources

COMPARTMENT_ID = "ocid1.compartment.oc1..prod"


def _no_sleep(seconds: float) -> None:
    return None


def test_resolve_compartment_id_prefers_explicit_id(fake_source_factory) -> None:
    """An explicit compartment id should be used as is."""
    source = fake_source_factory()

    resolved = resolve_compartment_id(source, COMPARTMENT_ID, "ignored", 1.0)

    assert resolved == COMPARTMENT_ID


def test_resolve_compartment_id_defaults_to_root(fake_source_factory) -> None:
    """Without id or name the tenancy root should be exported."""
    source = fake_source_factory()

    assert resolve_compartment_id(source, None, None, 1.0) == "ocid1.tenancy.oc1..root"


def test_resolve_compartment_id_matches_active_name(fake_source_factory) -> None:
    """Names should resolve to the single active compartment."""
    source = fake_source_factory(
        compartments=[
            {"id": "ocid1.compartment.oc1..old", "name": "prod", "lifecycle_state": "DELETED"},
            {"id": COMPARTMENT_ID, "name": "prod", "lifecycle_state": "ACTIVE"},
            {"id": "ocid1.compartment.oc1..dev", "name": "dev", "lifecycle_state": "ACTIVE"},
        ]
    )

    assert resolve_compartment_id(source, None, "prod", 1.0) == COMPARTMENT_ID


@pytest.mark.parametrize(
    "compartments",
    [
        [],
        [
            {"id": "a", "name": "prod", "lifecycle_state": "ACTIVE"},
            {"id": "b", "name": "prod", "lifecycle_state": "ACTIVE"},
        ],
    ],
)
def test_resolve_compartment_id_rejects_missing_or_ambiguous_names(
    fake_source_factory, compartments: list[dict[str, str]]
) -> None:
    """Zero or several matches should raise config errors."""
    source = fake_source_factory(compartments=compartments)

    with pytest.raises(ExportConfigError):
        resolve_compartment_id(source, None, "prod", 1.0)


def test_discover_resources_drops_inactive_resources(fake_source_factory) -> None:
    """Discovery predicates should drop terminated resources."""
    source = fake_source_factory(
        resources={
            "oci_core_vcn": [
                {"id": "ocid1.vcn.oc1..a", "display_name": "vcn-a", "lifecycle_state": "AVAILABLE"},
                {"id": "ocid1.vcn.oc1..b", "display_name": "vcn-b", "lifecycle_state": "TERMINATED"},
            ]
        }
    )

    outcome = discover_resources(
        source, select_resources(["core"]), COMPARTMENT_ID, sleep=_no_sleep
    )

    assert [resource.ocid for resource in outcome.resources] == ["ocid1.vcn.oc1..a"]
    assert outcome.failures == ()


def test_discover_resources_applies_id_allow_list(fake_source_factory) -> None:
    """Only requested ids should be kept."""
    source = fake_source_factory(
        resources={
            "oci_objectstorage_bucket": [
                {"id": "n/ns/b/logs", "name": "logs", "namespace": "ns"},
                {"id": "n/ns/b/data", "name": "data", "namespace": "ns"},
            ]
        }
    )

    outcome = discover_resources(
        source,
        select_resources(["object_storage"]),
        COMPARTMENT_ID,
        ids=["n/ns/b/data"],
        sleep=_no_sleep,
    )

    assert [resource.terraform_name for resource in outcome.resources] == ["export_data"]


def test_discover_resources_assigns_unique_names(fake_source_factory) -> None:
    """Colliding display names should receive numeric suffixes."""
    vcns = [
        {"id": f"ocid1.vcn.oc1..{index}", "display_name": "my vcn", "lifecycle_state": "AVAILABLE"}
        for index in range(3)
    ]
    source = fake_source_factory(resources={"oci_core_vcn": vcns})

    outcome = discover_resources(
        source, select_resources(["core"]), COMPARTMENT_ID, sleep=_no_sleep
    )

    assert [resource.terraform_name for resource in outcome.resources] == [
        "export_my_vcn",
        "export_my_vcn_1",
        "export_my_vcn_2",
    ]


def test_discover_resources_records_failures_per_type(fake_source_factory) -> None:
    """A failing resource type should not stop the others."""
    source = fake_source_factory(
        resources={"oci_identity_policy": [{"id": "p", "name": "admins", "lifecycle_state": "ACTIVE"}]},
        errors={"oci_identity_compartment": [ExportDiscoveryError("404 NotAuthorized")]},
    )

    outcome = discover_resources(
        source, select_resources(["identity"]), COMPARTMENT_ID, sleep=_no_sleep
    )

    assert [failure.resource_type for failure in outcome.failures] == ["oci_identity_compartment"]
    assert [resource.resource_type for resource in outcome.resources] == ["oci_identity_policy"]


def test_discover_resources_retries_transient_errors(fake_source_factory) -> None:
    """Transient listing errors should be retried within the timeout."""
    source = fake_source_factory(
        resources={"oci_objectstorage_bucket": [{"id": "n/ns/b/a", "name": "a"}]},
        errors={"oci_objectstorage_bucket": [ExportTransientError("429 TooManyRequests")]},
    )

    outcome = discover_resources(
        source, select_resources(["object_storage"]), COMPARTMENT_ID, sleep=_no_sleep
    )

    assert len(outcome.resources) == 1 and len(source.calls) == 2


@pytest.mark.parametrize(
    ("display_name", "expected"),
    [("web server #1", "export_web_server__1"), (None, "export"), ("db-01", "export_db-01")],
)
def test_terraform_name_sanitizes_display_names(display_name: object, expected: str) -> None:
    """Terraform names should contain only valid characters."""
    assert terraform_name(display_name) == expected
