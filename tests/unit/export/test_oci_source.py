"""Unit tests for the OCI SDK resource source."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from core.config import ExportConfig
from core.errors import (
    ExportConfigError,
    ExportDiscoveryError,
    ExportRetryTimeoutError,
    ExportTransientError,
)
from core.types import TfVersion
from export import oci_source
from export.oci_source import OciResourceSource
from export.resource_catalog import EXPORTABLE_RESOURCES
from export.retry import call_with_retry

_CATALOG = {resource.resource_type: resource for resource in EXPORTABLE_RESOURCES}
_TENANCY = "ocid1.tenancy.oc1..root"


class _FakeClientError(Exception):
    pass


class _FakeServiceError(Exception):
    def __init__(self, status: int, code: str, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message


class _FakeConfigModule:
    def __init__(self, profile: dict[str, str] | None) -> None:
        self._profile = profile
        self.loaded_from: tuple[str, str] | None = None

    def from_file(self, file_location: str, profile_name: str) -> dict[str, str]:
        self.loaded_from = (file_location, profile_name)
        if self._profile is None:
            raise _FakeClientError(f"profile {profile_name} not found")
        return dict(self._profile)

    @staticmethod
    def validate_config(config: dict[str, str]) -> None:
        if "tenancy" not in config:
            raise _FakeClientError("missing tenancy")


class _FakePagination:
    @staticmethod
    def list_call_get_all_results(list_call: Any, **kwargs: Any) -> SimpleNamespace:
        return SimpleNamespace(data=list_call(**kwargs))


class _FakeUtil:
    @staticmethod
    def to_dict(item: Any) -> dict[str, Any]:
        return dict(item)


class _FakeObjectStorageClient:
    instances: list["_FakeObjectStorageClient"] = []

    def __init__(self, config: dict[str, str]) -> None:
        self.config = config
        self.namespace_calls = 0
        self.list_calls: list[dict[str, Any]] = []
        _FakeObjectStorageClient.instances.append(self)

    def get_namespace(self) -> SimpleNamespace:
        self.namespace_calls += 1
        return SimpleNamespace(data="tenancyns")

    def list_buckets(self, **kwargs: Any) -> list[dict[str, Any]]:
        self.list_calls.append(kwargs)
        return [
            {"name": "logs", "namespace": kwargs["namespace_name"]},
            {"name": "data", "namespace": kwargs["namespace_name"]},
        ]


class _FakeVirtualNetworkClient:
    failures: list[Exception] = []

    def __init__(self, config: dict[str, str]) -> None:
        self.config = config

    def list_vcns(self, **kwargs: Any) -> list[dict[str, Any]]:
        if _FakeVirtualNetworkClient.failures:
            raise _FakeVirtualNetworkClient.failures.pop(0)
        return [{"id": "ocid1.vcn.oc1..a", "compartment_id": kwargs["compartment_id"]}]


class _FakeIdentityClient:
    def __init__(self, config: dict[str, str]) -> None:
        self.config = config
        self.list_calls: list[dict[str, Any]] = []

    def list_compartments(self, **kwargs: Any) -> list[dict[str, Any]]:
        self.list_calls.append(kwargs)
        return [{"id": "ocid1.compartment.oc1..dev", "name": "dev"}]


def _fake_oci(profile: dict[str, str] | None) -> SimpleNamespace:
    return SimpleNamespace(
        config=_FakeConfigModule(profile),
        exceptions=SimpleNamespace(ClientError=_FakeClientError, ServiceError=_FakeServiceError),
        pagination=_FakePagination(),
        util=_FakeUtil(),
        core=SimpleNamespace(VirtualNetworkClient=_FakeVirtualNetworkClient),
        identity=SimpleNamespace(IdentityClient=_FakeIdentityClient),
        object_storage=SimpleNamespace(ObjectStorageClient=_FakeObjectStorageClient),
    )


def _export_config(region: str | None = None) -> ExportConfig:
    return ExportConfig(
        oci_config_file=Path("/tmp/oci/config"),
        oci_profile="EXPORT",
        region=region,
        retry_timeout_seconds=15.0,
        tf_version=TfVersion.V0_12,
    )


@pytest.fixture
def fake_oci(monkeypatch: pytest.MonkeyPatch) -> SimpleNamespace:
    """Install a fake OCI SDK with a valid profile."""
    fake = _fake_oci({"tenancy": _TENANCY, "region": "us-phoenix-1"})
    monkeypatch.setattr(oci_source, "_import_oci", lambda: fake)
    _FakeObjectStorageClient.instances = []
    _FakeVirtualNetworkClient.failures = []
    return fake


def test_source_loads_profile_and_applies_region_override(fake_oci: SimpleNamespace) -> None:
    """Config file and profile should come from the export config."""
    source = OciResourceSource(_export_config(region="eu-frankfurt-1"))

    assert fake_oci.config.loaded_from == ("/tmp/oci/config", "EXPORT")
    assert source.region == "eu-frankfurt-1"
    assert source.root_compartment_id() == _TENANCY


@pytest.mark.parametrize("profile", [None, {"region": "us-phoenix-1"}])
def test_source_translates_client_errors_to_config_errors(
    monkeypatch: pytest.MonkeyPatch,
    profile: dict[str, str] | None,
) -> None:
    """Unreadable or invalid profiles should raise a config error."""
    fake = _fake_oci(profile)
    monkeypatch.setattr(oci_source, "_import_oci", lambda: fake)

    with pytest.raises(ExportConfigError, match="profile 'EXPORT'"):
        OciResourceSource(_export_config())


def test_list_resources_builds_bucket_import_ids(fake_oci: SimpleNamespace) -> None:
    """Buckets should carry an n/<namespace>/b/<name> import id."""
    source = OciResourceSource(_export_config())

    buckets = source.list_resources(_CATALOG["oci_objectstorage_bucket"], "ocid1.compartment.oc1..dev")

    assert [bucket["id"] for bucket in buckets] == ["n/tenancyns/b/logs", "n/tenancyns/b/data"]
    client = _FakeObjectStorageClient.instances[0]
    assert client.list_calls == [
        {"compartment_id": "ocid1.compartment.oc1..dev", "namespace_name": "tenancyns"}
    ]


def test_object_storage_namespace_is_fetched_once(fake_oci: SimpleNamespace) -> None:
    """Repeated bucket listings should reuse the cached namespace and client."""
    source = OciResourceSource(_export_config())
    bucket = _CATALOG["oci_objectstorage_bucket"]

    source.list_resources(bucket, "ocid1.compartment.oc1..a")
    source.list_resources(bucket, "ocid1.compartment.oc1..b")

    assert len(_FakeObjectStorageClient.instances) == 1
    assert _FakeObjectStorageClient.instances[0].namespace_calls == 1


@pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
def test_retryable_service_errors_become_transient(fake_oci: SimpleNamespace, status: int) -> None:
    """Throttling and server errors should be retried."""
    _FakeVirtualNetworkClient.failures = [_FakeServiceError(status, "Busy", "try later")]
    source = OciResourceSource(_export_config())

    with pytest.raises(ExportTransientError, match=f"list_vcns failed with {status} Busy"):
        source.list_resources(_CATALOG["oci_core_vcn"], "ocid1.compartment.oc1..dev")


@pytest.mark.parametrize("status", [400, 401, 404, 409])
def test_client_service_errors_are_not_retried(fake_oci: SimpleNamespace, status: int) -> None:
    """Other service errors should fail discovery for the resource type."""
    _FakeVirtualNetworkClient.failures = [_FakeServiceError(status, "NotAuthorized", "denied")]
    source = OciResourceSource(_export_config())

    with pytest.raises(ExportDiscoveryError) as error_info:
        source.list_resources(_CATALOG["oci_core_vcn"], "ocid1.compartment.oc1..dev")

    assert not isinstance(error_info.value, ExportTransientError)


def test_network_errors_become_transient(fake_oci: SimpleNamespace) -> None:
    """Connection failures should be retried like throttling."""
    _FakeVirtualNetworkClient.failures = [ConnectionResetError("reset by peer")]
    source = OciResourceSource(_export_config())

    with pytest.raises(ExportTransientError, match="reset by peer"):
        source.list_resources(_CATALOG["oci_core_vcn"], "ocid1.compartment.oc1..dev")


def test_transient_service_error_is_retried_until_success(fake_oci: SimpleNamespace) -> None:
    """A throttled call should succeed on the next attempt under retry."""
    _FakeVirtualNetworkClient.failures = [_FakeServiceError(429, "TooManyRequests", "slow down")]
    source = OciResourceSource(_export_config())
    waits: list[float] = []

    vcns = call_with_retry(
        lambda: source.list_resources(_CATALOG["oci_core_vcn"], "ocid1.compartment.oc1..dev"),
        timeout_seconds=15.0,
        description="list_vcns",
        sleep=waits.append,
        clock=lambda: 0.0,
    )

    assert [vcn["id"] for vcn in vcns] == ["ocid1.vcn.oc1..a"]
    assert len(waits) == 1


def test_transient_service_errors_time_out(fake_oci: SimpleNamespace) -> None:
    """Throttling past the deadline should raise a retry timeout."""
    _FakeVirtualNetworkClient.failures = [_FakeServiceError(503, "Unavailable", "down")]
    source = OciResourceSource(_export_config())

    with pytest.raises(ExportRetryTimeoutError):
        call_with_retry(
            lambda: source.list_resources(_CATALOG["oci_core_vcn"], "ocid1.compartment.oc1..dev"),
            timeout_seconds=0.0,
            description="list_vcns",
            sleep=lambda _: None,
            clock=lambda: 0.0,
        )


def test_list_compartments_searches_tenancy_subtree(fake_oci: SimpleNamespace) -> None:
    """Compartment listing should start at the tenancy and include the subtree."""
    source = OciResourceSource(_export_config())

    compartments = source.list_compartments()

    assert compartments == [{"id": "ocid1.compartment.oc1..dev", "name": "dev"}]
    identity = source._client("identity", "IdentityClient")
    assert identity.list_calls == [
        {"compartment_id": _TENANCY, "compartment_id_in_subtree": True, "access_level": "ANY"}
    ]
