"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Mapping

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


class FakeResourceSource:
    """In-memory resource source keyed by Terraform resource type."""

    def __init__(
        self,
        resources: Mapping[str, list[dict[str, Any]]] | None = None,
        compartments: list[dict[str, Any]] | None = None,
        errors: Mapping[str, list[Exception]] | None = None,
        region: str | None = "us-phoenix-1",
    ) -> None:
        self.resources = dict(resources or {})
        self.compartments = list(compartments or [])
        self.errors = {key: list(value) for key, value in (errors or {}).items()}
        self.calls: list[tuple[str, str]] = []
        self._region = region

    @property
    def region(self) -> str | None:
        return self._region

    def root_compartment_id(self) -> str:
        return "ocid1.tenancy.oc1..root"

    def list_compartments(self) -> list[dict[str, Any]]:
        return list(self.compartments)

    def list_resources(self, resource: Any, compartment_id: str) -> list[dict[str, Any]]:
        self.calls.append((resource.resource_type, compartment_id))
        pending = self.errors.get(resource.resource_type)
        if pending:
            raise pending.pop(0)
        return list(self.resources.get(resource.resource_type, []))


@pytest.fixture
def fake_source_factory() -> Any:
    """Return the fake resource source class for building test tenancies."""
    return FakeResourceSource
