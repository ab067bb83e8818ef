"""Python SDK for tenancy export operations.

This module exposes high-level APIs for exporting a compartment,
listing exportable resources, and filtering record streams.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, TypeVar

from core.config import ExportConfig
from core.types import ExportCommandArgs, ExportResult, Record
from export.export_command import run_export_command
from export.resource_catalog import list_exportable_resources
from export.resource_source import ResourceSource
from filtering.filter_engine import apply_filters
from filtering.predicates import Predicate

RecordT = TypeVar("RecordT", bound=Record)


class TenancyExportClient:
    """Primary SDK entry point for export workflows."""

    def __init__(
        self,
        config: ExportConfig | None = None,
        source: ResourceSource | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            source: Optional resource source; the OCI SDK source by default.
        """
        self._config = config or ExportConfig.from_env()
        self._source = source

    @property
    def config(self) -> ExportConfig:
        return self._config

    def export(self, args: ExportCommandArgs) -> ExportResult:
        """Export a compartment into Terraform configuration.

        Args:
            args: Export options.

        Returns:
            Export summary.

        Raises:
            ExportConfigError: If arguments or OCI config are invalid.
            ExportDependencyError: If the OCI SDK is missing.
            ExportRenderError: If output files cannot be written.
        """
        return run_export_command(args, self._resource_source())

    def list_exportable_resources(self) -> dict[str, tuple[str, ...]]:
        """Return exportable resource types grouped by service."""
        return list_exportable_resources()

    def filter(
        self,
        predicates: Iterable[Predicate | Mapping[str, Any]] | None,
        records: Sequence[RecordT],
    ) -> list[RecordT]:
        """Filter records with attribute predicates.

        Raises:
            FilterRegexError: If a regex predicate is invalid.
        """
        return apply_filters(predicates, records)

    def _resource_source(self) -> ResourceSource:
        if self._source is None:
            from export.oci_source import OciResourceSource

            self._source = OciResourceSource(self._config)
        return self._source
