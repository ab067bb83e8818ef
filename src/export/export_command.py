"""Export command orchestration.

This module runs one tenancy export: it validates arguments, resolves
the compartment, discovers resources, renders per-service configuration
files, and optionally writes a state file.
"""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
import time
from typing import Callable, Sequence

from core.constants import CONFIG_FILE_SUFFIX, PROVIDER_FILE_NAME, VARIABLES_FILE_NAME
from core.errors import ExportConfigError, ExportRenderError
from core.logging_config import get_logger
from core.types import ExportCommandArgs, ExportedResource, ExportResult, ExportStatus
from export.discovery import discover_resources, resolve_compartment_id
from export.hcl_rendering import HclRenderer, create_renderer
from export.resource_catalog import select_resources
from export.resource_source import ResourceSource
from export.state_file import write_state_file

_LOGGER = get_logger(__name__)


def run_export_command(
    args: ExportCommandArgs,
    source: ResourceSource,
    sleep: Callable[[float], None] = time.sleep,
) -> ExportResult:
    """Export a compartment into Terraform configuration.

    Args:
        args: Export options.
        source: Resource source for the tenancy.
        sleep: Sleep function used between retries.

    Returns:
        Export summary with status and written files.

    Raises:
        ExportConfigError: If arguments are invalid.
        ExportRenderError: If output files cannot be written.
        ExportRetryTimeoutError: If compartment resolution keeps failing.
    """
    output_dir = _prepare_output_dir(args.output_dir)
    selected = select_resources(args.services, args.exclude_services)
    compartment_id = resolve_compartment_id(
        source,
        args.compartment_id,
        args.compartment_name,
        args.retry_timeout_seconds,
        sleep=sleep,
    )
    outcome = discover_resources(
        source,
        selected,
        compartment_id,
        ids=args.ids,
        retry_timeout_seconds=args.retry_timeout_seconds,
        sleep=sleep,
    )
    if selected and len(outcome.failures) == len(selected):
        _LOGGER.error(
            "export_failed",
            compartment_id=compartment_id,
            failed_resource_types=[failure.resource_type for failure in outcome.failures],
        )
        return ExportResult(
            status=ExportStatus.FAILURE,
            output_dir=output_dir,
            failures=outcome.failures,
        )
    renderer = create_renderer(args.tf_version)
    renderer.register_references(outcome.resources, compartment_id)
    written_files = _write_configuration(
        renderer, output_dir, compartment_id, source.region, outcome.resources
    )
    if args.generate_state:
        written_files.append(write_state_file(output_dir, outcome.resources))
    status = ExportStatus.PARTIAL_SUCCESS if outcome.failures else ExportStatus.SUCCESS
    _LOGGER.info(
        "export_completed",
        compartment_id=compartment_id,
        output_dir=str(output_dir),
        tf_version=args.tf_version.value,
        resource_count=len(outcome.resources),
        failure_count=len(outcome.failures),
        generate_state=args.generate_state,
        status=status.name,
    )
    return ExportResult(
        status=status,
        output_dir=output_dir,
        written_files=tuple(written_files),
        resources=outcome.resources,
        failures=outcome.failures,
    )


def _prepare_output_dir(raw_output_dir: str) -> Path:
    if not raw_output_dir:
        raise ExportConfigError(
            "No output_path specified. Provide a directory for the generated configuration."
        )
    output_dir = Path(raw_output_dir).expanduser().resolve()
    if output_dir.exists() and not output_dir.is_dir():
        raise ExportConfigError(f"output_path {output_dir} exists and is not a directory.")
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise ExportRenderError(
            f"Failed to create output directory {output_dir}: {error}. "
            "Check directory permissions and retry."
        ) from error
    return output_dir


def _write_configuration(
    renderer: HclRenderer,
    output_dir: Path,
    compartment_id: str,
    region: str | None,
    resources: Sequence[ExportedResource],
) -> list[Path]:
    files: dict[str, str] = {
        PROVIDER_FILE_NAME: renderer.render_provider(),
        VARIABLES_FILE_NAME: renderer.render_variables(compartment_id, region),
    }
    by_service: dict[str, list[ExportedResource]] = defaultdict(list)
    for resource in resources:
        by_service[resource.service].append(resource)
    for service, service_resources in by_service.items():
        files[f"{service}{CONFIG_FILE_SUFFIX}"] = renderer.render_resources(service_resources)
    written: list[Path] = []
    for file_name, content in files.items():
        path = output_dir / file_name
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as error:
            raise ExportRenderError(
                f"Failed to write configuration file {path}: {error}. "
                "Check output directory permissions and retry."
            ) from error
        written.append(path)
    return written
