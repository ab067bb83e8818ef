"""Terraform state file generation.

This module writes discovered resources into a v4 state document, the
format read by Terraform 0.12, independent of the configuration dialect.
"""

from __future__ import annotations

from datetime import date, datetime
import json
from pathlib import Path
from typing import Any, Sequence
from uuid import uuid4

from core.constants import (
    STATE_FILE_NAME,
    STATE_FORMAT_VERSION,
    STATE_TERRAFORM_VERSION,
    TERRAFORM_PROVIDER_NAME,
)
from core.errors import ExportRenderError
from core.types import ExportedResource


def build_state(resources: Sequence[ExportedResource], lineage: str | None = None) -> dict[str, Any]:
    """Build a state document for exported resources.

    Args:
        resources: Resources to record as managed instances.
        lineage: Optional lineage id; a random UUID by default.

    Returns:
        JSON-serializable state mapping.
    """
    return {
        "version": STATE_FORMAT_VERSION,
        "terraform_version": STATE_TERRAFORM_VERSION,
        "serial": 1,
        "lineage": lineage or str(uuid4()),
        "outputs": {},
        "resources": [_state_resource(resource) for resource in resources],
    }


def write_state_file(
    output_dir: Path,
    resources: Sequence[ExportedResource],
    lineage: str | None = None,
) -> Path:
    """Write ``terraform.tfstate`` into the output directory.

    Args:
        output_dir: Export output directory.
        resources: Resources to record.
        lineage: Optional lineage id.

    Returns:
        Written state file path.

    Raises:
        ExportRenderError: If the file cannot be written.
    """
    state_path = output_dir / STATE_FILE_NAME
    payload = build_state(resources, lineage)
    try:
        state_path.write_text(
            json.dumps(payload, indent=2, default=_json_default) + "\n",
            encoding="utf-8",
        )
    except OSError as error:
        raise ExportRenderError(
            f"Failed to write state file {state_path}: {error}. "
            "Check output directory permissions and retry."
        ) from error
    return state_path


def _state_resource(resource: ExportedResource) -> dict[str, Any]:
    attributes = dict(resource.attributes)
    attributes.setdefault("id", resource.ocid)
    return {
        "mode": "managed",
        "type": resource.resource_type,
        "name": resource.terraform_name,
        "provider": f"provider.{TERRAFORM_PROVIDER_NAME}",
        "instances": [{"schema_version": 0, "attributes": attributes}],
    }


def _json_default(value: object) -> object:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)
