"""Runtime configuration model for tenancy export.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_OCI_CONFIG_FILE,
    DEFAULT_OCI_PROFILE,
    DEFAULT_RETRY_TIMEOUT,
    DEFAULT_TF_VERSION,
)
from core.durations import parse_duration
from core.errors import ExportConfigError
from core.types import TfVersion


@dataclass(frozen=True)
class ExportConfig:
    """Validated runtime configuration.

    Attributes:
        oci_config_file: Path to the OCI SDK config file.
        oci_profile: Profile name inside the OCI config file.
        region: Optional region override for API clients.
        retry_timeout_seconds: Default retry budget for API calls.
        tf_version: Default configuration dialect for exports.
    """

    oci_config_file: Path
    oci_profile: str
    region: str | None
    retry_timeout_seconds: float
    tf_version: TfVersion

    @classmethod
    def from_env(cls) -> "ExportConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ExportConfigError: If environment values are invalid.
        """
        config_file_value = os.getenv(
            "TENANCY_EXPORT_OCI_CONFIG_FILE", str(DEFAULT_OCI_CONFIG_FILE)
        )
        oci_profile = os.getenv("TENANCY_EXPORT_OCI_PROFILE", DEFAULT_OCI_PROFILE)
        region = os.getenv("TENANCY_EXPORT_REGION") or None
        retry_timeout_value = os.getenv("TENANCY_EXPORT_RETRY_TIMEOUT", DEFAULT_RETRY_TIMEOUT)
        tf_version_value = os.getenv("TENANCY_EXPORT_TF_VERSION", DEFAULT_TF_VERSION)
        return cls(
            oci_config_file=Path(config_file_value).expanduser(),
            oci_profile=oci_profile,
            region=region,
            retry_timeout_seconds=_parse_retry_timeout(retry_timeout_value),
            tf_version=parse_tf_version(tf_version_value),
        )


def parse_tf_version(raw_value: str | None) -> TfVersion:
    """Parse a Terraform syntax version value.

    Args:
        raw_value: Raw version string; empty selects the default.

    Returns:
        Parsed Terraform version.

    Raises:
        ExportConfigError: If the version is not supported.
    """
    if not raw_value:
        return TfVersion(DEFAULT_TF_VERSION)
    try:
        return TfVersion(raw_value)
    except ValueError as error:
        supported = ", ".join(version.value for version in TfVersion)
        raise ExportConfigError(
            f"Invalid tf_version '{raw_value}', supported values: {supported}."
        ) from error


def _parse_retry_timeout(raw_value: str) -> float:
    try:
        return parse_duration(raw_value)
    except ExportConfigError as error:
        raise ExportConfigError(
            f"Invalid TENANCY_EXPORT_RETRY_TIMEOUT value: {error}"
        ) from error
