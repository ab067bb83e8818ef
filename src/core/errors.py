"""Tenancy export exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class TenancyExportError(Exception):
    """Base exception for all tenancy export failures."""


class ExportConfigError(TenancyExportError):
    """Raised for invalid runtime configuration or command arguments."""


class FilterDefinitionError(TenancyExportError):
    """Raised when a filter block or predicate file is malformed."""


class FilterRegexError(FilterDefinitionError):
    """Raised when a regex filter target fails to compile."""

    def __init__(self, attribute_name: str, pattern: str, reason: str) -> None:
        super().__init__(
            f"Invalid regular expression '{pattern}' for filter '{attribute_name}': {reason}. "
            "Fix the pattern or set regex to false."
        )
        self.attribute_name = attribute_name
        self.pattern = pattern


class ExportDiscoveryError(TenancyExportError):
    """Raised when resources cannot be listed from the cloud API."""


class ExportTransientError(ExportDiscoveryError):
    """Raised for API failures that are safe to retry."""


class ExportRetryTimeoutError(ExportDiscoveryError):
    """Raised when retries are exhausted before the retry timeout."""


class ExportRenderError(TenancyExportError):
    """Raised when configuration or state files cannot be written."""


class ExportDependencyError(TenancyExportError):
    """Raised when an optional runtime dependency is missing."""
