"""Public SDK surface for tenancy export.

This module provides a stable import path for library users.
It re-exports the client, the filter engine, and typed option models.
"""

from __future__ import annotations

from core.config import ExportConfig
from core.errors import FilterDefinitionError, FilterRegexError, TenancyExportError
from core.types import ExportCommandArgs, ExportResult, ExportStatus, TfVersion
from export.export_sdk import TenancyExportClient
from filtering.filter_engine import apply_filters
from filtering.predicates import Predicate, PredicateSet, default_fingerprint, name_fingerprint

__all__ = [
    "ExportCommandArgs",
    "ExportConfig",
    "ExportResult",
    "ExportStatus",
    "FilterDefinitionError",
    "FilterRegexError",
    "Predicate",
    "PredicateSet",
    "TenancyExportClient",
    "TenancyExportError",
    "TfVersion",
    "apply_filters",
    "default_fingerprint",
    "name_fingerprint",
]
