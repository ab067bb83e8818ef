"""Tenancy export CLI entry points.
This module exposes export, resource listing, and record filtering commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
from pathlib import Path
import sys
from typing import Any, Sequence

from core.config import ExportConfig, parse_tf_version
from core.constants import DEFAULT_RETRY_TIMEOUT, SUPPORTED_TF_VERSIONS
from core.durations import parse_duration
from core.errors import TenancyExportError
from core.logging_config import get_logger
from core.types import ExportCommandArgs
from export.export_sdk import TenancyExportClient
from filtering.filter_file import load_predicate_file, load_records_file
from filtering.predicates import name_fingerprint

_LOGGER = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="tenancy-export",
        description="Export OCI tenancy resources as Terraform configuration",
    )
    parser.add_argument("--oci_config_file", help="Override TENANCY_EXPORT_OCI_CONFIG_FILE")
    parser.add_argument("--oci_profile", help="Override TENANCY_EXPORT_OCI_PROFILE")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_export_command(subparsers)
    _add_list_export_resources_command(subparsers)
    _add_filter_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the tenancy export CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.oci_config_file, args.oci_profile)
        if args.command == "export":
            return _run_export_command(client, args)
        if args.command == "list_export_resources":
            return _run_list_export_resources_command(client)
        if args.command == "filter":
            return _run_filter_command(client, args)
    except TenancyExportError as error:
        _LOGGER.error("command_failed", command=args.command, error=str(error))
        print(f"[ERROR]: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def run() -> None:
    """Console script entry point."""
    raise SystemExit(main())


def _build_client(oci_config_file: str | None, oci_profile: str | None) -> TenancyExportClient:
    """Build SDK client with optional OCI config overrides.

    Args:
        oci_config_file: Optional OCI config file path.
        oci_profile: Optional OCI config profile.

    Returns:
        Configured SDK client.
    """
    config = ExportConfig.from_env()
    if oci_config_file:
        config = replace(config, oci_config_file=Path(oci_config_file).expanduser())
    if oci_profile:
        config = replace(config, oci_profile=oci_profile)
    return TenancyExportClient(config)


def _run_export_command(client: TenancyExportClient, args: argparse.Namespace) -> int:
    """Handle export command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Export status code.
    """
    tf_version = parse_tf_version(args.tf_version) if args.tf_version else client.config.tf_version
    if args.retry_timeout:
        retry_timeout_seconds = parse_duration(args.retry_timeout)
    else:
        retry_timeout_seconds = client.config.retry_timeout_seconds
    options = ExportCommandArgs(
        output_dir=args.output_path or "",
        compartment_id=args.compartment_id,
        compartment_name=args.compartment_name,
        services=_split_list(args.services),
        exclude_services=_split_list(args.exclude_services),
        ids=_split_list(args.ids),
        generate_state=args.generate_state,
        tf_version=tf_version,
        retry_timeout_seconds=retry_timeout_seconds,
    )
    result = client.export(options)
    for failure in result.failures:
        print(f"[ERROR]: {failure.resource_type}: {failure.message}", file=sys.stderr)
    for path in result.written_files:
        print(path)
    return int(result.status)


def _run_list_export_resources_command(client: TenancyExportClient) -> int:
    """Handle list_export_resources command.

    Args:
        client: SDK client.

    Returns:
        Exit code.
    """
    for service, resource_types in client.list_exportable_resources().items():
        print(f"{service}:")
        for resource_type in resource_types:
            print(f"\t{resource_type}")
    return 0


def _run_filter_command(client: TenancyExportClient, args: argparse.Namespace) -> int:
    """Handle filter command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    fingerprint = name_fingerprint if args.collapse_by_name else None
    predicates = load_predicate_file(args.filters, fingerprint) if args.filters else None
    records = load_records_file(args.records)
    filtered = client.filter(predicates, records)
    print(json.dumps(filtered, indent=2, sort_keys=True))
    return 0


def _split_list(raw_value: str | None) -> tuple[str, ...]:
    if not raw_value:
        return ()
    return tuple(item.strip() for item in raw_value.split(",") if item.strip())


def _add_export_command(subparsers: Any) -> None:
    """Register export subcommand."""
    parser = subparsers.add_parser("export", help="Export a compartment as Terraform configuration")
    parser.add_argument(
        "--compartment_id",
        help="OCID of a compartment to export; the root compartment is used by default",
    )
    parser.add_argument("--compartment_name", help="The name of a compartment to export")
    parser.add_argument(
        "--output_path",
        help="Path to output generated configurations and state files",
    )
    parser.add_argument(
        "--services",
        help="Comma-separated list of services to export; all services by default",
    )
    parser.add_argument(
        "--exclude_services",
        help="Comma-separated list of services to skip; wins over --services",
    )
    parser.add_argument(
        "--ids",
        help="Comma-separated list of resource OCIDs or import ids to export",
    )
    parser.add_argument(
        "--generate_state",
        action="store_true",
        help="Also write a terraform.tfstate for the discovered resources",
    )
    parser.add_argument(
        "--tf_version",
        choices=SUPPORTED_TF_VERSIONS,
        help="Terraform syntax version of generated configuration (state is always 0.12)",
    )
    parser.add_argument(
        "--retry_timeout",
        help=f"Duration API calls retry on errors, e.g. 30s or 1m (default {DEFAULT_RETRY_TIMEOUT})",
    )


def _add_list_export_resources_command(subparsers: Any) -> None:
    """Register list_export_resources subcommand."""
    subparsers.add_parser(
        "list_export_resources",
        help="List exportable resource types grouped by service",
    )


def _add_filter_command(subparsers: Any) -> None:
    """Register filter subcommand."""
    parser = subparsers.add_parser("filter", help="Filter JSON records with predicate blocks")
    parser.add_argument("--records", required=True, help="JSON array or .jsonl file of records")
    parser.add_argument("--filters", help="YAML or JSON file of filter blocks")
    parser.add_argument(
        "--collapse_by_name",
        action="store_true",
        help="Keep only the first filter block for each attribute name",
    )
