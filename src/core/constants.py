"""Core constants used across tenancy export modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_OCI_CONFIG_FILE = Path("~/.oci/config")
DEFAULT_OCI_PROFILE = "DEFAULT"
DEFAULT_RETRY_TIMEOUT = "15s"
DEFAULT_TF_VERSION = "0.12"
SUPPORTED_TF_VERSIONS = ("0.11", "0.12")
TERRAFORM_PROVIDER_NAME = "oci"
STATE_FILE_NAME = "terraform.tfstate"
STATE_FORMAT_VERSION = 4
STATE_TERRAFORM_VERSION = "0.12.31"
PROVIDER_FILE_NAME = "provider.tf"
VARIABLES_FILE_NAME = "vars.tf"
CONFIG_FILE_SUFFIX = ".tf"
COMPARTMENT_VARIABLE_NAME = "compartment_ocid"
REGION_VARIABLE_NAME = "region"
TERRAFORM_NAME_PREFIX = "export"
RETRY_INITIAL_DELAY_SECONDS = 0.5
RETRY_MAX_DELAY_SECONDS = 8.0
RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)
