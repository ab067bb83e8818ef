"""Terraform configuration rendering.

This module renders discovered resources as HCL in either the 0.11 or
the 0.12 dialect. The dialects differ in how references are written:
0.11 wraps every expression in an interpolation string while 0.12
writes expressions bare.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from core.constants import (
    COMPARTMENT_VARIABLE_NAME,
    REGION_VARIABLE_NAME,
    TERRAFORM_PROVIDER_NAME,
)
from core.types import ExportedResource, TfVersion
from export.resource_catalog import EXPORTABLE_RESOURCES, ExportableResource
from filtering.value_coercion import format_float

_INDENT = "  "
_CATALOG = {resource.resource_type: resource for resource in EXPORTABLE_RESOURCES}


class HclRenderer:
    """Render provider, variable, and resource blocks for one dialect."""

    def __init__(self, tf_version: TfVersion) -> None:
        self.tf_version = tf_version
        self._references: dict[str, str] = {}

    def expression(self, text: str) -> str:
        """Wrap a reference expression for the active dialect."""
        if self.tf_version == TfVersion.V0_11:
            return f'"${{{text}}}"'
        return text

    def register_references(self, resources: Iterable[ExportedResource], compartment_id: str) -> None:
        """Record OCIDs that render as references instead of literals.

        Args:
            resources: Exported resources, referenced by ``<type>.<name>.id``.
            compartment_id: Exported compartment, referenced by variable.
        """
        self._references = {
            resource.ocid: self.expression(
                f"{resource.resource_type}.{resource.terraform_name}.id"
            )
            for resource in resources
            if resource.ocid
        }
        self._references[compartment_id] = self.expression(f"var.{COMPARTMENT_VARIABLE_NAME}")

    def render_provider(self) -> str:
        lines = [
            f'provider "{TERRAFORM_PROVIDER_NAME}" {{',
            f"{_INDENT}region = {self.expression(f'var.{REGION_VARIABLE_NAME}')}",
            "}",
        ]
        return "\n".join(lines) + "\n"

    def render_variables(self, compartment_id: str, region: str | None) -> str:
        blocks = [self._variable_block(COMPARTMENT_VARIABLE_NAME, compartment_id)]
        if region:
            blocks.append(self._variable_block(REGION_VARIABLE_NAME, region))
        else:
            blocks.append(f'variable "{REGION_VARIABLE_NAME}" {{}}\n')
        return "\n".join(blocks)

    def render_resources(self, resources: Sequence[ExportedResource]) -> str:
        """Render resource blocks separated by blank lines."""
        return "\n".join(self.render_resource(resource) for resource in resources)

    def render_resource(self, resource: ExportedResource) -> str:
        """Render one resource block.

        Args:
            resource: Discovered resource with its catalog resource type.

        Returns:
            HCL text ending in a newline.
        """
        definition = _CATALOG[resource.resource_type]
        lines = [f'resource "{resource.resource_type}" "{resource.terraform_name}" {{']
        lines.extend(self._resource_body(definition, resource.attributes))
        lines.append("}")
        return "\n".join(lines) + "\n"

    def _resource_body(
        self,
        definition: ExportableResource,
        attributes: Mapping[str, Any],
    ) -> list[str]:
        lines: list[str] = []
        for terraform_attribute, source_attribute in definition.attributes:
            value = attributes.get(source_attribute)
            if value is None or value == {}:
                continue
            if terraform_attribute in definition.block_attributes:
                lines.extend(self._blocks(terraform_attribute, value, 1))
            else:
                lines.extend(self._assignment(terraform_attribute, value, 1))
        return lines

    def _blocks(self, name: str, value: Any, depth: int) -> list[str]:
        items = value if isinstance(value, list) else [value]
        indent = _INDENT * depth
        lines: list[str] = []
        for item in items:
            if not isinstance(item, Mapping):
                continue
            lines.append(f"{indent}{name} {{")
            for key, nested in item.items():
                if nested is None or nested == {}:
                    continue
                if isinstance(nested, Mapping) or _is_block_list(nested):
                    lines.extend(self._blocks(key, nested, depth + 1))
                else:
                    lines.extend(self._assignment(key, nested, depth + 1))
            lines.append(f"{indent}}}")
        return lines

    def _assignment(self, name: str, value: Any, depth: int) -> list[str]:
        indent = _INDENT * depth
        if isinstance(value, Mapping):
            flattened = _flatten_map(value)
            lines = [f"{indent}{name} = {{"]
            for key, item in flattened.items():
                lines.append(f"{indent}{_INDENT}{self.literal(key)} = {self.value(item)}")
            lines.append(f"{indent}}}")
            return lines
        if isinstance(value, (list, tuple)):
            if not value:
                return [f"{indent}{name} = []"]
            lines = [f"{indent}{name} = ["]
            for item in value:
                lines.append(f"{indent}{_INDENT}{self.value(item)},")
            lines.append(f"{indent}]")
            return lines
        return [f"{indent}{name} = {self.value(value)}"]

    def value(self, value: Any) -> str:
        """Render a scalar value, substituting known references."""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return format_float(value)
        text = str(value)
        if text in self._references:
            return self._references[text]
        return self.literal(text)

    def literal(self, text: str) -> str:
        """Quote and escape a string literal for the active dialect."""
        escaped = (
            text.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
            .replace("\t", "\\t")
            .replace("${", "$${")
        )
        if self.tf_version == TfVersion.V0_12:
            escaped = escaped.replace("%{", "%%{")
        return f'"{escaped}"'

    def _variable_block(self, name: str, default: str) -> str:
        return f'variable "{name}" {{\n{_INDENT}default = {self.literal(default)}\n}}\n'


def create_renderer(tf_version: TfVersion) -> HclRenderer:
    """Create a renderer for a Terraform syntax version."""
    return HclRenderer(tf_version)


def _is_block_list(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(item, Mapping) for item in value)


def _flatten_map(value: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    # Defined tags nest as {namespace: {key: value}} and render as "namespace.key".
    flattened: dict[str, Any] = {}
    for key, item in value.items():
        full_key = f"{prefix}{key}"
        if isinstance(item, Mapping):
            flattened.update(_flatten_map(item, f"{full_key}."))
        else:
            flattened[full_key] = item
    return flattened
