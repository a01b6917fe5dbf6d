"""Construction of the JSON-LD context published alongside a package's components."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional

from ..models import PackageMetadata
from .definitions import (
    RANGE_ARRAY,
    RANGE_COLLECT_ENTRIES,
    RANGE_JSON,
    RANGE_UNDEFINED,
    RANGE_UNION,
    ComponentDocument,
    RangeDefinition,
)
from .identifiers import semver_major
from .jsonld import COMPONENTSJS_CONTEXT_URL, NPMD

_SHORTCUT_PATTERN = re.compile(r"[a-z0-9]*$", re.IGNORECASE)


def get_package_name_prefix(package_name: str) -> str:
    """Derive a compact prefix from the first letter of each package name segment."""
    parts = re.split(r"[/-]", package_name.replace("@", ""))
    return "".join(part[:1] for part in parts)


class ContextConstructor:
    """Builds the JSON-LD context for one package."""

    def __init__(self, package_metadata: PackageMetadata) -> None:
        self.package_metadata = package_metadata

    def namespace(self) -> str:
        major = semver_major(self.package_metadata.version)
        namespace = f"{self.package_metadata.module_iri}/^{major}.0.0/"
        if namespace.startswith(NPMD):
            return f"npmd:{namespace[len(NPMD):]}"
        return namespace

    def construct_context(
        self, components: Optional[Mapping[str, ComponentDocument]] = None
    ) -> Dict[str, Any]:
        """Construct a context, with component shortcuts when ``components`` is given."""
        prefix = self.package_metadata.prefix or get_package_name_prefix(self.package_metadata.name)
        shortcuts = self.construct_component_shortcuts(components) if components else {}
        return {
            "@context": [
                COMPONENTSJS_CONTEXT_URL,
                {
                    "npmd": NPMD,
                    prefix: self.namespace(),
                    **shortcuts,
                },
            ]
        }

    def construct_component_shortcuts(
        self, definitions: Mapping[str, ComponentDocument]
    ) -> Dict[str, Any]:
        shortcuts: Dict[str, Any] = {}
        for document in definitions.values():
            for component in document.components:
                # Always matches, possibly with an empty string.
                match = _SHORTCUT_PATTERN.search(component.id)
                shortcut = match.group(0) if match else ""

                type_scoped_context: Dict[str, Dict[str, str]] = {}
                for parameter in component.parameters:
                    term: Dict[str, str] = {"@id": parameter.id}
                    if parameter.range == RANGE_JSON:
                        term["@type"] = "@json"
                    if self.is_parameter_range_list(parameter.range):
                        term["@container"] = "@list"
                    type_scoped_context[parameter.id[len(component.id) + 1:]] = term

                shortcuts[shortcut] = {
                    "@id": component.id,
                    "@prefix": True,
                    "@context": type_scoped_context,
                }
        return shortcuts

    @classmethod
    def is_parameter_range_list(cls, parameter_range: Optional[RangeDefinition]) -> bool:
        if not isinstance(parameter_range, dict):
            return False
        range_type = parameter_range.get("@type")
        if range_type in (RANGE_ARRAY, RANGE_COLLECT_ENTRIES):
            return True
        if range_type == RANGE_UNION:
            elements = parameter_range.get("parameterRangeElements") or []
            if len(elements) == 2:
                left, right = elements
                return (cls.is_parameter_range_undefined(left) and cls.is_parameter_range_list(right)) or (
                    cls.is_parameter_range_undefined(right) and cls.is_parameter_range_list(left)
                )
        return False

    @staticmethod
    def is_parameter_range_undefined(parameter_range: RangeDefinition) -> bool:
        return isinstance(parameter_range, dict) and parameter_range.get("@type") == RANGE_UNDEFINED


__all__ = ["ContextConstructor", "get_package_name_prefix"]
