"""Output-side component definitions and their JSON-LD serialization."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

RangeDefinition = Union[str, Dict[str, Any]]
DefaultValueDefinition = Union[str, Dict[str, Any]]

RANGE_JSON = "rdf:JSON"
RANGE_ARRAY = "ParameterRangeArray"
RANGE_REST = "ParameterRangeRest"
RANGE_UNION = "ParameterRangeUnion"
RANGE_INTERSECTION = "ParameterRangeIntersection"
RANGE_TUPLE = "ParameterRangeTuple"
RANGE_LITERAL = "ParameterRangeLiteral"
RANGE_UNDEFINED = "ParameterRangeUndefined"
RANGE_WILDCARD = "ParameterRangeWildcard"
RANGE_GENERIC = "ParameterRangeGenericTypeReference"
RANGE_KEYOF = "ParameterRangeKeyof"
RANGE_TYPEOF = "ParameterRangeTypeof"
RANGE_INDEXED = "ParameterRangeIndexed"
RANGE_COLLECT_ENTRIES = "ParameterRangeCollectEntries"


@dataclass
class ParameterDefinition:
    id: str
    range: Optional[RangeDefinition] = None
    default: List[DefaultValueDefinition] = field(default_factory=list)
    comment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"@id": self.id}
        if self.range is not None:
            data["range"] = to_json(self.range)
        if self.default:
            data["default"] = to_json(self.default)
        if self.comment:
            data["comment"] = self.comment
        return data


@dataclass
class ArgumentReference:
    id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"@id": self.id}


@dataclass
class FieldDefinition:
    key_raw: str
    value: "ConstructorArgument"

    def to_dict(self) -> Dict[str, Any]:
        return {"keyRaw": self.key_raw, "value": self.value.to_dict()}


@dataclass
class CollectEntriesDefinition:
    collect_entries: str
    key: str
    value: "ConstructorArgument"

    def to_dict(self) -> Dict[str, Any]:
        return {"collectEntries": self.collect_entries, "key": self.key, "value": self.value.to_dict()}


@dataclass
class ArgumentFields:
    id: str
    fields: List[Union[FieldDefinition, CollectEntriesDefinition]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"@id": self.id, "fields": [entry.to_dict() for entry in self.fields]}


ConstructorArgument = Union[ArgumentReference, ArgumentFields]


@dataclass
class ComponentDefinition:
    id: str
    type: str
    require_element: str
    parameters: List[ParameterDefinition] = field(default_factory=list)
    constructor_arguments: List[ConstructorArgument] = field(default_factory=list)
    extends: Optional[List[str]] = None
    comment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "@id": self.id,
            "@type": self.type,
            "requireElement": self.require_element,
        }
        if self.extends:
            data["extends"] = list(self.extends)
        if self.comment:
            data["comment"] = self.comment
        data["parameters"] = [parameter.to_dict() for parameter in self.parameters]
        data["constructorArguments"] = [argument.to_dict() for argument in self.constructor_arguments]
        return data


@dataclass
class ComponentDocument:
    """One generated components file."""

    context: List[str]
    id: str
    components: List[ComponentDefinition] = field(default_factory=list)

    def add_context(self, iri: str) -> None:
        if iri not in self.context:
            self.context.append(iri)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "@context": list(self.context),
            "@id": self.id,
            "components": [component.to_dict() for component in self.components],
        }


def to_json(value: Any) -> Any:
    """Recursively convert definitions inside ranges and defaults to plain JSON values."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_json(item) for item in value]
    return value


__all__ = [
    "ArgumentFields",
    "ArgumentReference",
    "CollectEntriesDefinition",
    "ComponentDefinition",
    "ComponentDocument",
    "ConstructorArgument",
    "DefaultValueDefinition",
    "FieldDefinition",
    "ParameterDefinition",
    "RANGE_ARRAY",
    "RANGE_COLLECT_ENTRIES",
    "RANGE_GENERIC",
    "RANGE_INDEXED",
    "RANGE_INTERSECTION",
    "RANGE_JSON",
    "RANGE_KEYOF",
    "RANGE_LITERAL",
    "RANGE_REST",
    "RANGE_TUPLE",
    "RANGE_TYPEOF",
    "RANGE_UNDEFINED",
    "RANGE_UNION",
    "RANGE_WILDCARD",
    "RangeDefinition",
    "to_json",
]
