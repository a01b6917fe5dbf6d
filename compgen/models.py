"""Core data models shared across compgen components.

Everything that crosses the input boundary (the upstream type index) is a
frozen pydantic model so malformed documents fail at load time. Package
metadata and path layout are plain dataclasses built by compgen itself.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel


class InputModel(BaseModel):
    """Frozen base for models read from the upstream type index."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


def absolutize(value: str, info: ValidationInfo) -> str:
    """Resolve a package-relative path against the ``package_root`` context entry."""
    context = info.context or {}
    root = context.get("package_root")
    if not root or value.startswith("/"):
        return value
    return posixpath.normpath(posixpath.join(root, value))


# Class references


class ClassReference(InputModel):
    """An exported class or interface name and where it is declared."""

    package_name: str
    local_name: str
    file_name: str
    file_name_referenced: Optional[str] = None

    @field_validator("file_name", "file_name_referenced")
    @classmethod
    def _resolve_paths(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if value is None:
            return None
        return absolutize(value, info)

    @property
    def referenced_file(self) -> str:
        """File through which the reference was reached (defaults to the declaring file)."""
        return self.file_name_referenced or self.file_name


class ClassLoaded(ClassReference):
    """A declared class together with its constructor."""

    type: Literal["class"] = "class"
    abstract: bool = False
    comment: Optional[str] = None
    super_class: Optional[ClassReference] = None
    implements_interfaces: List[ClassReference] = Field(default_factory=list)
    constructor: List["ParameterData"] = Field(default_factory=list)


class InterfaceLoaded(ClassReference):
    """A declared interface; interfaces never own a constructor."""

    type: Literal["interface"] = "interface"
    comment: Optional[str] = None
    super_interfaces: List[ClassReference] = Field(default_factory=list)


DeclaredType = Annotated[Union[ClassLoaded, InterfaceLoaded], Field(discriminator="type")]


# Parameter ranges


class RawRange(InputModel):
    type: Literal["raw"] = "raw"
    value: str


class OverrideRange(InputModel):
    type: Literal["override"] = "override"
    value: str


class LiteralRange(InputModel):
    type: Literal["literal"] = "literal"
    value: Union[StrictBool, StrictInt, StrictFloat, StrictStr]


class UndefinedRange(InputModel):
    type: Literal["undefined"] = "undefined"


class WildcardRange(InputModel):
    type: Literal["wildcard"] = "wildcard"


class GenericReferenceRange(InputModel):
    type: Literal["genericTypeReference"] = "genericTypeReference"
    value: str


class ClassRange(InputModel):
    type: Literal["class"] = "class"
    value: ClassReference


class NestedRange(InputModel):
    type: Literal["nested"] = "nested"
    value: List["ParameterData"]


class UnionRange(InputModel):
    type: Literal["union"] = "union"
    elements: List["ParameterRange"]


class IntersectionRange(InputModel):
    type: Literal["intersection"] = "intersection"
    elements: List["ParameterRange"]


class TupleRange(InputModel):
    type: Literal["tuple"] = "tuple"
    elements: List["ParameterRange"]


class RestRange(InputModel):
    type: Literal["rest"] = "rest"
    value: "ParameterRange"


class ArrayRange(InputModel):
    type: Literal["array"] = "array"
    value: "ParameterRange"


class KeyofRange(InputModel):
    type: Literal["keyof"] = "keyof"
    value: "ParameterRange"


class TypeofRange(InputModel):
    type: Literal["typeof"] = "typeof"
    value: "ParameterRange"


class IndexedRange(InputModel):
    type: Literal["indexed"] = "indexed"
    object: "ParameterRange"
    index: "ParameterRange"


ParameterRange = Annotated[
    Union[
        RawRange,
        OverrideRange,
        LiteralRange,
        UndefinedRange,
        WildcardRange,
        GenericReferenceRange,
        ClassRange,
        NestedRange,
        UnionRange,
        IntersectionRange,
        TupleRange,
        RestRange,
        ArrayRange,
        KeyofRange,
        TypeofRange,
        IndexedRange,
    ],
    Field(discriminator="type"),
]

# Ranges that hold an ordered list of child ranges.
ELEMENT_RANGES = (UnionRange, IntersectionRange, TupleRange)
# Ranges that wrap exactly one child range.
WRAPPER_RANGES = (RestRange, ArrayRange, KeyofRange, TypeofRange)


# Default values


class RawDefault(InputModel):
    type: Literal["raw"] = "raw"
    value: str


class IriDefault(InputModel):
    type: Literal["iri"] = "iri"
    value: Optional[str] = None
    base_component: ClassReference
    type_iri: Optional[str] = None


DefaultValue = Annotated[Union[RawDefault, IriDefault], Field(discriminator="type")]


class DefaultNested(InputModel):
    """A default value targeting a nested field path below a parameter."""

    param_path: List[str]
    value: DefaultValue


class ParameterData(InputModel):
    """One constructor parameter, or one entry of a nested field group."""

    type: Literal["field", "index"] = "field"
    name: str
    range: ParameterRange
    comment: Optional[str] = None
    defaults: List[DefaultValue] = Field(default_factory=list)
    default_nested: List[DefaultNested] = Field(default_factory=list)


# Per-file export tables produced by the upstream analysis step


class ImportedElement(InputModel):
    local_name: str
    file_name: str

    @field_validator("file_name")
    @classmethod
    def _resolve_path(cls, value: str, info: ValidationInfo) -> str:
        return absolutize(value, info)


class FileReference(InputModel):
    package_name: str
    file_name: str

    @field_validator("file_name")
    @classmethod
    def _resolve_path(cls, value: str, info: ValidationInfo) -> str:
        return absolutize(value, info)


class FileElements(InputModel):
    """Exports, declarations and imports of a single declarations file."""

    exported_classes: List[str] = Field(default_factory=list)
    exported_interfaces: List[str] = Field(default_factory=list)
    exported_imported_elements: Dict[str, ImportedElement] = Field(default_factory=dict)
    exported_imported_all: List[FileReference] = Field(default_factory=list)
    exported_unknowns: Dict[str, str] = Field(default_factory=dict)
    declared_classes: List[str] = Field(default_factory=list)
    declared_interfaces: List[str] = Field(default_factory=list)
    imported_elements: Dict[str, ClassReference] = Field(default_factory=dict)


for _model in (
    ClassLoaded,
    NestedRange,
    UnionRange,
    IntersectionRange,
    TupleRange,
    RestRange,
    ArrayRange,
    KeyofRange,
    TypeofRange,
    IndexedRange,
    DefaultNested,
    ParameterData,
):
    _model.model_rebuild()


# Package layout


@dataclass(frozen=True)
class PackageMetadata:
    """Descriptor of a package: identity, published contexts and import paths."""

    name: str
    version: str
    module_iri: str
    contexts: Dict[str, str] = field(default_factory=dict)
    import_paths: Dict[str, str] = field(default_factory=dict)
    components_path: Optional[str] = None
    prefix: Optional[str] = None


@dataclass(frozen=True)
class PathDestination:
    """Absolute posix paths used to map source files onto component files."""

    package_root_directory: str
    original_path: str
    replacement_path: str


__all__ = [
    "ArrayRange",
    "ClassLoaded",
    "ClassRange",
    "ClassReference",
    "DeclaredType",
    "InputModel",
    "DefaultNested",
    "DefaultValue",
    "ELEMENT_RANGES",
    "FileElements",
    "FileReference",
    "GenericReferenceRange",
    "ImportedElement",
    "IndexedRange",
    "InterfaceLoaded",
    "IntersectionRange",
    "IriDefault",
    "KeyofRange",
    "LiteralRange",
    "NestedRange",
    "OverrideRange",
    "PackageMetadata",
    "ParameterData",
    "ParameterRange",
    "PathDestination",
    "RawDefault",
    "RawRange",
    "RestRange",
    "TupleRange",
    "TypeofRange",
    "UndefinedRange",
    "UnionRange",
    "WildcardRange",
    "WRAPPER_RANGES",
    "absolutize",
]
