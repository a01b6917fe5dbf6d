"""Translation of constructor parameters into parameter definitions.

The traversal runs in two phases. A synchronous walk over the parameter
tree mints every identifier and fixes the order of the parameter list.
Range and default resolution, which may need to load external contexts,
then runs concurrently with each branch writing only to its own
parameter and its own list of crossed contexts; those lists are merged
in walk order afterwards.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from ..concurrency import gather_or_cancel
from ..errors import InvalidDefaultValueError, InvalidRangeCompositionError
from ..models import (
    ArrayRange,
    ClassLoaded,
    ClassRange,
    DefaultValue,
    GenericReferenceRange,
    IndexedRange,
    IntersectionRange,
    IriDefault,
    KeyofRange,
    LiteralRange,
    NestedRange,
    OverrideRange,
    ParameterData,
    ParameterRange,
    RawRange,
    RestRange,
    TupleRange,
    TypeofRange,
    UndefinedRange,
    UnionRange,
    WildcardRange,
)
from .definitions import (
    RANGE_ARRAY,
    RANGE_COLLECT_ENTRIES,
    RANGE_GENERIC,
    RANGE_INDEXED,
    RANGE_INTERSECTION,
    RANGE_JSON,
    RANGE_KEYOF,
    RANGE_LITERAL,
    RANGE_REST,
    RANGE_TUPLE,
    RANGE_TYPEOF,
    RANGE_UNDEFINED,
    RANGE_UNION,
    RANGE_WILDCARD,
    ArgumentFields,
    ArgumentReference,
    CollectEntriesDefinition,
    ConstructorArgument,
    DefaultValueDefinition,
    FieldDefinition,
    ParameterDefinition,
    RangeDefinition,
)
from .identifiers import FieldScope, IdentifierMinter

_ELEMENT_TYPES = {
    UnionRange: RANGE_UNION,
    IntersectionRange: RANGE_INTERSECTION,
    TupleRange: RANGE_TUPLE,
}
_WRAPPER_TYPES = {
    RestRange: RANGE_REST,
    ArrayRange: RANGE_ARRAY,
    KeyofRange: RANGE_KEYOF,
    TypeofRange: RANGE_TYPEOF,
}


@dataclass
class _PendingParameter:
    definition: ParameterDefinition
    range: ParameterRange
    defaults: List[DefaultValue]


class ParameterTransformer:
    """Builds constructor arguments and parameter definitions for one class."""

    def __init__(self, minter: IdentifierMinter) -> None:
        self.minter = minter

    async def construct_parameters(
        self,
        class_reference: ClassLoaded,
        parameters: List[ParameterDefinition],
        external_contexts: List[str],
    ) -> List[ConstructorArgument]:
        """Return constructor arguments; parameter definitions are appended to ``parameters``."""
        scope = FieldScope()
        pending: List[_PendingParameter] = []
        arguments = [
            self.parameter_data_to_constructor_argument(
                class_reference,
                parameter,
                parameters,
                self.minter.field_name_to_id(class_reference, parameter.name, scope),
                scope,
                pending,
            )
            for parameter in class_reference.constructor
        ]
        await self._resolve_pending(pending, external_contexts)
        return arguments

    def parameter_data_to_constructor_argument(
        self,
        class_reference: ClassLoaded,
        parameter_data: ParameterData,
        parameters: List[ParameterDefinition],
        field_id: str,
        scope: FieldScope,
        pending: List[_PendingParameter],
    ) -> ConstructorArgument:
        if parameter_data.type == "field":
            scope = scope.with_field(parameter_data.name)
            if parameter_data.default_nested:
                scope = scope.with_default_nested(parameter_data.default_nested)

        nested = _nested_member(parameter_data.range)
        if nested is not None:
            fields = [
                self.construct_field_definition_nested(
                    class_reference,
                    parameter_data,
                    parameters,
                    sub_parameter,
                    field_id,
                    scope,
                    pending,
                )
                for sub_parameter in nested.value
            ]
            return ArgumentFields(id=f"{field_id}__constructorArgument", fields=fields)

        defaults: List[DefaultValue] = list(parameter_data.defaults)
        current_path = "_".join(scope.parent_field_names)
        for default_nested in scope.default_nested:
            if "_".join(default_nested.param_path) == current_path:
                defaults.append(default_nested.value)

        definition = ParameterDefinition(id=field_id, comment=parameter_data.comment)
        parameters.append(definition)
        pending.append(_PendingParameter(definition, parameter_data.range, defaults))
        return ArgumentReference(id=field_id)

    def construct_field_definition_nested(
        self,
        class_reference: ClassLoaded,
        parameter_data: ParameterData,
        parameters: List[ParameterDefinition],
        sub_parameter: ParameterData,
        field_id: str,
        scope: FieldScope,
        pending: List[_PendingParameter],
    ) -> Union[FieldDefinition, CollectEntriesDefinition]:
        if sub_parameter.type == "field":
            return FieldDefinition(
                key_raw=sub_parameter.name,
                value=self.parameter_data_to_constructor_argument(
                    class_reference,
                    sub_parameter,
                    parameters,
                    self.minter.field_name_to_id(class_reference, sub_parameter.name, scope),
                    scope,
                    pending,
                ),
            )

        # Indexed entries key the entries of the enclosing field.
        if parameter_data.type == "index":
            raise InvalidRangeCompositionError(
                f"Detected illegal indexed element inside a non-field in "
                f"{class_reference.local_name} at {class_reference.file_name}"
            )

        # Drop the enclosing field name so it does not occur twice in the identifier.
        scope = scope.without_last_field()
        id_collect_entries = field_id
        id_key = self.minter.field_name_to_id(class_reference, f"{parameter_data.name}_key", scope)
        id_value = self.minter.field_name_to_id(class_reference, f"{parameter_data.name}_value", scope)

        sub_parameters: List[ParameterDefinition] = [ParameterDefinition(id=id_key)]
        value = self.parameter_data_to_constructor_argument(
            class_reference,
            sub_parameter,
            sub_parameters,
            id_value,
            scope,
            pending,
        )

        parameters.append(
            ParameterDefinition(
                id=id_collect_entries,
                range={
                    "@type": RANGE_COLLECT_ENTRIES,
                    "parameterRangeCollectEntriesParameters": sub_parameters,
                },
                comment=parameter_data.comment,
            )
        )
        return CollectEntriesDefinition(collect_entries=id_collect_entries, key=id_key, value=value)

    async def _resolve_pending(
        self, pending: Sequence[_PendingParameter], external_contexts: List[str]
    ) -> None:
        sinks: List[List[str]] = [[] for _ in pending]
        await gather_or_cancel(
            *(self._resolve_parameter(entry, sink) for entry, sink in zip(pending, sinks))
        )
        for sink in sinks:
            external_contexts.extend(sink)

    async def _resolve_parameter(self, entry: _PendingParameter, sink: List[str]) -> None:
        definition = entry.definition
        definition.range = await self.construct_parameter_range(definition.id, entry.range, sink)
        for default_value in entry.defaults:
            definition.default.append(
                await self.construct_default_value(definition.id, default_value, entry.range, sink)
            )

    async def construct_parameter_range(
        self, field_id: str, parameter_range: ParameterRange, external_contexts: List[str]
    ) -> RangeDefinition:
        """Resolve the range of the parameter ``field_id`` into its serializable range definition."""
        if isinstance(parameter_range, (RawRange, OverrideRange)):
            return RANGE_JSON if parameter_range.value == "json" else f"xsd:{parameter_range.value}"
        if isinstance(parameter_range, LiteralRange):
            return {"@type": RANGE_LITERAL, "parameterRangeValue": parameter_range.value}
        if isinstance(parameter_range, ClassRange):
            return await self.minter.class_name_to_id(parameter_range.value, external_contexts)
        if isinstance(parameter_range, NestedRange):
            raise InvalidRangeCompositionError(
                f"Composition of nested fields is unsupported in {field_id}"
            )
        if isinstance(parameter_range, UndefinedRange):
            return {"@type": RANGE_UNDEFINED}
        if isinstance(parameter_range, WildcardRange):
            return {"@type": RANGE_WILDCARD}
        if isinstance(parameter_range, GenericReferenceRange):
            return {"@type": RANGE_GENERIC, "parameterRangeGenericType": parameter_range.value}
        if isinstance(parameter_range, tuple(_ELEMENT_TYPES)):
            elements = await self._construct_children(field_id, parameter_range.elements, external_contexts)
            return {
                "@type": _ELEMENT_TYPES[type(parameter_range)],
                "parameterRangeElements": elements,
            }
        if isinstance(parameter_range, tuple(_WRAPPER_TYPES)):
            return {
                "@type": _WRAPPER_TYPES[type(parameter_range)],
                "parameterRangeValue": await self.construct_parameter_range(
                    field_id, parameter_range.value, external_contexts
                ),
            }
        if isinstance(parameter_range, IndexedRange):
            indexed_object, indexed_index = await self._construct_children(
                field_id, [parameter_range.object, parameter_range.index], external_contexts
            )
            return {
                "@type": RANGE_INDEXED,
                "parameterRangeIndexedObject": indexed_object,
                "parameterRangeIndexedIndex": indexed_index,
            }
        raise InvalidRangeCompositionError(f"Unsupported parameter range {parameter_range!r}")

    async def _construct_children(
        self, field_id: str, children: Sequence[ParameterRange], external_contexts: List[str]
    ) -> List[RangeDefinition]:
        sinks: List[List[str]] = [[] for _ in children]
        resolved = await gather_or_cancel(
            *(self.construct_parameter_range(field_id, child, sink) for child, sink in zip(children, sinks))
        )
        for sink in sinks:
            external_contexts.extend(sink)
        return list(resolved)

    async def construct_default_value(
        self,
        field_id: str,
        default_value: DefaultValue,
        parameter_range: ParameterRange,
        external_contexts: List[str],
    ) -> DefaultValueDefinition:
        if not isinstance(default_value, IriDefault):
            if isinstance(parameter_range, OverrideRange) and parameter_range.value == "json":
                try:
                    parsed: Any = json.loads(default_value.value)
                except json.JSONDecodeError as exc:
                    raise InvalidDefaultValueError(
                        f"JSON parsing error in default value of {field_id}: {exc}"
                    ) from exc
                return {"@type": "@json", "@value": parsed}
            return default_value.value

        # Relative IRIs are resolved against the identifier of their base component.
        iri: Optional[str] = default_value.value
        if iri and ":" not in iri:
            base_id = await self.minter.class_name_to_id(default_value.base_component, external_contexts)
            iri = f"{base_id}_{iri}"

        definition: Dict[str, Any] = {}
        if iri:
            definition["@id"] = iri
        if default_value.type_iri:
            definition["@type"] = default_value.type_iri
        return definition


def _nested_member(parameter_range: ParameterRange) -> Optional[NestedRange]:
    if isinstance(parameter_range, NestedRange):
        return parameter_range
    if isinstance(parameter_range, UnionRange):
        for element in parameter_range.elements:
            if isinstance(element, NestedRange):
                return element
    return None


__all__ = ["ParameterTransformer"]
