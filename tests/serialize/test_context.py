"""Tests for compgen.serialize.context."""

from __future__ import annotations

import pytest

from compgen.serialize.context import ContextConstructor, get_package_name_prefix
from compgen.serialize.definitions import ComponentDefinition, ComponentDocument, ParameterDefinition
from compgen.serialize.jsonld import COMPONENTSJS_CONTEXT_URL, NPMD
from tests._fixtures.packages import package_metadata

UNDEFINED = {"@type": "ParameterRangeUndefined"}
ARRAY = {"@type": "ParameterRangeArray", "parameterRangeValue": "xsd:string"}


def _union(*elements):
    return {"@type": "ParameterRangeUnion", "parameterRangeElements": list(elements)}


@pytest.mark.parametrize(
    "name, prefix",
    [("my-package", "mp"), ("@solid/community-server", "scs"), ("single", "s")],
)
def test_package_name_prefix(name: str, prefix: str) -> None:
    assert get_package_name_prefix(name) == prefix


def test_minimal_context_binds_the_versioned_namespace() -> None:
    context = ContextConstructor(package_metadata(version="4.5.6")).construct_context()

    assert context == {
        "@context": [
            COMPONENTSJS_CONTEXT_URL,
            {"npmd": NPMD, "mp": "npmd:my-package/^4.0.0/"},
        ]
    }


@pytest.mark.parametrize(
    "parameter_range, expected",
    [
        (ARRAY, True),
        ({"@type": "ParameterRangeCollectEntries", "parameterRangeCollectEntriesParameters": []}, True),
        (_union(UNDEFINED, ARRAY), True),
        (_union(ARRAY, UNDEFINED), True),
        (_union(UNDEFINED, _union(ARRAY, UNDEFINED)), True),
        (_union("mp:components/A.jsonld#A", "mp:components/B.jsonld#B"), False),
        (_union(UNDEFINED, "xsd:string"), False),
        (_union(UNDEFINED, ARRAY, "xsd:string"), False),
        ("xsd:string", False),
        (None, False),
    ],
)
def test_list_container_detection(parameter_range, expected: bool) -> None:
    assert ContextConstructor.is_parameter_range_list(parameter_range) is expected


def test_component_shortcuts_carry_type_scoped_terms() -> None:
    component_id = "mp:components/Foo.jsonld#Foo"
    document = ComponentDocument(
        context=[],
        id="npmd:my-package",
        components=[
            ComponentDefinition(
                id=component_id,
                type="Class",
                require_element="Foo",
                parameters=[
                    ParameterDefinition(id=f"{component_id}_name", range="xsd:string"),
                    ParameterDefinition(id=f"{component_id}_config", range="rdf:JSON"),
                    ParameterDefinition(
                        id=f"{component_id}_entries",
                        range={"@type": "ParameterRangeCollectEntries", "parameterRangeCollectEntriesParameters": []},
                    ),
                ],
            )
        ],
    )

    context = ContextConstructor(package_metadata()).construct_context({"/out/Foo": document})

    shortcut = context["@context"][1]["Foo"]
    assert shortcut == {
        "@id": component_id,
        "@prefix": True,
        "@context": {
            "name": {"@id": f"{component_id}_name"},
            "config": {"@id": f"{component_id}_config", "@type": "@json"},
            "entries": {"@id": f"{component_id}_entries", "@container": "@list"},
        },
    }
