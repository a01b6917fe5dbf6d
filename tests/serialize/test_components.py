"""Tests for compgen.serialize.components."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List

import pytest

from compgen.errors import ImportPathError
from compgen.resolution.external import ExternalModule
from compgen.serialize.components import ComponentConstructor
from compgen.serialize.context import ContextConstructor
from compgen.serialize.jsonld import ContextParser, PrefetchedDocumentLoader
from tests._fixtures.packages import (
    MemoryResolutionContext,
    external_components,
    load_declared,
    package_metadata,
    param,
    path_destination,
    raw,
    ref,
)

ROOT = "/work/my-package"
CONTEXT_IRI = "https://linkedsoftwaredependencies.org/bundles/npm/my-package/^1.0.0/components/context.jsonld"


def _constructor(types: List[Dict[str, Any]], metadata=None, external=None, documents=None) -> ComponentConstructor:
    metadata = metadata or package_metadata()
    class_index = {}
    for data in types:
        declared = load_declared(data, ROOT)
        class_index[declared.local_name] = declared
    return ComponentConstructor(
        package_metadata=metadata,
        file_extension="jsonld",
        context_constructor=ContextConstructor(metadata),
        path_destination=path_destination(ROOT),
        class_index=class_index,
        external_components=external or external_components(ROOT),
        context_parser=ContextParser(
            PrefetchedDocumentLoader(MemoryResolutionContext(), documents=documents or {})
        ),
    )


@pytest.mark.anyio
async def test_components_are_grouped_per_source_file() -> None:
    constructor = _constructor(
        [
            {"type": "class", **ref("my-package", "Foo", "lib/Foo"), "comment": "The foo"},
            {"type": "interface", **ref("my-package", "IFoo", "lib/Foo")},
            {"type": "class", **ref("my-package", "Base", "lib/util/Base"), "abstract": True},
        ]
    )

    documents = await constructor.construct_components()

    assert list(documents) == [f"{ROOT}/components/Foo", f"{ROOT}/components/util/Base"]
    foo_document = documents[f"{ROOT}/components/Foo"].to_dict()
    assert foo_document["@context"] == [CONTEXT_IRI]
    assert foo_document["@id"] == "npmd:my-package"
    assert foo_document["components"] == [
        {
            "@id": "mp:components/Foo.jsonld#Foo",
            "@type": "Class",
            "requireElement": "Foo",
            "comment": "The foo",
            "parameters": [],
            "constructorArguments": [],
        },
        {
            "@id": "mp:components/Foo.jsonld#IFoo",
            "@type": "AbstractClass",
            "requireElement": "IFoo",
            "parameters": [],
            "constructorArguments": [],
        },
    ]
    base = documents[f"{ROOT}/components/util/Base"].components[0]
    assert base.type == "AbstractClass"
    assert base.extends is None


@pytest.mark.anyio
async def test_extends_lists_superclass_then_interfaces() -> None:
    constructor = _constructor(
        [
            {
                "type": "class",
                **ref("my-package", "Foo", "lib/Foo"),
                "superClass": ref("my-package", "Base", "lib/Base"),
                "implementsInterfaces": [ref("my-package", "IFoo", "lib/IFoo")],
                "constructor": [param("name", raw("string"))],
            },
            {
                "type": "interface",
                **ref("my-package", "IFoo", "lib/IFoo"),
                "superInterfaces": [ref("my-package", "IBase", "lib/IBase")],
            },
        ]
    )

    documents = await constructor.construct_components()

    foo = documents[f"{ROOT}/components/Foo"].components[0]
    assert foo.extends == ["mp:components/Base.jsonld#Base", "mp:components/IFoo.jsonld#IFoo"]
    assert [parameter.id for parameter in foo.parameters] == ["mp:components/Foo.jsonld#Foo_name"]
    ifoo = documents[f"{ROOT}/components/IFoo"].components[0]
    assert ifoo.extends == ["mp:components/IBase.jsonld#IBase"]
    assert ifoo.constructor_arguments == []


@pytest.mark.anyio
async def test_crossed_contexts_are_added_once_per_document() -> None:
    external = external_components(
        ROOT,
        {"dep": ExternalModule(["urn:dep"], {"Thing": "http://dep.org/Thing", "Other": "http://dep.org/Other"})},
    )
    constructor = _constructor(
        [
            {
                "type": "class",
                **ref("my-package", "Foo", "lib/Foo"),
                "superClass": ref("dep", "Thing", "/deps/dep/Thing"),
                "implementsInterfaces": [ref("dep", "Other", "/deps/dep/Other")],
            }
        ],
        external=external,
        documents={"urn:dep": {"@context": {"dep": "http://dep.org/"}}},
    )

    documents = await constructor.construct_components()

    document = documents[f"{ROOT}/components/Foo"]
    assert document.context == [CONTEXT_IRI, "urn:dep"]
    assert document.components[0].extends == ["dep:Thing", "dep:Other"]


@pytest.mark.anyio
async def test_classes_reexported_from_other_packages_are_grouped_by_reexporting_file() -> None:
    external = external_components(ROOT, {"dep": ExternalModule([], {"Thing": "http://dep.org/Thing"})})
    constructor = _constructor(
        [
            {
                "type": "class",
                **ref("dep", "Thing", "/deps/dep/Thing"),
                "fileNameReferenced": "lib/index",
            }
        ],
        external=external,
    )

    documents = await constructor.construct_components()

    assert list(documents) == [f"{ROOT}/components/index"]
    assert documents[f"{ROOT}/components/index"].components[0].id == "http://dep.org/Thing"


@pytest.mark.anyio
async def test_index_document_imports_every_components_file() -> None:
    constructor = _constructor(
        [
            {"type": "class", **ref("my-package", "Foo", "lib/Foo")},
            {"type": "class", **ref("my-package", "Bar", "lib/sub/Bar")},
        ]
    )

    index = await constructor.construct_components_index(await constructor.construct_components())

    assert index == {
        "@context": [CONTEXT_IRI],
        "@id": "npmd:my-package",
        "@type": "Module",
        "requireName": "my-package",
        "import": ["mp:components/Foo.jsonld", "mp:components/sub/Bar.jsonld"],
    }


@pytest.mark.anyio
async def test_index_document_requires_an_import_path() -> None:
    metadata = replace(package_metadata(), import_paths={"urn:config/": "config/"})
    constructor = _constructor([{"type": "class", **ref("my-package", "Foo", "lib/Foo")}], metadata=metadata)

    with pytest.raises(ImportPathError):
        await constructor.construct_components_index(await constructor.construct_components())
