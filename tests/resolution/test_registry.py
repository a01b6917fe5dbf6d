"""Tests for compgen.resolution.registry."""

from __future__ import annotations

import pytest

from compgen.errors import DocumentLoadError, ImportPathError
from compgen.resolution.registry import ComponentRegistry, ComponentResource
from compgen.serialize.jsonld import NPMD, ContextParser, PrefetchedDocumentLoader

DEP_ROOT = "/work/app/node_modules/dep"
BASE_IRI = f"{NPMD}dep/^2.0.0/"


def _registry(resolution_context, contexts=None, import_paths=None) -> ComponentRegistry:
    return ComponentRegistry(
        component_modules={f"{NPMD}dep": f"{DEP_ROOT}/components/components.jsonld"},
        import_paths=import_paths or {f"{BASE_IRI}components/": f"{DEP_ROOT}/components/"},
        resolution_context=resolution_context,
        context_parser=ContextParser(
            PrefetchedDocumentLoader(resolution_context, files=contexts or {})
        ),
    )


@pytest.mark.anyio
async def test_published_components_are_registered(resolution_context, workspace) -> None:
    context_iri = workspace.published("dep", under="/work/app", components=["Thing", "Other"])
    registry = _registry(resolution_context, {context_iri: f"{DEP_ROOT}/components/context.jsonld"})

    await registry.register_available_modules()

    assert registry.components == [
        ComponentResource(
            iri=f"{BASE_IRI}components/Thing.jsonld#Thing",
            require_element="Thing",
            module_iri=f"{NPMD}dep",
            require_name="dep",
        ),
        ComponentResource(
            iri=f"{BASE_IRI}components/Other.jsonld#Other",
            require_element="Other",
            module_iri=f"{NPMD}dep",
            require_name="dep",
        ),
    ]


@pytest.mark.anyio
async def test_import_iri_uses_longest_matching_prefix(resolution_context) -> None:
    registry = _registry(
        resolution_context,
        import_paths={"urn:dep/": "/a/", "urn:dep/components/": "/b/"},
    )

    assert registry.import_iri_to_path("urn:dep/components/Foo.jsonld") == "/b/Foo.jsonld"
    assert registry.import_iri_to_path("urn:dep/config/x.json") == "/a/config/x.json"
    with pytest.raises(ImportPathError):
        registry.import_iri_to_path("urn:other/Foo.jsonld")


@pytest.mark.anyio
async def test_module_without_require_name_fails(resolution_context) -> None:
    resolution_context.write_json(f"{DEP_ROOT}/components/components.jsonld", {"@id": "urn:dep"})

    with pytest.raises(DocumentLoadError, match="requireName"):
        await _registry(resolution_context).register_available_modules()


@pytest.mark.anyio
async def test_import_cycles_are_followed_once(resolution_context) -> None:
    module_path = f"{DEP_ROOT}/components/components.jsonld"
    resolution_context.write_json(
        module_path,
        {"@id": "urn:dep", "requireName": "dep", "import": f"{BASE_IRI}components/A.jsonld"},
    )
    resolution_context.write_json(
        f"{DEP_ROOT}/components/A.jsonld",
        {
            "components": [{"@id": "urn:dep:A", "requireElement": "A"}],
            "import": [f"{BASE_IRI}components/components.jsonld", f"{BASE_IRI}components/A.jsonld"],
        },
    )
    registry = _registry(resolution_context)

    resources = await registry.register_module(module_path)

    assert [resource.iri for resource in resources] == ["urn:dep:A"]
