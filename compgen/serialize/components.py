"""Construction of component definitions for all classes of a package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..concurrency import gather_or_cancel
from ..models import (
    ClassLoaded,
    ClassReference,
    DeclaredType,
    PackageMetadata,
    PathDestination,
)
from .context import ContextConstructor
from .definitions import ComponentDefinition, ComponentDocument, ParameterDefinition
from .identifiers import (
    IdentifierMinter,
    get_import_path_iri,
    get_path_destination,
    get_path_relative,
)
from .jsonld import ContextParser, JsonLdContext
from .parameters import ParameterTransformer

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..resolution.external import ExternalComponents

ExternalContextCallback = Callable[[str], None]


class ComponentConstructor:
    """Creates declarative components for the classes and interfaces of one package."""

    def __init__(
        self,
        *,
        package_metadata: PackageMetadata,
        file_extension: str,
        context_constructor: ContextConstructor,
        path_destination: PathDestination,
        class_index: Mapping[str, DeclaredType],
        external_components: "ExternalComponents",
        context_parser: ContextParser,
    ) -> None:
        self.package_metadata = package_metadata
        self.file_extension = file_extension
        self.context_constructor = context_constructor
        self.path_destination = path_destination
        self.class_index = class_index
        self.external_components = external_components
        self.context_parser = context_parser

    async def minimal_context(self) -> JsonLdContext:
        return await self.context_parser.parse(self.context_constructor.construct_context())

    def create_minter(self, context: JsonLdContext) -> IdentifierMinter:
        return IdentifierMinter(
            package_metadata=self.package_metadata,
            path_destination=self.path_destination,
            file_extension=self.file_extension,
            context=context,
            external_components=self.external_components,
            context_parser=self.context_parser,
        )

    async def construct_components(self) -> Dict[str, ComponentDocument]:
        """Construct one components document per source file, keyed by destination path."""
        definitions: Dict[str, ComponentDocument] = {}
        minter = self.create_minter(await self.minimal_context())

        for class_reference in self.class_index.values():
            # Classes re-exported from other packages are grouped under the re-exporting file.
            source_path = (
                class_reference.referenced_file
                if class_reference.package_name != self.package_metadata.name
                else class_reference.file_name
            )
            path = get_path_destination(self.path_destination, source_path)
            if path not in definitions:
                definitions[path] = ComponentDocument(
                    context=list(self.package_metadata.contexts),
                    id=minter.module_iri_to_id(),
                )
            document = definitions[path]
            document.components.append(
                await self.construct_component(minter, document.add_context, class_reference)
            )

        return definitions

    async def construct_components_index(
        self, definitions: Mapping[str, ComponentDocument]
    ) -> Dict[str, Any]:
        """Construct the package's module document importing every components file."""
        context = await self.minimal_context()
        imports = []
        for path_absolute in definitions:
            path_relative = get_path_relative(
                self.path_destination, f"{path_absolute}.{self.file_extension}"
            )
            imports.append(context.compact_iri(get_import_path_iri(self.package_metadata, path_relative)))
        return {
            "@context": list(self.package_metadata.contexts),
            "@id": context.compact_iri(self.package_metadata.module_iri),
            "@type": "Module",
            "requireName": self.package_metadata.name,
            "import": imports,
        }

    async def construct_component(
        self,
        minter: IdentifierMinter,
        external_contexts_callback: ExternalContextCallback,
        class_reference: DeclaredType,
    ) -> ComponentDefinition:
        external_contexts: List[str] = []
        parameters: List[ParameterDefinition] = []

        scoped_id = await minter.class_name_to_id(class_reference, external_contexts)
        constructor_arguments = []
        if isinstance(class_reference, ClassLoaded):
            constructor_arguments = await ParameterTransformer(minter).construct_parameters(
                class_reference, parameters, external_contexts
            )

        # Super classes and implemented interfaces are both expressed as extends.
        if isinstance(class_reference, ClassLoaded):
            supertypes: List[ClassReference] = []
            if class_reference.super_class is not None:
                supertypes.append(class_reference.super_class)
            supertypes.extend(class_reference.implements_interfaces)
        else:
            supertypes = list(class_reference.super_interfaces)
        extends = await self._resolve_ids(minter, supertypes, external_contexts)

        for iri in external_contexts:
            external_contexts_callback(iri)

        abstract = not isinstance(class_reference, ClassLoaded) or class_reference.abstract
        return ComponentDefinition(
            id=scoped_id,
            type="AbstractClass" if abstract else "Class",
            require_element=class_reference.local_name,
            extends=extends or None,
            comment=class_reference.comment,
            parameters=parameters,
            constructor_arguments=constructor_arguments,
        )

    @staticmethod
    async def _resolve_ids(
        minter: IdentifierMinter,
        references: Sequence[ClassReference],
        external_contexts: List[str],
    ) -> Optional[List[str]]:
        if not references:
            return None
        sinks: List[List[str]] = [[] for _ in references]
        ids = await gather_or_cancel(
            *(minter.class_name_to_id(reference, sink) for reference, sink in zip(references, sinks))
        )
        for sink in sinks:
            external_contexts.extend(sink)
        return list(ids)


__all__ = ["ComponentConstructor", "ExternalContextCallback"]
