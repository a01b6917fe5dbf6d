"""Identifier minting for components and their fields."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Dict, List, Sequence, Tuple

from ..errors import (
    ImportPathError,
    PackageMetadataError,
    PathBoundaryError,
    UnresolvableReferenceError,
)
from ..models import ClassReference, DefaultNested, PackageMetadata, PathDestination
from .jsonld import ContextParser, JsonLdContext

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..resolution.external import ExternalComponents

_SEMVER_MAJOR = re.compile(r"^v?(\d+)(?:\.|$)")


def semver_major(version: str) -> int:
    match = _SEMVER_MAJOR.match(version.strip())
    if not match:
        raise PackageMetadataError(f"Invalid semantic version '{version}'")
    return int(match.group(1))


def get_path_relative(path_destination: PathDestination, source_path: str) -> str:
    """Determine the package-relative path of a component file."""
    root = path_destination.package_root_directory
    if not source_path.startswith(f"{root}/"):
        raise PathBoundaryError(f"Tried to reference a file outside the current package: {source_path}")
    return source_path[len(root) + 1:]


def get_path_destination(path_destination: PathDestination, source_path: str) -> str:
    """Determine where the component file for a class source file is written."""
    if not source_path.startswith(f"{path_destination.package_root_directory}/"):
        raise PathBoundaryError(f"Tried to reference a file outside the current package: {source_path}")
    return source_path.replace(path_destination.original_path, path_destination.replacement_path, 1)


def get_import_path_iri(package_metadata: PackageMetadata, source_path: str) -> str:
    """Map a package-relative file path onto an IRI through the import-path table."""
    if source_path.startswith("/"):
        source_path = source_path[1:]
    for iri, path in package_metadata.import_paths.items():
        if source_path.startswith(path):
            return iri + source_path[len(path):]
    raise ImportPathError(
        f"Could not find a valid import path for {source_path}. "
        f"'lsd:importPaths' in package.json may be invalid."
    )


def class_name_to_iri_for_package(
    package_metadata: PackageMetadata,
    path_destination: PathDestination,
    class_reference: ClassReference,
    file_extension: str,
) -> str:
    file_path = get_path_relative(
        path_destination,
        get_path_destination(path_destination, class_reference.file_name),
    )
    major = semver_major(package_metadata.version)
    return (
        f"{package_metadata.module_iri}/^{major}.0.0/{file_path}.{file_extension}"
        f"#{class_reference.local_name}"
    )


@dataclass(frozen=True)
class FieldScope:
    """Field path and uniqueness bookkeeping for one constructor traversal.

    Copies made through :meth:`with_field` and friends share ``field_ids``,
    so identifiers stay unique across the whole traversal.
    """

    parent_field_names: Tuple[str, ...] = ()
    field_ids: Dict[str, int] = field(default_factory=dict)
    default_nested: Tuple[DefaultNested, ...] = ()

    def with_field(self, name: str) -> "FieldScope":
        return replace(self, parent_field_names=self.parent_field_names + (name,))

    def without_last_field(self) -> "FieldScope":
        return replace(self, parent_field_names=self.parent_field_names[:-1])

    def with_default_nested(self, default_nested: Sequence[DefaultNested]) -> "FieldScope":
        return replace(self, default_nested=tuple(default_nested))


class IdentifierMinter:
    """Mints class and field identifiers for one package."""

    def __init__(
        self,
        *,
        package_metadata: PackageMetadata,
        path_destination: PathDestination,
        file_extension: str,
        context: JsonLdContext,
        external_components: "ExternalComponents",
        context_parser: ContextParser,
    ) -> None:
        self.package_metadata = package_metadata
        self.path_destination = path_destination
        self.file_extension = file_extension
        self.context = context
        self.external_components = external_components
        self.context_parser = context_parser

    def module_iri_to_id(self) -> str:
        return self.context.compact_iri(self.package_metadata.module_iri)

    def class_iri(self, class_reference: ClassReference) -> str:
        return class_name_to_iri_for_package(
            self.package_metadata,
            self.path_destination,
            class_reference,
            self.file_extension,
        )

    async def class_name_to_id(
        self, class_reference: ClassReference, external_contexts: List[str]
    ) -> str:
        """Return the compacted identifier of a class, wherever it is declared.

        Context IRIs of other packages crossed on the way are appended to
        ``external_contexts``.
        """
        if class_reference.package_name == self.package_metadata.name:
            return self.context.compact_iri(self.class_iri(class_reference))

        # Another package that is being generated in this run
        scope = self.external_components.packages_being_generated.get(class_reference.package_name)
        if scope is not None:
            external_contexts.extend(scope.package_metadata.contexts)
            return scope.minimal_context.compact_iri(
                class_name_to_iri_for_package(
                    scope.package_metadata,
                    scope.path_destination,
                    class_reference,
                    self.file_extension,
                )
            )

        # A dependency with previously published components
        module = self.external_components.components.get(class_reference.package_name)
        if module is None:
            raise UnresolvableReferenceError(
                f"Tried to reference a class '{class_reference.local_name}' from an external module "
                f"'{class_reference.package_name}' that is not a dependency"
            )
        external_contexts.extend(module.context_iris)
        component_iri = module.component_names_to_iris.get(class_reference.local_name)
        if component_iri is None:
            raise UnresolvableReferenceError(
                f"Tried to reference a class '{class_reference.local_name}' from an external module "
                f"'{class_reference.package_name}' that does not expose this component"
            )
        context_external = await self.context_parser.parse(module.context_iris)
        return context_external.compact_iri(component_iri)

    def field_name_to_id(
        self, class_reference: ClassReference, field_name: str, scope: FieldScope
    ) -> str:
        if scope.parent_field_names:
            field_name = f"{'_'.join(scope.parent_field_names)}_{field_name}"
        field_id = self.context.compact_iri(f"{self.class_iri(class_reference)}_{field_name}")
        if field_id not in scope.field_ids:
            scope.field_ids[field_id] = 1
            return field_id
        while True:
            counter = scope.field_ids[field_id]
            scope.field_ids[field_id] = counter + 1
            candidate = f"{field_id}_{counter}"
            if candidate not in scope.field_ids:
                break
        scope.field_ids[candidate] = 1
        return candidate


__all__ = [
    "FieldScope",
    "IdentifierMinter",
    "class_name_to_iri_for_package",
    "get_import_path_iri",
    "get_path_destination",
    "get_path_relative",
    "semver_major",
]
