"""Generation of component, index and context documents for one or more packages."""

from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Any, Dict, List, Optional, Sequence

from .config import GeneratorConfig
from .io import ResolutionContext
from .logging import get_logger
from .models import PackageMetadata, PathDestination
from .parse.exports import ExportResolver
from .parse.package_metadata import load_package_metadata
from .parse.type_index import load_type_index
from .resolution.external import ExternalModulesLoader, PackageMetadataScope
from .serialize.components import ComponentConstructor
from .serialize.context import ContextConstructor
from .serialize.jsonld import ContextParser, PrefetchedDocumentLoader


@dataclass
class PackageOutput:
    """Serialized documents of one package, keyed by absolute output path."""

    package_name: str
    files: Dict[str, str]


class Generator:
    """Generates components for every package root of a run.

    Nothing is written until every package has been generated, so a failure
    in any package leaves the file system untouched.
    """

    def __init__(
        self,
        *,
        resolution_context: ResolutionContext,
        config: GeneratorConfig,
        package_roots: Sequence[str],
    ) -> None:
        self.resolution_context = resolution_context
        self.config = config
        self.package_roots = [
            root for root in package_roots if not self._is_ignored_package(root)
        ]
        self.logger = get_logger("generator")

    def _is_ignored_package(self, root: str) -> bool:
        for pattern in self.config.ignore_package_paths:
            cleaned = pattern.rstrip("/")
            if fnmatchcase(root, cleaned) or root.endswith(f"/{cleaned}") or root == cleaned:
                return True
        return False

    def path_destination(self, package_root: str) -> PathDestination:
        return PathDestination(
            package_root_directory=package_root,
            original_path=posixpath.join(package_root, self.config.source),
            replacement_path=posixpath.join(package_root, self.config.destination),
        )

    async def generate_components(self) -> List[PackageOutput]:
        """Generate every package, then write all documents."""
        scopes = await self.load_packages_being_generated()
        outputs: List[PackageOutput] = []
        for package_root, scope in scopes.items():
            outputs.append(await self.generate_package(package_root, scope, scopes))
        for output in outputs:
            for path, contents in output.files.items():
                self.logger.debug("Writing %s", path)
                await self.resolution_context.write_file_content(path, contents)
        return outputs

    async def load_packages_being_generated(self) -> Dict[str, PackageMetadataScope]:
        """Load metadata and minimal contexts of all packages generated in this run."""
        parser = ContextParser(PrefetchedDocumentLoader(self.resolution_context))
        scopes: Dict[str, PackageMetadataScope] = {}
        for package_root in self.package_roots:
            metadata = await load_package_metadata(
                self.resolution_context, package_root, prefix=self.config.module_prefix
            )
            scopes[package_root] = PackageMetadataScope(
                package_metadata=metadata,
                path_destination=self.path_destination(package_root),
                minimal_context=await parser.parse(ContextConstructor(metadata).construct_context()),
            )
        return scopes

    async def generate_package(
        self,
        package_root: str,
        scope: PackageMetadataScope,
        scopes: Dict[str, PackageMetadataScope],
    ) -> PackageOutput:
        metadata = scope.package_metadata
        path_destination = scope.path_destination
        self.logger.info("Generating components for %s", metadata.name)

        type_index = await load_type_index(
            self.resolution_context, metadata.name, package_root, self.config.type_index
        )
        exports = await ExportResolver(type_index).get_package_exports(metadata.name, type_index.entry)
        class_index = type_index.build_class_index(exports, self.config.ignore_components)

        packages_being_generated = {
            other.package_metadata.name: other
            for root, other in scopes.items()
            if root != package_root
        }
        loader = ExternalModulesLoader(
            path_destination=path_destination,
            package_metadata=metadata,
            packages_being_generated=packages_being_generated,
            resolution_context=self.resolution_context,
            debug_state=self.config.debug_state,
            modules_directory=self.config.modules_directory,
        )
        external_packages = loader.find_external_packages(class_index)
        self.logger.debug("External packages referenced by %s: %s", metadata.name, external_packages)
        external_components = await loader.load_external_components(external_packages)

        context_parser = ContextParser(
            PrefetchedDocumentLoader(self.resolution_context, files=external_components.module_state.contexts)
        )
        context_constructor = ContextConstructor(metadata)
        component_constructor = ComponentConstructor(
            package_metadata=metadata,
            file_extension=self.config.extension,
            context_constructor=context_constructor,
            path_destination=path_destination,
            class_index=class_index,
            external_components=external_components,
            context_parser=context_parser,
        )
        definitions = await component_constructor.construct_components()
        index = await component_constructor.construct_components_index(definitions)
        context = context_constructor.construct_context(definitions)

        files: Dict[str, str] = {}
        for path, document in definitions.items():
            files[f"{path}.{self.config.extension}"] = _dump(document.to_dict())
        files[self._components_path(package_root, metadata)] = _dump(index)
        files[self._context_path(package_root, metadata)] = _dump(context)

        self.logger.info(
            "Generated %d components in %d files for %s",
            len(class_index),
            len(definitions),
            metadata.name,
        )
        return PackageOutput(package_name=metadata.name, files=files)

    def _components_path(self, package_root: str, metadata: PackageMetadata) -> str:
        relative = metadata.components_path or posixpath.join(
            self.config.destination, f"components.{self.config.extension}"
        )
        return posixpath.normpath(posixpath.join(package_root, relative))

    def _context_path(self, package_root: str, metadata: PackageMetadata) -> str:
        relative: Optional[str] = next(iter(metadata.contexts.values()), None)
        if relative is None:
            relative = posixpath.join(self.config.destination, f"context.{self.config.extension}")
        return posixpath.normpath(posixpath.join(package_root, relative))


def _dump(document: Any) -> str:
    return json.dumps(document, indent=2) + "\n"


__all__ = ["Generator", "PackageOutput"]
