"""Discovery and loading of components published by dependency packages."""

from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Set

from ..concurrency import gather_or_cancel
from ..io import ResolutionContext, build_module_import_paths
from ..logging import get_logger
from ..models import (
    ClassLoaded,
    ClassRange,
    ClassReference,
    DeclaredType,
    ELEMENT_RANGES,
    IndexedRange,
    NestedRange,
    PackageMetadata,
    ParameterRange,
    PathDestination,
    WRAPPER_RANGES,
)
from ..parse.package_metadata import expand_package_json
from ..serialize.jsonld import ContextParser, JsonLdContext, PrefetchedDocumentLoader
from .registry import ComponentRegistry

DEBUG_STATE_FILE = "compgen-debug-state.json"


@dataclass
class ModuleState:
    """Installed dependency packages considered for one generation run."""

    main_module_path: str
    node_module_import_paths: List[str]
    node_module_paths: List[str] = field(default_factory=list)
    package_jsons: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    component_modules: Dict[str, str] = field(default_factory=dict)
    contexts: Dict[str, str] = field(default_factory=dict)
    import_paths: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mainModulePath": self.main_module_path,
            "componentModules": self.component_modules,
            "importPaths": self.import_paths,
            "contexts": self.contexts,
            "nodeModuleImportPaths": self.node_module_import_paths,
            "nodeModulePaths": self.node_module_paths,
        }


@dataclass
class ExternalModule:
    """Published contexts and component identifiers of one dependency package."""

    context_iris: List[str]
    component_names_to_iris: Dict[str, str] = field(default_factory=dict)


@dataclass
class PackageMetadataScope:
    """A package generated in the same run, as seen by its siblings."""

    package_metadata: PackageMetadata
    path_destination: PathDestination
    minimal_context: JsonLdContext


@dataclass
class ExternalComponents:
    module_state: ModuleState
    components: Dict[str, ExternalModule] = field(default_factory=dict)
    packages_being_generated: Dict[str, PackageMetadataScope] = field(default_factory=dict)


class ExternalModulesLoader:
    """Loads components of only those dependency packages a package actually references."""

    def __init__(
        self,
        *,
        path_destination: PathDestination,
        package_metadata: PackageMetadata,
        packages_being_generated: Mapping[str, PackageMetadataScope],
        resolution_context: ResolutionContext,
        debug_state: bool = False,
        modules_directory: str = "node_modules",
    ) -> None:
        self.path_destination = path_destination
        self.package_metadata = package_metadata
        self.packages_being_generated = dict(packages_being_generated)
        self.resolution_context = resolution_context
        self.debug_state = debug_state
        self.modules_directory = modules_directory
        self.logger = get_logger("external")

    def find_external_packages(self, class_index: Mapping[str, DeclaredType]) -> List[str]:
        """Return packages referenced by supertypes and constructor parameter ranges."""
        external_packages: Dict[str, bool] = {}
        for class_reference in class_index.values():
            self.index_class_in_external_package(class_reference, external_packages)
        for class_reference in class_index.values():
            if isinstance(class_reference, ClassLoaded):
                for parameter in class_reference.constructor:
                    self.index_parameter_range_in_external_package(parameter.range, external_packages)

        return [name for name in external_packages if name not in self.packages_being_generated]

    def index_class_in_external_package(
        self, class_reference: ClassReference, external_packages: Dict[str, bool]
    ) -> None:
        if class_reference.package_name != self.package_metadata.name:
            external_packages[class_reference.package_name] = True
        supertypes: List[ClassReference] = []
        super_class = getattr(class_reference, "super_class", None)
        if super_class is not None:
            supertypes.append(super_class)
        supertypes.extend(getattr(class_reference, "implements_interfaces", []))
        supertypes.extend(getattr(class_reference, "super_interfaces", []))
        for supertype in supertypes:
            self.index_class_in_external_package(supertype, external_packages)

    def index_parameter_range_in_external_package(
        self, parameter_range: ParameterRange, external_packages: Dict[str, bool]
    ) -> None:
        if isinstance(parameter_range, ClassRange):
            self.index_class_in_external_package(parameter_range.value, external_packages)
        elif isinstance(parameter_range, NestedRange):
            for nested_parameter in parameter_range.value:
                self.index_parameter_range_in_external_package(nested_parameter.range, external_packages)
        elif isinstance(parameter_range, ELEMENT_RANGES):
            for child in parameter_range.elements:
                self.index_parameter_range_in_external_package(child, external_packages)
        elif isinstance(parameter_range, WRAPPER_RANGES):
            self.index_parameter_range_in_external_package(parameter_range.value, external_packages)
        elif isinstance(parameter_range, IndexedRange):
            self.index_parameter_range_in_external_package(parameter_range.object, external_packages)
            self.index_parameter_range_in_external_package(parameter_range.index, external_packages)

    async def build_module_state_selective(self, package_names: List[str]) -> ModuleState:
        """Build a module state for ``package_names`` and the dependencies their components need.

        Only packages whose components were not seen before have their own
        dependencies queued, so the loop ends once no new component modules
        turn up.
        """
        main_module_path = self.path_destination.package_root_directory
        state = ModuleState(
            main_module_path=main_module_path,
            node_module_import_paths=build_module_import_paths(main_module_path, self.modules_directory),
        )
        queued: Set[str] = set()
        package_names_new = list(dict.fromkeys(package_names))
        while package_names_new:
            queued.update(package_names_new)
            node_module_paths_new = await self.build_node_module_paths_selective(
                state.node_module_import_paths, package_names_new
            )
            package_jsons_new = await self._load_package_jsons(node_module_paths_new)
            component_modules_new = {
                contents["lsd:module"]: posixpath.join(path, contents["lsd:components"])
                for path, contents in package_jsons_new.items()
                if isinstance(contents.get("lsd:module"), str) and isinstance(contents.get("lsd:components"), str)
            }

            new_component_module_iris = {
                iri for iri in component_modules_new if iri not in state.component_modules
            }

            state.node_module_paths.extend(node_module_paths_new)
            state.package_jsons.update(package_jsons_new)
            state.component_modules.update(
                {iri: path for iri, path in component_modules_new.items() if iri in new_component_module_iris}
            )

            package_names_new = []
            for contents in package_jsons_new.values():
                dependencies = contents.get("dependencies")
                if dependencies and contents.get("lsd:module") in new_component_module_iris:
                    package_names_new.extend(
                        name for name in dependencies
                        if name not in queued and name not in package_names_new
                    )

        for path, contents in state.package_jsons.items():
            for iri, relative in (contents.get("lsd:contexts") or {}).items():
                state.contexts[iri] = posixpath.join(path, relative)
            for iri, relative in (contents.get("lsd:importPaths") or {}).items():
                state.import_paths[iri] = f"{path}/{relative}"
        return state

    async def build_node_module_paths_selective(
        self, node_module_import_paths: List[str], package_names: List[str]
    ) -> List[str]:
        """Resolve the installation directory of each package, skipping those not installed."""
        resolved = await gather_or_cancel(
            *(
                self.resolution_context.resolve_package_path(name, node_module_import_paths)
                for name in package_names
            )
        )
        paths: List[str] = []
        for name, path in zip(package_names, resolved):
            if path is None:
                self.logger.warning("Could not find an installed package for '%s'", name)
                continue
            if path not in paths:
                paths.append(path)
        return paths

    async def _load_package_jsons(self, paths: List[str]) -> Dict[str, Dict[str, Any]]:
        loaded = await gather_or_cancel(
            *(self.resolution_context.parse_json(posixpath.join(path, "package.json")) for path in paths)
        )
        package_jsons: Dict[str, Dict[str, Any]] = {}
        for path, contents in zip(paths, loaded):
            if isinstance(contents, dict):
                package_jsons[path] = expand_package_json(contents)
        return package_jsons

    async def load_external_components(self, package_names: List[str]) -> ExternalComponents:
        """Load the published components of the given packages and their required dependencies."""
        module_state = await self.build_module_state_selective(package_names)

        if self.debug_state:
            await self.dump_module_state(module_state, package_names)

        context_parser = ContextParser(
            PrefetchedDocumentLoader(self.resolution_context, files=module_state.contexts)
        )
        registry = ComponentRegistry(
            component_modules=module_state.component_modules,
            import_paths=module_state.import_paths,
            resolution_context=self.resolution_context,
            context_parser=context_parser,
        )
        await registry.register_available_modules()

        package_jsons_by_name: Dict[str, Dict[str, Any]] = {}
        for contents in module_state.package_jsons.values():
            name = contents.get("name")
            if isinstance(name, str):
                package_jsons_by_name[name] = contents

        external_components = ExternalComponents(
            module_state=module_state,
            packages_being_generated=self.packages_being_generated,
        )
        missing: Set[str] = set()
        for resource in registry.components:
            package_name = resource.require_name
            module = external_components.components.get(package_name)
            if module is None:
                package_json = package_jsons_by_name.get(package_name)
                if package_json is None:
                    if package_name not in missing:
                        self.logger.warning("Could not find a package.json for '%s'", package_name)
                        missing.add(package_name)
                    continue
                module = ExternalModule(context_iris=list(package_json.get("lsd:contexts") or {}))
                external_components.components[package_name] = module
            module.component_names_to_iris[resource.require_element] = resource.iri

        self.logger.debug(
            "Indexed components of %d external packages", len(external_components.components)
        )
        return external_components

    async def dump_module_state(self, module_state: ModuleState, external_packages: List[str]) -> None:
        """Write the module state used for this run to a diagnostic file."""
        contents = json.dumps(
            {"externalPackages": external_packages, "moduleState": module_state.to_dict()},
            indent=2,
        )
        path = posixpath.join(self.path_destination.package_root_directory, DEBUG_STATE_FILE)
        await self.resolution_context.write_file_content(path, contents)


__all__ = [
    "DEBUG_STATE_FILE",
    "ExternalComponents",
    "ExternalModule",
    "ExternalModulesLoader",
    "ModuleState",
    "PackageMetadataScope",
]
