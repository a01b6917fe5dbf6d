"""Registry of components published by already-built dependency packages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Set

from ..concurrency import gather_or_cancel
from ..errors import DocumentLoadError, ImportPathError
from ..io import ResolutionContext
from ..logging import get_logger
from ..serialize.jsonld import ContextParser


@dataclass(frozen=True)
class ComponentResource:
    """A published component and the package that exposes it."""

    iri: str
    require_element: str
    module_iri: str
    require_name: str


class ComponentRegistry:
    """Loads component modules listed in a module state and indexes their components."""

    def __init__(
        self,
        *,
        component_modules: Mapping[str, str],
        import_paths: Mapping[str, str],
        resolution_context: ResolutionContext,
        context_parser: ContextParser,
    ) -> None:
        self.component_modules = dict(component_modules)
        self.import_paths = dict(import_paths)
        self.resolution_context = resolution_context
        self.context_parser = context_parser
        self.components: List[ComponentResource] = []
        self.logger = get_logger("registry")

    async def register_available_modules(self) -> None:
        """Register every component module, keeping the module-state order."""
        registered = await gather_or_cancel(
            *(self.register_module(path) for path in self.component_modules.values())
        )
        for resources in registered:
            self.components.extend(resources)

    async def register_module(self, module_path: str) -> List[ComponentResource]:
        module = await self.resolution_context.parse_json(module_path)
        if not isinstance(module, dict):
            raise DocumentLoadError(f"Invalid component module at {module_path}")
        context = await self.context_parser.parse(module.get("@context"))
        module_iri = context.expand_term(str(module.get("@id", "")))
        require_name = module.get("requireName")
        if not isinstance(require_name, str):
            raise DocumentLoadError(f"Missing 'requireName' in component module {module_path}")

        resources: List[ComponentResource] = []
        visited: Set[str] = {module_path}
        await self._register_document(module, module_path, module_iri, require_name, resources, visited)
        self.logger.debug("Registered %d components from %s", len(resources), require_name)
        return resources

    async def _register_document(
        self,
        document: Dict[str, Any],
        path: str,
        module_iri: str,
        require_name: str,
        resources: List[ComponentResource],
        visited: Set[str],
    ) -> None:
        context = await self.context_parser.parse(document.get("@context"))
        for component in document.get("components") or []:
            if not isinstance(component, dict) or "@id" not in component:
                continue
            require_element = component.get("requireElement")
            if not isinstance(require_element, str):
                continue
            resources.append(
                ComponentResource(
                    iri=context.expand_term(component["@id"]),
                    require_element=require_element,
                    module_iri=module_iri,
                    require_name=require_name,
                )
            )

        imports = document.get("import") or []
        if isinstance(imports, str):
            imports = [imports]
        for imported in imports:
            imported_path = self.import_iri_to_path(context.expand_term(str(imported)))
            if imported_path in visited:
                continue
            visited.add(imported_path)
            imported_document = await self.resolution_context.parse_json(imported_path)
            if not isinstance(imported_document, dict):
                raise DocumentLoadError(f"Invalid components document at {imported_path}")
            await self._register_document(
                imported_document, imported_path, module_iri, require_name, resources, visited
            )

    def import_iri_to_path(self, iri: str) -> str:
        match: Optional[str] = None
        for prefix in self.import_paths:
            if iri.startswith(prefix) and (match is None or len(prefix) > len(match)):
                match = prefix
        if match is None:
            raise ImportPathError(f"Could not map the imported document {iri} onto a local import path")
        return self.import_paths[match] + iri[len(match):]


__all__ = ["ComponentRegistry", "ComponentResource"]
