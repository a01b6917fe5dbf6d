"""Resolution of a package's exported classes across re-export chains."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Set

from ..logging import get_logger
from ..models import ClassReference, FileElements, FileReference

ClassIndex = Dict[str, ClassReference]


class ClassElementsLoader(Protocol):
    """Supplies the export/import tables of a single declarations file."""

    async def load_class_elements(self, package_name: str, file_name: str) -> FileElements:
        ...


@dataclass
class FileExports:
    named: ClassIndex = field(default_factory=dict)
    unnamed: List[FileReference] = field(default_factory=list)


class ExportResolver:
    """Finds the names and declaring files of all classes exported by a package."""

    def __init__(self, class_loader: ClassElementsLoader) -> None:
        self.class_loader = class_loader
        self.logger = get_logger("exports")

    async def get_package_exports(self, package_name: str, types_path: str) -> ClassIndex:
        """Collect named exports reachable from the entry declarations file."""
        exports: ClassIndex = {}
        paths: List[str] = [types_path]
        visited: Set[str] = set()
        while paths:
            path = paths.pop(0)
            if path in visited:
                self.logger.debug("Skipping already visited declarations file %s", path)
                continue
            visited.add(path)
            file_exports = await self.get_file_exports(package_name, path)
            exports.update(file_exports.named)
            paths.extend(reference.file_name for reference in file_exports.unnamed)
        return exports

    async def get_file_exports(self, package_name: str, file_name: str) -> FileExports:
        """Return the named exports of a file and the files it re-exports wholesale."""
        elements = await self.class_loader.load_class_elements(package_name, file_name)
        exports = FileExports()

        for local_name in [*elements.exported_classes, *elements.exported_interfaces]:
            exports.named[local_name] = _local_reference(package_name, local_name, file_name)

        for exported_name, imported in elements.exported_imported_elements.items():
            exports.named[exported_name] = ClassReference(
                package_name=package_name,
                local_name=imported.local_name,
                file_name=imported.file_name,
                file_name_referenced=file_name,
            )

        # Exports whose target was not classified upstream; first match wins.
        for exported_name, local_name in elements.exported_unknowns.items():
            if local_name in elements.declared_classes or local_name in elements.declared_interfaces:
                exports.named[exported_name] = _local_reference(package_name, local_name, file_name)
            elif local_name in elements.imported_elements:
                exports.named[exported_name] = elements.imported_elements[local_name].model_copy(
                    update={"file_name_referenced": file_name}
                )

        exports.unnamed = list(elements.exported_imported_all)
        return exports


def _local_reference(package_name: str, local_name: str, file_name: str) -> ClassReference:
    return ClassReference(
        package_name=package_name,
        local_name=local_name,
        file_name=file_name,
        file_name_referenced=file_name,
    )


__all__ = ["ClassElementsLoader", "ClassIndex", "ExportResolver", "FileExports"]
