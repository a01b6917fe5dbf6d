"""Resolution of components published by dependency packages."""

from .external import (
    ExternalComponents,
    ExternalModule,
    ExternalModulesLoader,
    ModuleState,
    PackageMetadataScope,
)
from .registry import ComponentRegistry, ComponentResource

__all__ = [
    "ComponentRegistry",
    "ComponentResource",
    "ExternalComponents",
    "ExternalModule",
    "ExternalModulesLoader",
    "ModuleState",
    "PackageMetadataScope",
]
