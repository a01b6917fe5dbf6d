"""Loaders for the inputs of manifest generation."""

from .exports import ClassElementsLoader, ClassIndex, ExportResolver
from .package_metadata import expand_package_json, load_package_metadata
from .type_index import TypeIndex, load_type_index

__all__ = [
    "ClassElementsLoader",
    "ClassIndex",
    "ExportResolver",
    "TypeIndex",
    "expand_package_json",
    "load_package_metadata",
    "load_type_index",
]
