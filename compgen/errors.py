"""Error taxonomy for manifest generation.

Every error aborts the whole generation run; nothing in the core converts
them into warnings.
"""

from __future__ import annotations


class GenerationError(RuntimeError):
    """Base class for fatal errors raised while generating components."""


class UnresolvableReferenceError(GenerationError):
    """Raised when a referenced class cannot be mapped onto a component identifier."""


class InvalidDefaultValueError(GenerationError):
    """Raised when a default value cannot be materialised."""


class InvalidRangeCompositionError(GenerationError):
    """Raised for parameter ranges that cannot be expressed as components."""


class PathBoundaryError(GenerationError):
    """Raised when a path falls outside the package being generated."""


class ImportPathError(GenerationError):
    """Raised when a file cannot be mapped onto the package's import paths."""


class DocumentLoadError(GenerationError):
    """Raised when a JSON-LD document or context cannot be loaded."""


class PackageMetadataError(GenerationError):
    """Raised when a package descriptor or type index is malformed."""


__all__ = [
    "DocumentLoadError",
    "GenerationError",
    "ImportPathError",
    "InvalidDefaultValueError",
    "InvalidRangeCompositionError",
    "PackageMetadataError",
    "PathBoundaryError",
    "UnresolvableReferenceError",
]
