"""Generation of declarative component manifests for dependency injection."""

from .errors import GenerationError
from .generator import Generator, PackageOutput

__all__ = ["GenerationError", "Generator", "PackageOutput"]
