"""Loading of the type index produced by the upstream declaration analysis."""

from __future__ import annotations

import posixpath
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import Field, ValidationError, ValidationInfo, field_validator

from ..errors import PackageMetadataError, UnresolvableReferenceError
from ..io import ResolutionContext
from ..logging import get_logger
from ..models import ClassReference, DeclaredType, FileElements, InputModel, absolutize
from .exports import ClassIndex

logger = get_logger("type_index")

DEFAULT_TYPE_INDEX = "compgen-types.json"


class TypeIndexDocument(InputModel):
    """On-disk shape of a package type index."""

    entry: str = "index"
    files: Dict[str, FileElements] = Field(default_factory=dict)
    types: List[DeclaredType] = Field(default_factory=list)

    @field_validator("entry")
    @classmethod
    def _resolve_entry(cls, value: str, info: ValidationInfo) -> str:
        return absolutize(value, info)

    @field_validator("files", mode="before")
    @classmethod
    def _resolve_file_keys(cls, value: object, info: ValidationInfo) -> object:
        if not isinstance(value, dict):
            return value
        return {absolutize(str(key), info): item for key, item in value.items()}


class TypeIndex:
    """In-memory view over a package's declared types and per-file export tables."""

    def __init__(self, package_name: str, document: TypeIndexDocument) -> None:
        self.package_name = package_name
        self.document = document
        self._types: Dict[Tuple[str, str], DeclaredType] = {
            (declared.file_name, declared.local_name): declared for declared in document.types
        }

    @property
    def entry(self) -> str:
        return self.document.entry

    async def load_class_elements(self, package_name: str, file_name: str) -> FileElements:
        elements = self.document.files.get(file_name)
        if elements is None:
            logger.debug("No export table for %s in %s; treating it as empty", file_name, package_name)
            return FileElements()
        return elements

    def load_class(self, reference: ClassReference) -> DeclaredType:
        declared = self._types.get((reference.file_name, reference.local_name))
        if declared is None:
            raise UnresolvableReferenceError(
                f"Could not load class or interface '{reference.local_name}' from {reference.file_name}"
            )
        return declared.model_copy(update={"file_name_referenced": reference.referenced_file})

    def build_class_index(
        self, exports: ClassIndex, ignore_components: Optional[Iterable[str]] = None
    ) -> Dict[str, DeclaredType]:
        """Load every exported reference, skipping ignored class names."""
        ignored = set(ignore_components or ())
        index: Dict[str, DeclaredType] = {}
        for exported_name, reference in exports.items():
            if exported_name in ignored:
                logger.debug("Ignoring component %s", exported_name)
                continue
            index[exported_name] = self.load_class(reference)
        return index


async def load_type_index(
    resolution_context: ResolutionContext,
    package_name: str,
    package_root: str,
    relative_path: str = DEFAULT_TYPE_INDEX,
) -> TypeIndex:
    """Read and validate the type index of the package rooted at ``package_root``."""
    path = posixpath.join(package_root, relative_path)
    raw = await resolution_context.parse_json(path)
    try:
        document = TypeIndexDocument.model_validate(raw, context={"package_root": package_root})
    except ValidationError as exc:
        raise PackageMetadataError(f"Invalid type index {path}: {exc}") from exc
    return TypeIndex(package_name, document)


__all__ = ["DEFAULT_TYPE_INDEX", "TypeIndex", "TypeIndexDocument", "load_type_index"]
