"""Loading of package descriptors (``package.json``)."""

from __future__ import annotations

import posixpath
from typing import Any, Dict, Optional

from ..errors import PackageMetadataError
from ..io import ResolutionContext
from ..models import PackageMetadata
from ..serialize.identifiers import semver_major
from ..serialize.jsonld import NPMD


def expand_package_json(contents: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in the default ``lsd:*`` entries for packages declaring ``"lsd:module": true``."""
    if contents.get("lsd:module") is not True:
        return contents
    name = contents.get("name")
    version = contents.get("version")
    if not isinstance(name, str) or not isinstance(version, str):
        return contents
    expanded = dict(contents)
    module_iri = f"{NPMD}{name}"
    base_iri = f"{module_iri}/^{semver_major(version)}.0.0/"
    expanded["lsd:module"] = module_iri
    expanded.setdefault("lsd:components", "components/components.jsonld")
    expanded.setdefault("lsd:contexts", {f"{base_iri}components/context.jsonld": "components/context.jsonld"})
    expanded.setdefault(
        "lsd:importPaths",
        {
            f"{base_iri}components/": "components/",
            f"{base_iri}config/": "config/",
        },
    )
    return expanded


def package_metadata_from_json(
    contents: Any, path: str, prefix: Optional[str] = None
) -> PackageMetadata:
    if not isinstance(contents, dict):
        raise PackageMetadataError(f"Invalid package: {path} must contain a JSON object")
    contents = expand_package_json(contents)

    name = contents.get("name")
    if not isinstance(name, str) or not name:
        raise PackageMetadataError(f"Invalid package: Missing 'name' in {path}")
    version = contents.get("version")
    if not isinstance(version, str):
        raise PackageMetadataError(f"Invalid package: Missing 'version' in {path}")
    semver_major(version)
    module_iri = contents.get("lsd:module")
    if not isinstance(module_iri, str):
        raise PackageMetadataError(f"Invalid package: Missing 'lsd:module' IRI in {path}")

    return PackageMetadata(
        name=name,
        version=version,
        module_iri=module_iri,
        contexts=_as_str_dict(contents.get("lsd:contexts")),
        import_paths=_as_str_dict(contents.get("lsd:importPaths")),
        components_path=_as_str(contents.get("lsd:components")),
        prefix=prefix,
    )


async def load_package_metadata(
    resolution_context: ResolutionContext, package_root: str, prefix: Optional[str] = None
) -> PackageMetadata:
    """Load the descriptor of the package rooted at ``package_root``."""
    path = posixpath.join(package_root, "package.json")
    contents = await resolution_context.parse_json(path)
    return package_metadata_from_json(contents, path, prefix)


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_str_dict(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items() if isinstance(item, str)}


__all__ = ["expand_package_json", "load_package_metadata", "package_metadata_from_json"]
