"""File-system access used by the generator.

All reads and writes go through :class:`ResolutionContext` so tests can swap
in an in-memory variant.
"""

from __future__ import annotations

import json
import posixpath
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .errors import DocumentLoadError


class ResolutionContext:
    """Reads and writes files, and locates installed dependency packages."""

    async def get_file_content(self, path: str) -> str:
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise DocumentLoadError(f"Could not read {path}: {exc}") from exc

    async def write_file_content(self, path: str, content: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    async def file_exists(self, path: str) -> bool:
        return Path(path).is_file()

    async def parse_json(self, path: str) -> Any:
        text = await self.get_file_content(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DocumentLoadError(f"Invalid JSON in {path}: {exc}") from exc

    async def resolve_package_path(
        self, package_name: str, search_paths: Sequence[str]
    ) -> Optional[str]:
        """Return the directory holding ``package_name/package.json``, if any."""
        for search_path in search_paths:
            candidate = posixpath.join(search_path, package_name)
            if await self.file_exists(posixpath.join(candidate, "package.json")):
                return candidate
        return None


def build_module_import_paths(root: str, modules_directory: str) -> List[str]:
    """Return ``modules_directory`` candidates for ``root`` and all of its ancestors."""
    paths: List[str] = []
    current = posixpath.normpath(root)
    while True:
        if posixpath.basename(current) != modules_directory:
            paths.append(posixpath.join(current, modules_directory))
        parent = posixpath.dirname(current)
        if parent == current:
            break
        current = parent
    return paths


def to_posix(path: str | Path) -> str:
    return Path(path).expanduser().resolve().as_posix()


__all__ = ["ResolutionContext", "build_module_import_paths", "to_posix"]
