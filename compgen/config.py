"""Configuration loading for compgen (.compgen.yml)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".compgen.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class GeneratorConfig:
    """Effective settings for one generation run."""

    source: str = "lib"
    destination: str = "components"
    extension: str = "jsonld"
    type_index: str = "compgen-types.json"
    ignore_package_paths: List[str] = field(default_factory=list)
    ignore_components: List[str] = field(default_factory=list)
    log_level: str = "info"
    module_prefix: Optional[str] = None
    debug_state: bool = False
    modules_directory: str = "node_modules"


def load_config(config_path: Path) -> GeneratorConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    if not config_file.exists():
        return GeneratorConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    defaults = GeneratorConfig()
    return GeneratorConfig(
        source=_as_str(data.get("source")) or defaults.source,
        destination=_as_str(data.get("destination")) or defaults.destination,
        extension=_as_str(data.get("extension")) or defaults.extension,
        type_index=_as_str(data.get("type_index")) or defaults.type_index,
        ignore_package_paths=_as_str_list(data.get("ignore_package_paths")),
        ignore_components=_as_str_list(data.get("ignore_components")),
        log_level=_as_str(data.get("log_level")) or defaults.log_level,
        module_prefix=_as_str(data.get("module_prefix")),
        debug_state=_as_bool(data.get("debug_state")) or False,
        modules_directory=_as_str(data.get("modules_directory")) or defaults.modules_directory,
    )


def apply_overrides(config: GeneratorConfig, overrides: Mapping[str, Any]) -> GeneratorConfig:
    """Return ``config`` with every non-empty override applied."""
    changes: Dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None or value is False:
            continue
        if key == "ignore_components":
            merged = list(config.ignore_components)
            merged.extend(name for name in value if name not in merged)
            changes[key] = merged
        else:
            changes[key] = value
    return replace(config, **changes)


def load_ignore_components(path: Path) -> List[str]:
    """Read a JSON array of class names that must not become components."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Failed to read ignored components from {path}: {exc}") from exc
    if not isinstance(data, list):
        raise ConfigError(f"{path.name} must contain a JSON array of class names")
    return _as_str_list(data)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "GeneratorConfig",
    "apply_overrides",
    "load_config",
    "load_ignore_components",
]
