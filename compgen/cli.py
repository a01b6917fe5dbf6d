"""CLI entrypoint for compgen."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Sequence

from .config import ConfigError, apply_overrides, load_config, load_ignore_components
from .errors import GenerationError
from .generator import Generator
from .io import ResolutionContext, to_posix
from .logging import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compgen",
        description="Generate components files for the declared classes of a package.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Package directories to generate components for (defaults to the working directory).",
    )
    parser.add_argument(
        "-s",
        "--source",
        help="Relative path to the directory containing source files (default: lib).",
    )
    parser.add_argument(
        "-c",
        "--destination",
        help="Relative path to the directory that will contain components files (default: components).",
    )
    parser.add_argument(
        "-e",
        "--extension",
        help="Extension for components files, without leading dot (default: jsonld).",
    )
    parser.add_argument(
        "-i",
        "--ignore-classes",
        type=Path,
        help="Path to a JSON file listing class names to ignore.",
    )
    parser.add_argument(
        "-l",
        "--log-level",
        help="The logger level (error, warn, info, verbose, debug).",
    )
    parser.add_argument(
        "-r",
        "--prefix",
        help="Custom JSON-LD module prefix.",
    )
    parser.add_argument(
        "--debug-state",
        action="store_true",
        help="Write a compgen-debug-state.json file with the resolved dependency state.",
    )
    return parser


def expand_package_paths(cwd: Path, paths: Sequence[str]) -> List[str]:
    """Resolve package paths against ``cwd``, expanding a trailing ``*`` to sub-directories."""
    roots: List[str] = []
    for raw in paths or [""]:
        if raw.endswith("*"):
            base = cwd / raw[:-1]
            if not base.is_dir():
                raise ConfigError(f"Cannot expand {raw}: {to_posix(base)} is not a directory")
            roots.extend(to_posix(child) for child in sorted(base.iterdir()) if child.is_dir())
        else:
            roots.append(to_posix(cwd / raw))
    return roots


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for compgen."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    cwd = Path.cwd()

    try:
        config = load_config(cwd)
        package_roots = expand_package_paths(cwd, args.paths)
        ignored = load_ignore_components(args.ignore_classes) if args.ignore_classes else None
        config = apply_overrides(
            config,
            {
                "source": args.source,
                "destination": args.destination,
                "extension": args.extension,
                "log_level": args.log_level,
                "module_prefix": args.prefix,
                "debug_state": args.debug_state,
                "ignore_components": ignored,
            },
        )
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    configure_logging(level=config.log_level)

    generator = Generator(
        resolution_context=ResolutionContext(),
        config=config,
        package_roots=package_roots,
    )
    try:
        asyncio.run(generator.generate_components())
    except GenerationError as exc:
        parser.exit(1, f"{exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
