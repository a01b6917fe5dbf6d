"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from compgen import cli
from compgen.cli import _build_parser, expand_package_paths
from compgen.config import ConfigError


def test_cli_parses_short_options() -> None:
    args = _build_parser().parse_args(
        ["pkg", "-s", "src", "-c", "out", "-e", "json", "-l", "debug", "-r", "ex", "--debug-state"]
    )

    assert args.paths == ["pkg"]
    assert args.source == "src"
    assert args.destination == "out"
    assert args.extension == "json"
    assert args.log_level == "debug"
    assert args.prefix == "ex"
    assert args.debug_state is True


def test_cli_defaults_leave_config_untouched() -> None:
    args = _build_parser().parse_args([])

    assert args.paths == []
    assert args.source is None
    assert args.debug_state is False


def test_expand_package_paths(tmp_path: Path) -> None:
    (tmp_path / "packages" / "b").mkdir(parents=True)
    (tmp_path / "packages" / "a").mkdir()
    (tmp_path / "packages" / "README.md").write_text("", encoding="utf-8")

    assert expand_package_paths(tmp_path, []) == [tmp_path.resolve().as_posix()]
    assert expand_package_paths(tmp_path, ["packages/*"]) == [
        (tmp_path / "packages" / "a").resolve().as_posix(),
        (tmp_path / "packages" / "b").resolve().as_posix(),
    ]


def _write_package(root: Path) -> None:
    root.mkdir(parents=True, exist_ok=True)
    (root / "package.json").write_text(
        json.dumps({"name": "cli-pkg", "version": "1.0.0", "lsd:module": True}), encoding="utf-8"
    )
    (root / "compgen-types.json").write_text(
        json.dumps(
            {
                "entry": "lib/index",
                "files": {"lib/index": {"exportedClasses": ["Foo"]}},
                "types": [
                    {"type": "class", "packageName": "cli-pkg", "localName": "Foo", "fileName": "lib/index"}
                ],
            }
        ),
        encoding="utf-8",
    )


def test_main_writes_components(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    levels = []
    monkeypatch.setattr(cli, "configure_logging", lambda *, level=None: levels.append(level))
    monkeypatch.chdir(tmp_path)
    _write_package(tmp_path / "pkg")
    (tmp_path / ".compgen.yml").write_text("log_level: warn\n", encoding="utf-8")

    cli.main(["pkg"])

    assert levels == ["warn"]
    document = json.loads((tmp_path / "pkg" / "components" / "index.jsonld").read_text(encoding="utf-8"))
    assert document["components"][0]["@id"] == "cp:components/index.jsonld#Foo"
    assert (tmp_path / "pkg" / "components" / "components.jsonld").exists()
    assert (tmp_path / "pkg" / "components" / "context.jsonld").exists()


def test_main_exits_with_failure_on_generation_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda *, level=None: None)
    monkeypatch.chdir(tmp_path)
    (tmp_path / "pkg").mkdir()

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["pkg"])

    assert excinfo.value.code == 1
    assert "package.json" in capsys.readouterr().err


def test_expand_package_paths_rejects_a_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not a directory"):
        expand_package_paths(tmp_path, ["missing/*"])


def test_main_exits_with_failure_on_missing_glob_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda *, level=None: None)
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["missing/*"])

    assert excinfo.value.code == 1
    assert "Cannot expand missing/*" in capsys.readouterr().err
