from __future__ import annotations

from pathlib import Path

import pytest

from losh.errors import UnknownCommandError
from losh.registry import CommandRegistry, ExternalCommand, NativeCommand, build_registry
from tests.utils.fakes import make_context, make_project


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_later_source_wins(tmp_path: Path) -> None:
    first = _write(tmp_path / "first" / "build.sh", "echo first\n").parent
    second = _write(tmp_path / "second" / "build.py", "def run(command):\n    return 0\n").parent

    registry = CommandRegistry()
    registry.add_directory(first)
    registry.add_directory(second)

    entry = registry.resolve("build")
    assert isinstance(entry, NativeCommand)
    assert entry.source == second / "build.py"


def test_native_file_params_and_description_are_read(tmp_path: Path) -> None:
    _write(
        tmp_path / "cmds" / "sync.py",
        'PARAMS = [("!target", "Where to sync"), ("mode", None, ["fast", "slow"], "fast")]\n'
        'DESCRIPTION = "Sync files"\n\n'
        "async def run(command):\n    return None\n",
    )
    registry = CommandRegistry()
    assert registry.add_directory(tmp_path / "cmds") == 1

    entry = registry.resolve("sync")
    assert entry.description == "Sync files"
    assert [param.usage for param in entry.params] == ["<target>", "[fast|slow=fast]"]


def test_scripts_are_external_and_other_files_ignored(tmp_path: Path) -> None:
    directory = tmp_path / "cmds"
    _write(directory / "cleanup.sh", "echo clean\n")
    _write(directory / "README.md", "docs\n")
    _write(directory / "_helpers.py", "VALUE = 1\n")
    _write(directory / "nested" / "deep.sh", "echo deep\n")

    registry = CommandRegistry()
    registry.add_directory(directory)

    assert [name for name, _ in registry.list()] == ["cleanup"]
    assert isinstance(registry.resolve("cleanup"), ExternalCommand)


def test_missing_directory_contributes_nothing(tmp_path: Path) -> None:
    registry = CommandRegistry()
    assert registry.add_directory(tmp_path / "does-not-exist") == 0
    assert len(registry) == 0


def test_broken_module_is_skipped_with_warning(tmp_path: Path) -> None:
    directory = tmp_path / "cmds"
    _write(directory / "broken.py", "raise RuntimeError('boom')\n")
    _write(directory / "norun.py", "VALUE = 1\n")
    _write(directory / "fine.sh", "echo ok\n")
    warnings: list[str] = []

    registry = CommandRegistry()
    count = registry.add_directory(directory, warn=lambda message, values: warnings.append(values["@file"]))

    assert count == 1
    assert "fine" in registry
    assert sorted(Path(item).name for item in warnings) == ["broken.py", "norun.py"]


def test_unknown_name_raises() -> None:
    registry = CommandRegistry()
    with pytest.raises(UnknownCommandError):
        registry.resolve("nope")
    with pytest.raises(UnknownCommandError):
        registry.resolve(None)


def test_list_is_restartable_and_in_registration_order() -> None:
    registry = CommandRegistry()
    registry.add_native("b", lambda command: None)
    registry.add_native("a", lambda command: None)

    listing = registry.list()
    assert [name for name, _ in listing] == ["b", "a"]
    assert [name for name, _ in listing] == ["b", "a"]

    registry.add_native("c", lambda command: None)
    assert [name for name, _ in listing] == ["b", "a"]
    assert [name for name, _ in registry.list()] == ["b", "a", "c"]


def test_build_registry_registers_builtins_before_project_commands(tmp_path: Path) -> None:
    project = make_project(tmp_path / "site")
    _write(project / "loom" / "version.sh", "echo custom\n")
    _write(project / "loom" / "backup.sh", "echo backup\n")
    extra = _write(tmp_path / "extra" / "backup.py", "def run(command):\n    return 0\n").parent
    context, _ = make_context(project, command_paths=(extra,))

    registry = build_registry(context)
    names = [name for name, _ in registry.list()]

    assert names[:6] == ["list", "debug", "version", "generate", "add-command", "deploy"]
    assert "backup" in names
    assert isinstance(registry.resolve("version"), ExternalCommand)
    assert isinstance(registry.resolve("backup"), NativeCommand)


def test_context_builds_registry_once(tmp_path: Path) -> None:
    context, _ = make_context(tmp_path)
    assert context.registry is context.registry
