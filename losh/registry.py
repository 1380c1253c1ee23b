from __future__ import annotations

import hashlib
import importlib
import importlib.util
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any, Union

from losh.errors import UnknownCommandError
from losh.params import ParameterSpec, parse_parameters

if TYPE_CHECKING:
    from losh.context import Context

logger = logging.getLogger(__name__)

NATIVE_SUFFIX = ".py"
SCRIPT_SUFFIX = ".sh"

BUILTIN_COMMANDS: dict[str, str] = {
    "list": "losh.commands.list_commands",
    "debug": "losh.commands.debug",
    "version": "losh.commands.version",
    "generate": "losh.commands.generate",
    "add-command": "losh.commands.add_command",
    "deploy": "losh.commands.deploy",
}

Handler = Callable[[Any], Any]


@dataclass(frozen=True)
class NativeCommand:
    name: str
    handler: Handler
    params: tuple[ParameterSpec, ...] = ()
    description: str | None = None
    source: Path | None = None


@dataclass(frozen=True)
class ExternalCommand:
    name: str
    path: Path
    kind: str = "sh"
    description: str | None = None

    @property
    def params(self) -> tuple[ParameterSpec, ...]:
        return ()

    @property
    def source(self) -> Path:
        return self.path


CommandEntry = Union[NativeCommand, ExternalCommand]


def native_from_module(name: str, module: ModuleType, source: Path | None = None) -> NativeCommand:
    handler = getattr(module, "run", None)
    if not callable(handler):
        raise TypeError(f"Command module '{module.__name__}' has no callable run()")
    return NativeCommand(
        name=name,
        handler=handler,
        params=parse_parameters(getattr(module, "PARAMS", None)),
        description=getattr(module, "DESCRIPTION", None),
        source=source,
    )


def _load_module(path: Path) -> ModuleType:
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:10]
    spec = importlib.util.spec_from_file_location(f"losh_command_{path.stem.replace('-', '_')}_{digest}", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load module spec for {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class CommandRegistry:
    """Commands keyed by name; a later registration replaces an earlier one."""

    def __init__(self) -> None:
        self._entries: dict[str, CommandEntry] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, entry: CommandEntry) -> None:
        if entry.name in self._entries:
            logger.debug("Command %s from %s replaces an earlier registration", entry.name, entry.source)
        self._entries[entry.name] = entry

    def add_native(
        self,
        name: str,
        handler: Handler,
        params: Any = None,
        description: str | None = None,
        source: Path | None = None,
    ) -> NativeCommand:
        entry = NativeCommand(
            name=name,
            handler=handler,
            params=parse_parameters(params),
            description=description,
            source=source,
        )
        self.add(entry)
        return entry

    def add_module(self, name: str, module: ModuleType, source: Path | None = None) -> NativeCommand:
        entry = native_from_module(name, module, source)
        self.add(entry)
        return entry

    def add_directory(self, directory: Path, warn: Callable[[str, dict[str, str]], None] | None = None) -> int:
        """Register every ``*.py`` / ``*.sh`` file directly inside ``directory``."""
        if not directory.is_dir():
            logger.debug("Command directory %s does not exist", directory)
            return 0

        count = 0
        for path in sorted(directory.iterdir(), key=lambda item: item.name):
            if not path.is_file():
                continue
            if path.suffix == SCRIPT_SUFFIX:
                self.add(ExternalCommand(name=path.stem, path=path))
                count += 1
            elif path.suffix == NATIVE_SUFFIX and not path.name.startswith("_"):
                try:
                    self.add_module(path.stem, _load_module(path), source=path)
                except Exception as exc:
                    logger.warning("Skipping command file %s: %s", path, exc)
                    if warn is not None:
                        warn("Skipping command file [@file]: " + str(exc), {"@file": str(path)})
                    continue
                count += 1
        return count

    def resolve(self, name: str | None) -> CommandEntry:
        if name is None or name not in self._entries:
            raise UnknownCommandError(name)
        return self._entries[name]

    def list(self) -> tuple[tuple[str, CommandEntry], ...]:
        """Snapshot of the entries in registration order."""
        return tuple(self._entries.items())


def build_registry(context: Context) -> CommandRegistry:
    registry = CommandRegistry()
    for name, module_name in BUILTIN_COMMANDS.items():
        registry.add_module(name, importlib.import_module(module_name))
    for directory in context.command_directories:
        registry.add_directory(directory, warn=context.console.warn)
    return registry
