"""Process-wide settings, discovered paths and the lazily built registry."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING

from losh.console import Console
from losh.prompts import Prompter
from losh.resources import ResourceFetcher

if TYPE_CHECKING:
    from losh.registry import CommandRegistry

PROGRAM = "losh"
VERSION = "main"
DEFAULT_RESOURCE_URL = "https://raw.githubusercontent.com/loomgmbh/node-losh/{version}/src"

PACKAGE_DIR = Path(__file__).resolve().parent


@dataclass
class Settings:
    """Runtime configuration, read from ``LOSH_*`` environment variables."""

    script_directory: str = "loom"
    marker_directory: str = "vendor"
    version: str = VERSION
    resource_url: str = DEFAULT_RESOURCE_URL
    command_paths: tuple[Path, ...] = ()
    log_level: str = "WARNING"

    @property
    def resource_base_url(self) -> str:
        return self.resource_url.format(version=self.version)

    @classmethod
    def from_env(cls) -> Settings:
        raw_paths = os.getenv("LOSH_COMMAND_PATH", "")
        return cls(
            script_directory=os.getenv("LOSH_SCRIPT_DIRECTORY", "loom"),
            marker_directory=os.getenv("LOSH_MARKER_DIRECTORY", "vendor"),
            version=os.getenv("LOSH_VERSION", VERSION),
            resource_url=os.getenv("LOSH_RESOURCE_URL", DEFAULT_RESOURCE_URL),
            command_paths=tuple(Path(item).expanduser() for item in raw_paths.split(os.pathsep) if item.strip()),
            log_level=os.getenv("LOSH_LOG_LEVEL", "WARNING").upper(),
        )


def find_project_root(start: Path, settings: Settings) -> Path | None:
    """Walk up from ``start`` to the first directory holding both marker dirs."""
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / settings.script_directory).is_dir() and (candidate / settings.marker_directory).is_dir():
            return candidate
    return None


def discover_paths(cwd: Path, settings: Settings) -> dict[str, str]:
    paths = {
        "cwd": str(cwd.resolve()),
        "root": str(PACKAGE_DIR.parent),
        "source": str(PACKAGE_DIR),
    }
    project = find_project_root(cwd, settings)
    if project is not None:
        paths["project"] = str(project)
        paths["drupal"] = str(project)
        paths["extension"] = str(project / settings.script_directory)
    return paths


@dataclass
class Context:
    """Everything a command run needs; built once at process start."""

    settings: Settings = field(default_factory=Settings)
    cwd: Path = field(default_factory=Path.cwd)
    console: Console = field(default_factory=Console)
    prompter: Prompter | None = None
    fetcher: ResourceFetcher | None = None

    def __post_init__(self) -> None:
        if self.prompter is None:
            self.prompter = Prompter(self.console)
        if self.fetcher is None:
            self.fetcher = ResourceFetcher(self.settings.resource_base_url)

    @cached_property
    def paths(self) -> dict[str, str]:
        paths = discover_paths(self.cwd, self.settings)
        if "project" not in paths:
            self.console.warn("No project root found!")
        return paths

    @property
    def project_dir(self) -> Path:
        return Path(self.paths.get("project", self.paths["cwd"]))

    @property
    def command_directories(self) -> list[Path]:
        directories: list[Path] = []
        if "extension" in self.paths:
            directories.append(Path(self.paths["extension"]))
        directories.extend(self.settings.command_paths)
        return directories

    @cached_property
    def registry(self) -> CommandRegistry:
        from losh.registry import build_registry

        return build_registry(self)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
