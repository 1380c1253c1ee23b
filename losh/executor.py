from __future__ import annotations

import inspect
import logging
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from losh.errors import LoshError, ProcessFailureError, UnknownCommandError
from losh.forms import FormDefinition, FormEngine
from losh.generation import load_form
from losh.params import BoundArguments, bind_arguments, command_usage
from losh.placeholders import substitute
from losh.registry import CommandEntry, ExternalCommand, NativeCommand
from losh.runtime import ProcessResult, invoke_process, write_file
from losh.shell import Composer, Drush, Git, Node

if TYPE_CHECKING:
    from losh.console import Console
    from losh.context import Context

logger = logging.getLogger(__name__)

SHELL = "sh"


class Invocation:
    """One run of a native command; the single argument its ``run`` receives."""

    def __init__(
        self,
        context: Context,
        executor: CommandExecutor,
        entry: NativeCommand,
        raw_args: Sequence[str],
        bound: BoundArguments,
    ) -> None:
        self.context = context
        self.executor = executor
        self.entry = entry
        self.name = entry.name
        self.raw_args = list(raw_args)
        self.args = bound
        self.overflow = bound.overflow
        cwd = context.project_dir
        self.git = Git(cwd)
        self.drush = Drush(cwd)
        self.composer = Composer(cwd)
        self.node = Node(cwd)

    @property
    def log(self) -> Console:
        return self.context.console

    @property
    def usage(self) -> str:
        return command_usage("losh", self.name, self.entry.params)

    def path(self, root: str = "project", *parts: str) -> Path:
        if root not in self.context.paths:
            raise LoshError("Unknown path root [@root]", {"@root": root})
        return Path(self.context.paths[root], *parts)

    def relative(self, path: Path | str) -> str:
        return os.path.relpath(path, self.context.paths["cwd"])

    async def execute(self, argv: Sequence[str]) -> int:
        return await self.executor.execute(argv)

    async def shell(self, *args: str, cwd: Path | None = None) -> ProcessResult:
        return await invoke_process(args[0], list(args[1:]), cwd=cwd or self.context.project_dir)

    async def capture(self, *args: str, cwd: Path | None = None) -> ProcessResult:
        return await invoke_process(args[0], list(args[1:]), capture_output=True, cwd=cwd or self.context.project_dir)

    async def template(self, name: str, bag: Mapping[str, str] | None = None) -> str | None:
        content = await self.context.fetcher.fetch(f"templates/{name}")
        self.log.note("Replace placeholders in template ...")
        return substitute(content, bag or {}, self.context.paths)

    async def form(self, name: str) -> tuple[FormDefinition, dict[str, str]]:
        form = await load_form(self.context.fetcher, name)
        bag = await FormEngine(self.context.prompter, self.log, self.context.paths).collect(form)
        return form, bag

    async def write(self, path: Path | str, content: str, force: bool = False) -> bool:
        target = Path(path)
        self.log.note("Write file [@path] ...", {"@path": str(target)})
        if not force and target.exists():
            self.log.warn("File already exist ...")
            if not await self.context.prompter.confirm("Do you want to overwrite the file?"):
                self.log.error("Abort!")
                return False
        await write_file(target, content)
        return True


class CommandExecutor:
    """Resolves a command name, binds its arguments and runs it."""

    def __init__(self, context: Context) -> None:
        self.context = context

    @property
    def console(self) -> Console:
        return self.context.console

    async def execute(self, argv: Sequence[str]) -> int:
        args = list(argv)
        name = args.pop(0) if args else None
        if name is None:
            return await self.execute(["list", *args])
        try:
            entry = self.context.registry.resolve(name)
        except UnknownCommandError as exc:
            self.console.report(exc)
            await self.execute(["list", *args])
            return 1
        return await self.run_entry(entry, args)

    async def run_entry(self, entry: CommandEntry, args: list[str]) -> int:
        try:
            if isinstance(entry, ExternalCommand):
                return await self._run_external(entry, args)
            return await self._run_native(entry, args)
        except LoshError as exc:
            self.console.report(exc)
            return exc.exit_code if isinstance(exc, ProcessFailureError) else 1
        except Exception:
            logger.exception("Command %s raised an unexpected error", entry.name)
            self.console.failed("Command [@command] failed with an unexpected error.", {"@command": entry.name})
            return 1

    async def _run_native(self, entry: NativeCommand, args: list[str]) -> int:
        bound = bind_arguments(entry.params, args)
        invocation = Invocation(self.context, self, entry, args, bound)
        result: Any = entry.handler(invocation)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, ProcessResult):
            result.check()
        if isinstance(result, int) and not isinstance(result, bool):
            return result
        return 0

    async def _run_external(self, entry: ExternalCommand, args: list[str]) -> int:
        result = await invoke_process(SHELL, [str(entry.path), *args], cwd=self.context.project_dir)
        if not result.ok:
            self.console.failed(
                "Script [@script] exited with code [!code]",
                {"@script": str(entry.path), "!code": str(result.exit_code)},
            )
        return result.exit_code
