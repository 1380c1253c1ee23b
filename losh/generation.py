from __future__ import annotations

import os
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from losh.console import Console
from losh.errors import MissingPlaceholderError
from losh.forms import FormDefinition, FormEngine, parse_form
from losh.placeholders import substitute
from losh.prompts import Prompter
from losh.runtime import write_file
from losh.sequence import run_sequence

FORM_RESOURCE = "forms/generate/{name}.json"
TEMPLATE_RESOURCE = "templates/{name}"


class Fetcher(Protocol):
    async def fetch(self, resource_path: str) -> str: ...


Writer = Callable[[Path, str], Awaitable[None]]


@dataclass
class PlannedFile:
    path: Path
    template: str
    content: str
    exists: bool


@dataclass
class GenerationResult:
    name: str
    status: str = "empty"
    bag: dict[str, str] = field(default_factory=dict)
    written: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


async def load_form(fetcher: Fetcher, name: str) -> FormDefinition:
    resource = FORM_RESOURCE.format(name=name)
    return parse_form(await fetcher.fetch(resource), source=resource)


class GenerationWorkflow:
    """fetch form -> collect bag -> render templates -> confirm -> write."""

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        prompter: Prompter,
        console: Console,
        paths: Mapping[str, str] | None = None,
        writer: Writer = write_file,
        cwd: Path | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.prompter = prompter
        self.console = console
        self.paths = dict(paths or {})
        self.writer = writer
        self.cwd = cwd or Path(self.paths.get("cwd", "."))

    async def generate(self, name: str, *, force: bool = False) -> GenerationResult:
        result = GenerationResult(name=name)
        form = await load_form(self.fetcher, name)
        result.bag = await FormEngine(self.prompter, self.console, self.paths).collect(form)

        planned: list[PlannedFile] = []

        async def _render(template_name: str, output_path: str) -> None:
            body = await self.fetcher.fetch(TEMPLATE_RESOURCE.format(name=template_name))
            try:
                rendered_path = substitute(os.path.normpath(output_path), result.bag, self.paths, strict=True)
            except MissingPlaceholderError as exc:
                self.console.report(exc)
                result.failed[output_path] = exc.plain_message
                return
            content = substitute(body, result.bag, self.paths)
            if content is None:
                self.console.warn("Skip [@file]: template needs values that were not given.", {"@file": rendered_path})
                result.skipped.append(rendered_path)
                return
            target = Path(rendered_path)
            if not target.is_absolute():
                target = self.cwd / target
            planned.append(PlannedFile(path=target, template=template_name, content=content, exists=target.exists()))

        await run_sequence(form.files, _render)
        if not planned:
            self.console.warn("Nothing to write.")
            return result

        self.console.note("Files to write:")
        for item in planned:
            marker = " (exists)" if item.exists else ""
            self.console.line(f"\t{item.path}{marker}")

        if not await self.prompter.confirm("Write these files?"):
            self.console.note("Abort!")
            result.status = "aborted"
            return result

        if not force:
            for item in planned:
                if not item.exists:
                    continue
                accepted = await self.prompter.confirm(f"Overwrite existing file [{item.path}]?")
                if not accepted:
                    self.console.error("Abort! Nothing was written.")
                    result.status = "aborted"
                    return result

        async def _write(item: PlannedFile, index: int) -> None:
            self.console.note("Write file [@path] ...", {"@path": str(item.path)})
            await self.writer(item.path, item.content)
            result.written.append(item.path)

        await run_sequence(planned, _write)
        result.status = "written"
        return result
