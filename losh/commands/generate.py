from __future__ import annotations

from losh.executor import Invocation
from losh.generation import GenerationWorkflow

PARAMS = [
    ("!name", "The generator name, e.g. module or theme."),
    ("overwrite", "Ask before overwriting existing files or force it.", ["ask", "force"], "ask"),
]
DESCRIPTION = "Generator command."


async def run(command: Invocation) -> int:
    context = command.context
    workflow = GenerationWorkflow(
        fetcher=context.fetcher,
        prompter=context.prompter,
        console=context.console,
        paths=context.paths,
        cwd=context.cwd,
    )
    result = await workflow.generate(command.args["name"], force=command.args.get("overwrite") == "force")

    for path in result.written:
        command.log.note("Created [@file]", {"@file": command.relative(path)})
    if result.failed:
        command.log.failed("[!count] file(s) could not be generated.", {"!count": str(len(result.failed))})
        return 1
    if result.status == "written":
        command.log.success("Generated [!name].", {"!name": result.name})
    return 0
