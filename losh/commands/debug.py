from __future__ import annotations

from losh.executor import Invocation

PARAMS: list = []
DESCRIPTION = "Show discovered paths and all commands."


async def run(command: Invocation) -> int:
    command.log.line("PATHS")
    for key, value in command.context.paths.items():
        command.log.line(f"\t{key} - {value}")
    return await command.execute(["list", "full"])
