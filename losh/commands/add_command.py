from __future__ import annotations

from losh.executor import Invocation
from losh.registry import NATIVE_SUFFIX, SCRIPT_SUFFIX

PARAMS = [
    ("!command-name", "The command name of the new command."),
    ("template", "The template for the command.", ["command", "script"], "command"),
]
DESCRIPTION = "Create a new command in this project."

COMMAND_SKELETON = '''from __future__ import annotations

PARAMS = []
DESCRIPTION = "Description"


async def run(command):
    command.log.note("New command [!command]", {{"!command": "{name}"}})
'''

SCRIPT_SKELETON = """#!/bin/sh
# {name}: Description

echo "New command {name}"
"""


async def run(command: Invocation) -> int:
    name = command.args["command-name"]
    kind = command.args.get("template", "command")
    if "extension" not in command.context.paths:
        command.log.error("No project script directory found; cannot create [!command].", {"!command": name})
        return 1

    suffix, skeleton = (SCRIPT_SUFFIX, SCRIPT_SKELETON) if kind == "script" else (NATIVE_SUFFIX, COMMAND_SKELETON)
    target = command.path("extension", name + suffix)
    if name in command.context.registry or target.exists():
        command.log.error("The command [!command] already exist.", {"!command": name})
        return 1

    await command.write(target, skeleton.format(name=name), force=True)
    command.log.note("Created command [!file]", {"!file": command.relative(target)})
    return 0
