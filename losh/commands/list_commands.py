from __future__ import annotations

from losh.executor import Invocation
from losh.params import command_usage
from losh.registry import CommandEntry, NativeCommand

PARAMS = [
    ("type", "The information", ["full", "simple", "usage", "format"], "format"),
]
DESCRIPTION = "List all commands"


def describe(entry: CommandEntry, list_type: str) -> str:
    if list_type == "simple":
        return entry.name
    output = [entry.name]
    if entry.description:
        output.append(entry.description)
    if list_type in ("usage", "full"):
        output.append(f"[{command_usage('losh', entry.name, entry.params)}]")
    if list_type == "full":
        if isinstance(entry, NativeCommand) and entry.source is None:
            output.append("{native command}")
        else:
            output.append(str(entry.source))
    return "\t" + " - ".join(output)


def run(command: Invocation) -> None:
    list_type = command.args.get("type", "format")
    if list_type != "simple":
        command.log.line("COMMANDS")
    for _, entry in command.context.registry.list():
        command.log.line(describe(entry, list_type))
