from __future__ import annotations

from losh.executor import Invocation

DESCRIPTION = "Show the current version."


def run(command: Invocation) -> None:
    command.log.note("Version: [@version]", {"@version": command.context.settings.version})
