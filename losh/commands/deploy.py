"""Standard deployment: pull code, update dependencies and config, rebuild caches."""

from __future__ import annotations

from losh.errors import LoshError
from losh.executor import Invocation
from losh.runtime import ProcessResult
from losh.sequence import run_sequence

PARAMS = [
    ("type", "The type of the pull.", ["standard", "update", "speed"], "standard"),
]
DESCRIPTION = "Standard Deploy Script"

HASH_FILE = "currenthash.txt"


def _checked(result: ProcessResult) -> ProcessResult:
    return result.check()


def build_steps(command: Invocation) -> list:
    deploy_type = command.args.get("type", "standard")
    state: dict[str, str] = {}

    async def remember_hash() -> None:
        state["hash"] = await command.git.current_hash()
        command.log.note("Get new code version")

    async def pull() -> None:
        await command.git.pull()
        new_hash = await command.git.current_hash()
        if new_hash == state["hash"]:
            command.log.warn("No new commit!")
            return
        target = command.path("extension", HASH_FILE)
        command.log.note(
            "Mark current hash [!hash] here [!path]",
            {"!hash": state["hash"], "!path": command.relative(target)},
        )
        await command.write(target, state["hash"], force=True)
        command.log.note("New hash [!hash]", {"!hash": new_hash})

    async def composer_install() -> None:
        command.log.note("Update composer")
        _checked(await command.composer.install())

    async def cache_rebuild() -> None:
        _checked(await command.drush.cr())

    async def config_import() -> None:
        command.log.note("Update config")
        _checked(await command.drush.cim(True))

    steps = [remember_hash, pull]
    if deploy_type in ("standard", "update"):
        steps.append(composer_install)
    if deploy_type == "standard":
        steps.extend([cache_rebuild, config_import])
    steps.append(cache_rebuild)
    return steps


async def run(command: Invocation) -> int:
    command.log.note("Deployment [@type]", {"@type": command.args.get("type", "standard")})
    command.log.note("Update code; Update config; Composer install; Rebuild cache")
    try:
        await run_sequence(build_steps(command))
    except LoshError as exc:
        command.log.failed("Failed with error:")
        command.log.report(exc)
        return 1
    command.log.success("Finished.")
    return 0
