from __future__ import annotations

import asyncio
from pathlib import Path

from losh.executor import CommandExecutor
from losh.runtime import ProcessResult
from tests.utils.fakes import make_context, make_project


def _executor(tmp_path: Path, **kwargs):
    context, reader = make_context(tmp_path, **kwargs)
    return CommandExecutor(context), context


def test_native_command_receives_bound_arguments(tmp_path: Path) -> None:
    executor, context = _executor(tmp_path)
    seen = {}

    async def handler(command) -> None:
        seen["type"] = command.args["type"]
        seen["overflow"] = list(command.overflow)
        seen["raw"] = command.raw_args

    context.registry.add_native("pull", handler, [("type", None, ["standard", "speed"], "standard")])

    assert asyncio.run(executor.execute(["pull"])) == 0
    assert seen == {"type": "standard", "overflow": [], "raw": []}

    assert asyncio.run(executor.execute(["pull", "speed", "extra", "more"])) == 0
    assert seen == {"type": "speed", "overflow": ["extra", "more"], "raw": ["speed", "extra", "more"]}


def test_missing_required_argument_never_runs_the_body(tmp_path: Path, capsys) -> None:
    executor, context = _executor(tmp_path)
    calls: list[str] = []
    context.registry.add_native("make", lambda command: calls.append("ran"), ["!name"])

    code = asyncio.run(executor.execute(["make"]))

    assert code == 1
    assert calls == []
    assert '[ERROR]: The argument "name" is required!' in capsys.readouterr().err


def test_unknown_command_reports_and_lists(tmp_path: Path, capsys) -> None:
    executor, _ = _executor(tmp_path)

    code = asyncio.run(executor.execute(["nope", "simple"]))

    captured = capsys.readouterr()
    assert code == 1
    assert "[ERROR]: Command nope not found!" in captured.err
    assert "generate" in captured.out.splitlines()
    assert "COMMANDS" not in captured.out


def test_no_command_shows_list(tmp_path: Path, capsys) -> None:
    executor, _ = _executor(tmp_path)
    assert asyncio.run(executor.execute([])) == 0
    assert "COMMANDS" in capsys.readouterr().out


def test_unexpected_exception_is_logged_and_reported(tmp_path: Path, capsys, caplog) -> None:
    executor, context = _executor(tmp_path)

    def handler(command):
        raise ValueError("kaputt")

    context.registry.add_native("explode", handler)

    code = asyncio.run(executor.execute(["explode"]))

    assert code == 1
    assert "[FAILED]: Command explode failed with an unexpected error." in capsys.readouterr().err
    assert "kaputt" in caplog.text


def test_reported_error_is_not_printed_twice(tmp_path: Path, capsys) -> None:
    executor, context = _executor(tmp_path)

    async def inner(command):
        return await command.execute(["make"])

    async def outer(command):
        code = await command.execute(["inner"])
        return code

    context.registry.add_native("make", lambda command: None, ["!name"])
    context.registry.add_native("inner", inner)
    context.registry.add_native("outer", outer)

    assert asyncio.run(executor.execute(["outer"])) == 1
    assert capsys.readouterr().err.count("is required") == 1


def test_failing_process_result_is_reported(tmp_path: Path, capsys) -> None:
    executor, context = _executor(tmp_path)

    def handler(command):
        return ProcessResult(cmd=["composer", "install"], cwd=str(tmp_path), exit_code=2, error="Exit with code: 2")

    context.registry.add_native("install", handler)

    assert asyncio.run(executor.execute(["install"])) == 2
    assert "[FAILED]: Command composer install exited with code" in capsys.readouterr().err


def test_external_script_gets_raw_arguments(tmp_path: Path) -> None:
    project = make_project(tmp_path)
    out = tmp_path / "out.txt"
    (project / "loom" / "record.sh").write_text(f'echo "$@" > "{out}"\n', encoding="utf-8")
    executor, _ = _executor(project)

    assert asyncio.run(executor.execute(["record", "one", "two"])) == 0
    assert out.read_text(encoding="utf-8").strip() == "one two"


def test_external_script_exit_code_is_returned(tmp_path: Path, capsys) -> None:
    project = make_project(tmp_path)
    (project / "loom" / "fail.sh").write_text("exit 3\n", encoding="utf-8")
    executor, _ = _executor(project)

    assert asyncio.run(executor.execute(["fail"])) == 3
    assert "exited with code" in capsys.readouterr().err


def test_invocation_write_asks_before_overwriting(tmp_path: Path) -> None:
    executor, context = _executor(tmp_path, answers=["n"])
    target = tmp_path / "existing.txt"
    target.write_text("old", encoding="utf-8")
    outcome = {}

    async def handler(command):
        outcome["written"] = await command.write(target, "new")

    context.registry.add_native("touch", handler)
    asyncio.run(executor.execute(["touch"]))

    assert outcome == {"written": False}
    assert target.read_text(encoding="utf-8") == "old"


def test_invocation_helpers_use_context_paths_and_resources(tmp_path: Path) -> None:
    project = make_project(tmp_path)
    resources = {
        "templates/greeting.txt": "Hello {{!name}} in @extension",
        "forms/generate/greet.json": '{"fields": [["!name", "Name"]], "files": {}}',
    }
    context, _ = make_context(project, answers=["Ada"], resources=resources)
    executor = CommandExecutor(context)
    seen = {}

    async def handler(command):
        seen["path"] = command.path("extension", "notes", "a.txt")
        seen["relative"] = command.relative(seen["path"])
        seen["template"] = await command.template("greeting.txt", {"name": "Bob"})
        seen["missing"] = await command.template("greeting.txt")
        _, seen["bag"] = await command.form("greet")
        seen["usage"] = command.usage

    context.registry.add_native("helpers", handler)

    assert asyncio.run(executor.execute(["helpers"])) == 0
    extension = project.resolve() / "loom"
    assert seen == {
        "path": extension / "notes" / "a.txt",
        "relative": str(Path("loom", "notes", "a.txt")),
        "template": f"Hello Bob in {extension}",
        "missing": None,
        "bag": {"name": "Ada"},
        "usage": "losh helpers",
    }


def test_invocation_path_rejects_unknown_roots(tmp_path: Path, capsys) -> None:
    executor, context = _executor(tmp_path)
    context.registry.add_native("where", lambda command: command.path("extension"))

    assert asyncio.run(executor.execute(["where"])) == 1
    assert "Unknown path root extension" in capsys.readouterr().err
