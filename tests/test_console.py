from __future__ import annotations

from losh.console import Console, format_message
from losh.errors import MissingArgumentError, ProcessFailureError


def test_placeholders_are_highlighted_and_quoted() -> None:
    text = format_message("error", "Command [@command] needs [!arg]", {"@command": "deploy", "!arg": "type"})

    assert text.plain == '[ERROR]: Command deploy needs "type"'
    styles = {text.plain[span.start : span.end]: str(span.style) for span in text.spans}
    assert styles["deploy"] == "red cyan"
    assert styles['"type"'] == "red magenta"


def test_unprefixed_keys_are_inserted_verbatim() -> None:
    assert format_message("note", "Hello [name]", {"name": "World"}).plain == "Hello World"


def test_message_without_placeholders_keeps_brackets() -> None:
    assert format_message("warn", "keep [this]").plain == "[WARN]: keep [this]"


def test_categories_go_to_the_right_stream(capsys) -> None:
    console = Console(no_color=True)

    console.note("to stdout")
    console.success("done")
    console.warn("careful")
    console.failed("broken")

    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["to stdout", "[SUCCESS]: done"]
    assert captured.err.splitlines() == ["[WARN]: careful", "[FAILED]: broken"]


def test_report_prints_an_error_only_once(capsys) -> None:
    console = Console(no_color=True)
    error = MissingArgumentError("name")

    console.report(error)
    console.report(error)

    assert error.reported is True
    assert capsys.readouterr().err.splitlines() == ['[ERROR]: The argument "name" is required!']


def test_report_uses_the_error_category(capsys) -> None:
    Console(no_color=True).report(ProcessFailureError(["drush", "cr"], 1))
    assert capsys.readouterr().err.startswith("[FAILED]: Command drush cr exited with code")
