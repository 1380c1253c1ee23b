from __future__ import annotations

from collections.abc import Mapping, Sequence


class LoshError(Exception):
    """Base for every error losh reports to the user.

    ``message`` may contain ``[@key]`` / ``[!key]`` markers that the console
    highlights with the matching ``placeholders`` values.
    """

    category = "error"

    def __init__(self, message: str, placeholders: Mapping[str, str] | None = None) -> None:
        self.message = message
        self.placeholders = dict(placeholders or {})
        self.reported = False
        super().__init__(self.plain_message)

    @property
    def plain_message(self) -> str:
        text = self.message
        for key, value in self.placeholders.items():
            text = text.replace(f"[{key}]", str(value))
        return text


class MissingArgumentError(LoshError):
    def __init__(self, parameter: str) -> None:
        self.parameter = parameter
        super().__init__("The argument [!argument] is required!", {"!argument": parameter})


class UnknownCommandError(LoshError):
    def __init__(self, name: str | None) -> None:
        self.name = name
        super().__init__("Command [@command] not found!", {"@command": name or ""})


class MissingPlaceholderError(LoshError):
    def __init__(self, template: str, missing: Sequence[str]) -> None:
        self.template = template
        self.missing = tuple(missing)
        super().__init__(
            "Missing required placeholder(s) [!missing] in [@template]",
            {"!missing": ", ".join(self.missing), "@template": template},
        )


class ResourceFetchError(LoshError):
    def __init__(self, url: str, *, status: int | None = None, reason: str | None = None) -> None:
        self.url = url
        self.status = status
        self.reason = reason
        prefix = f"{status} - " if status is not None else ""
        super().__init__(f"{prefix}{reason or 'Request failed'} [@url]", {"@url": url})


class FileWriteError(LoshError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write [@path]: {reason}", {"@path": path})


class ProcessFailureError(LoshError):
    category = "failed"

    def __init__(self, cmd: Sequence[str], exit_code: int, detail: str | None = None) -> None:
        self.cmd = list(cmd)
        self.exit_code = exit_code
        self.detail = detail
        super().__init__(
            "Command [@cmd] exited with code [!code]",
            {"@cmd": " ".join(self.cmd), "!code": str(exit_code)},
        )


class InputClosedError(LoshError):
    def __init__(self, prompt: str) -> None:
        self.prompt = prompt
        super().__init__("Input closed while waiting for [@prompt]", {"@prompt": prompt.strip()})
