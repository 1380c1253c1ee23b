from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from rich.console import Console as RichConsole
from rich.text import Text

from losh.errors import LoshError


@dataclass(frozen=True)
class MessageStyle:
    prefix: str
    style: str
    stderr: bool


MESSAGE_STYLES: dict[str, MessageStyle] = {
    "note": MessageStyle(prefix="", style="bright_blue", stderr=False),
    "warn": MessageStyle(prefix="[WARN]: ", style="yellow", stderr=True),
    "error": MessageStyle(prefix="[ERROR]: ", style="red", stderr=True),
    "success": MessageStyle(prefix="[SUCCESS]: ", style="on green", stderr=False),
    "failed": MessageStyle(prefix="[FAILED]: ", style="on red", stderr=True),
}

# First character of a placeholder key selects its highlight: (style, quote).
PLACEHOLDER_STYLES: dict[str, tuple[str, str]] = {
    "@": ("cyan", ""),
    "!": ("magenta", '"'),
}


def format_message(
    category: str,
    message: str,
    placeholders: Mapping[str, object] | None = None,
) -> Text:
    """Build the styled line for ``message``.

    ``[key]`` markers are replaced with ``placeholders[key]``; keys starting
    with ``@`` or ``!`` are highlighted, any other key is inserted as-is.
    """
    spec = MESSAGE_STYLES[category]
    text = Text(spec.prefix, style=spec.style)
    values = {f"[{key}]": key for key in (placeholders or {})}
    if not values:
        text.append(message, style=spec.style)
        return text

    pattern = re.compile("|".join(re.escape(marker) for marker in values))
    cursor = 0
    for match in pattern.finditer(message):
        text.append(message[cursor : match.start()], style=spec.style)
        key = values[match.group(0)]
        value = str(placeholders[key])
        highlight = PLACEHOLDER_STYLES.get(key[0])
        if highlight is None:
            text.append(value, style=spec.style)
        else:
            style, quote = highlight
            text.append(f"{quote}{value}{quote}", style=f"{spec.style} {style}".strip())
        cursor = match.end()
    text.append(message[cursor:], style=spec.style)
    return text


class Console:
    """Categorised user-facing output (note/warn/error/success/failed)."""

    def __init__(self, *, no_color: bool | None = None) -> None:
        self._out = RichConsole(soft_wrap=True, highlight=False, no_color=no_color)
        self._err = RichConsole(stderr=True, soft_wrap=True, highlight=False, no_color=no_color)

    def message(self, category: str, message: str, placeholders: Mapping[str, object] | None = None) -> None:
        target = self._err if MESSAGE_STYLES[category].stderr else self._out
        target.print(format_message(category, message, placeholders))

    def note(self, message: str, placeholders: Mapping[str, object] | None = None) -> None:
        self.message("note", message, placeholders)

    def warn(self, message: str, placeholders: Mapping[str, object] | None = None) -> None:
        self.message("warn", message, placeholders)

    def error(self, message: str, placeholders: Mapping[str, object] | None = None) -> None:
        self.message("error", message, placeholders)

    def success(self, message: str, placeholders: Mapping[str, object] | None = None) -> None:
        self.message("success", message, placeholders)

    def failed(self, message: str, placeholders: Mapping[str, object] | None = None) -> None:
        self.message("failed", message, placeholders)

    def line(self, text: str = "") -> None:
        self._out.print(Text(text))

    def report(self, error: LoshError) -> None:
        """Print ``error`` unless an earlier layer already did."""
        if error.reported:
            return
        self.message(error.category, error.message, error.placeholders)
        error.reported = True
