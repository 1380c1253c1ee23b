from __future__ import annotations

import re
from collections.abc import Mapping

from losh.errors import MissingPlaceholderError

# {{<pre>!key<post>}}: pre/post are optional decoration runs kept next to the
# value and dropped together with it when the key is missing.
BAG_PATTERN = re.compile(
    r"\{\{(?P<pre>[^\w{}!]*)(?P<required>!?)(?P<key>[A-Za-z_](?:[\w.-]*\w)?)(?P<post>[^\w{}]*)\}\}"
)
PATH_PATTERN = re.compile(r"@(?P<required>!?)(?P<name>[A-Za-z_]\w*)")


def placeholder(key: str, *, required: bool = False) -> str:
    return "{{" + ("!" if required else "") + key + "}}"


def substitute(
    template: str,
    bag: Mapping[str, str],
    paths: Mapping[str, str] | None = None,
    *,
    strict: bool = False,
) -> str | None:
    """Replace bag placeholders and path macros in ``template``.

    Returns ``None`` in lenient mode when a required reference is missing;
    strict mode raises ``MissingPlaceholderError`` instead.
    """
    missing: list[str] = []
    paths = paths or {}

    def _bag(match: re.Match[str]) -> str:
        key = match.group("key")
        if key in bag:
            return f"{match.group('pre')}{bag[key]}{match.group('post')}"
        if match.group("required"):
            missing.append(key)
        return ""

    def _path(match: re.Match[str]) -> str:
        name = match.group("name")
        if name in paths:
            return str(paths[name])
        if match.group("required"):
            missing.append(f"@{name}")
        return match.group(0)

    # Path macros are expanded in template text only, never inside inserted values.
    pieces: list[str] = []
    cursor = 0
    for match in BAG_PATTERN.finditer(template):
        pieces.append(PATH_PATTERN.sub(_path, template[cursor : match.start()]))
        pieces.append(_bag(match))
        cursor = match.end()
    pieces.append(PATH_PATTERN.sub(_path, template[cursor:]))
    content = "".join(pieces)

    if missing:
        if strict:
            raise MissingPlaceholderError(template, missing)
        return None
    return content
