from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from losh.errors import MissingArgumentError

REQUIRED_MARKER = "!"


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    required: bool = False
    options: tuple[str, ...] | None = None
    fallback: str | None = None
    description: str | None = None

    @property
    def usage(self) -> str:
        text = "|".join(self.options) if self.options else self.name
        if self.fallback:
            text += f"={self.fallback}"
        if self.required:
            return f"<{text}>"
        return f"[{text}]"


@dataclass
class BoundArguments:
    values: dict[str, str] = field(default_factory=dict)
    overflow: list[str] = field(default_factory=list)

    def __getitem__(self, name: str) -> str:
        return self.values[name]

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.values.get(name, default)


def parse_parameter(raw: Any) -> ParameterSpec:
    """Build a spec from ``"name"`` or ``(name, description?, options?, fallback?)``."""
    if isinstance(raw, ParameterSpec):
        return raw
    if isinstance(raw, str):
        raw = (raw,)
    values = list(raw) + [None] * (4 - len(raw))
    name, description, options, fallback = values[:4]
    if not isinstance(name, str) or not name.lstrip(REQUIRED_MARKER):
        raise ValueError(f"Invalid parameter declaration: {raw!r}")

    required = name.startswith(REQUIRED_MARKER)
    if required:
        name = name[len(REQUIRED_MARKER) :]
    if isinstance(options, str):
        options = (options,)
    elif options:
        options = tuple(str(option) for option in options)
    else:
        options = None
    return ParameterSpec(
        name=name,
        required=required,
        options=options,
        fallback=str(fallback) if fallback else None,
        description=description or None,
    )


def parse_parameters(raw: Iterable[Any] | None) -> tuple[ParameterSpec, ...]:
    if not raw:
        return ()
    return tuple(parse_parameter(item) for item in raw)


def command_usage(program: str, name: str, params: Sequence[ParameterSpec]) -> str:
    return " ".join([program, name, *(param.usage for param in params)])


def bind_arguments(params: Sequence[ParameterSpec], args: Sequence[str]) -> BoundArguments:
    """Bind ``args`` to ``params`` by position.

    Missing optional positions get their fallback or stay absent; a
    required parameter never falls back and raises ``MissingArgumentError``
    when absent.
    Arguments past the declared parameters end up in ``overflow``.
    """
    bound = BoundArguments()
    for index, param in enumerate(params):
        value = args[index] if index < len(args) else None
        if value == "":
            value = None
        if value is None and not param.required:
            value = param.fallback
        if value is None and param.required:
            raise MissingArgumentError(param.name)
        if value is not None:
            bound.values[param.name] = value
    bound.overflow.extend(args[len(params) :])
    return bound
