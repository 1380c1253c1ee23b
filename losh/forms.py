from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from losh.console import Console
from losh.errors import ResourceFetchError
from losh.placeholders import placeholder, substitute
from losh.prompts import Prompter
from losh.sequence import run_sequence

REQUIRED_MARKER = "!"


class FieldSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1, description="Bag key the answer is stored under")
    prompt: str = Field(..., description="Prompt text, may reference earlier fields")
    required: bool = Field(False, description="Re-prompt until a non-empty answer is given")
    transformer: Optional[str] = Field(None, description="Template computing the stored value")

    @classmethod
    def from_raw(cls, raw: Any) -> FieldSpec:
        """Accept ``[name, prompt, transformer?]`` rows as well as objects."""
        if isinstance(raw, (list, tuple)):
            if len(raw) < 2:
                raise ValueError(f"Field declaration needs a name and a prompt: {raw!r}")
            name = str(raw[0])
            required = name.startswith(REQUIRED_MARKER)
            return cls(
                name=name.lstrip(REQUIRED_MARKER) if required else name,
                prompt=str(raw[1]),
                required=required,
                transformer=raw[2] if len(raw) > 2 else None,
            )
        return cls.model_validate(raw)

    @property
    def effective_transformer(self) -> str:
        return self.transformer or placeholder(self.name)


class FormDefinition(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    description: Optional[str] = None
    fields: tuple[FieldSpec, ...] = ()
    files: dict[str, str] = Field(default_factory=dict)

    @field_validator("fields", mode="before")
    @classmethod
    def _parse_fields(cls, value: Any) -> Any:
        if value is None:
            return ()
        return tuple(FieldSpec.from_raw(item) for item in value)


def parse_form(content: str, *, source: str = "<form>") -> FormDefinition:
    try:
        return FormDefinition.model_validate(json.loads(content))
    except (json.JSONDecodeError, ValidationError, ValueError) as exc:
        raise ResourceFetchError(source, reason=f"Invalid form definition: {exc}") from exc


class FormEngine:
    """Collects a value bag by asking each form field in order."""

    def __init__(self, prompter: Prompter, console: Console, paths: Mapping[str, str] | None = None) -> None:
        self.prompter = prompter
        self.console = console
        self.paths = dict(paths or {})

    async def collect(self, form: FormDefinition) -> dict[str, str]:
        bag: dict[str, str] = {}
        if form.description:
            self.console.note(substitute(form.description, bag, self.paths) or "")

        total = len(form.fields)

        async def _ask(spec: FieldSpec, index: int) -> None:
            question = substitute(spec.prompt, bag, self.paths) or ""
            text = f"[{index + 1}/{total}] {question}: "
            if spec.required:
                answer = await self.prompter.ask_while(text, _require(spec.name))
            else:
                answer = await self.prompter.ask(text)

            bag[spec.name] = answer
            value = substitute(spec.effective_transformer, bag, self.paths)
            if value is None:
                del bag[spec.name]
            else:
                bag[spec.name] = value

        await run_sequence(form.fields, _ask)
        return bag


def _require(name: str):
    def _check(answer: str) -> bool | str:
        if answer.strip():
            return True
        return f'The field "{name}" is required.'

    return _check
