from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from losh.errors import FileWriteError, ProcessFailureError

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


@dataclass
class ProcessResult:
    cmd: list[str]
    cwd: str
    exit_code: int
    stdout: str | None = None
    stderr: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def check(self) -> ProcessResult:
        if not self.ok:
            raise ProcessFailureError(self.cmd, self.exit_code, self.error)
        return self


async def invoke_process(
    command: str,
    args: list[str] | tuple[str, ...] = (),
    *,
    capture_output: bool = False,
    cwd: Path | str | None = None,
) -> ProcessResult:
    """Run ``command`` and wait for it.

    Without ``capture_output`` the child inherits the terminal; with it,
    stdout/stderr are collected and decoded. A nonzero exit is reported in
    the result, never raised.
    """
    cmd = [command, *args]
    workdir = str(cwd or Path.cwd())
    logger.debug("Running %s in %s (capture=%s)", cmd, workdir, capture_output)
    pipe = asyncio.subprocess.PIPE if capture_output else None
    try:
        proc = await asyncio.create_subprocess_exec(*cmd, cwd=workdir, stdout=pipe, stderr=pipe)
    except OSError as exc:
        return ProcessResult(cmd=cmd, cwd=workdir, exit_code=COMMAND_NOT_FOUND, error=str(exc))

    stdout_b, stderr_b = await proc.communicate()
    exit_code = proc.returncode if proc.returncode is not None else 1
    return ProcessResult(
        cmd=cmd,
        cwd=workdir,
        exit_code=exit_code,
        stdout=stdout_b.decode("utf-8", errors="ignore") if stdout_b is not None else None,
        stderr=stderr_b.decode("utf-8", errors="ignore") if stderr_b is not None else None,
        error=None if exit_code == 0 else f"Exit with code: {exit_code}",
    )


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def write_file(path: Path | str, content: str) -> None:
    target = Path(path)
    try:
        await asyncio.to_thread(_write_text, target, content)
    except OSError as exc:
        raise FileWriteError(str(target), exc.strerror or str(exc)) from exc
