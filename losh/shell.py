from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from losh.errors import ProcessFailureError
from losh.runtime import ProcessResult, invoke_process


class ShellCommand:
    """A named external tool run through the process collaborator."""

    command = ""

    def __init__(self, cwd: Path) -> None:
        self.cwd = cwd

    def get_command(self) -> str:
        return self.command

    async def execute(self, *args: str) -> ProcessResult:
        """Run with the terminal attached."""
        return await invoke_process(self.get_command(), list(args), cwd=self.cwd)

    async def capture(self, *args: str) -> ProcessResult:
        return await invoke_process(self.get_command(), list(args), capture_output=True, cwd=self.cwd)


@dataclass(frozen=True)
class NodeVersion:
    full: str
    major: int
    minor: int
    patch: int


class Node(ShellCommand):
    command = "node"

    async def version(self) -> NodeVersion:
        result = (await self.capture("-v")).check()
        match = re.search(r"(\d+)\.(\d+)\.(\d+)", result.stdout or "")
        if match is None:
            raise ProcessFailureError(result.cmd, result.exit_code, f"Unexpected version output: {result.stdout!r}")
        return NodeVersion(
            full=match.group(0),
            major=int(match.group(1)),
            minor=int(match.group(2)),
            patch=int(match.group(3)),
        )


class Composer(ShellCommand):
    command = "composer"

    async def install(self) -> ProcessResult:
        return await self.execute("install")


class Drush(ShellCommand):
    def get_command(self) -> str:
        return str(self.cwd / "vendor" / "bin" / "drush")

    async def cr(self) -> ProcessResult:
        return await self.execute("cr")

    async def cim(self, force: bool = False) -> ProcessResult:
        return await self.execute("cim", "-y") if force else await self.execute("cim")

    async def cex(self, force: bool = False) -> ProcessResult:
        return await self.execute("cex", "-y") if force else await self.execute("cex")

    async def get_db(self) -> str:
        result = await self.capture("eval", "echo \\Drupal::database()->getConnectionOptions()['database'];")
        return (result.check().stdout or "").strip()


class Git:
    """Git queries and updates on the working copy at ``cwd``."""

    def __init__(self, cwd: Path) -> None:
        self.cwd = cwd

    def _repo(self) -> Repo:
        try:
            return Repo(self.cwd, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as exc:
            raise ProcessFailureError(["git"], 128, f"'{self.cwd}' is not a git repository") from exc

    async def _run(self, *args: str) -> str:
        def _call() -> str:
            repo = self._repo()
            try:
                return str(repo.git.execute(["git", *args]))
            except GitCommandError as exc:
                status = exc.status if isinstance(exc.status, int) else 1
                raise ProcessFailureError(["git", *args], status, str(exc.stderr).strip()) from exc

        return await asyncio.to_thread(_call)

    async def current_hash(self) -> str:
        return (await self._run("rev-parse", "HEAD")).strip()

    async def current_branch(self) -> str:
        return (await self._run("branch", "--show-current")).strip()

    async def pull(self) -> str:
        return await self._run("pull")

    async def checkout(self, branch: str) -> str:
        return await self._run("checkout", branch)
