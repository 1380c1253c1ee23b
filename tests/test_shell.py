from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from git import Actor, Repo

from losh.errors import ProcessFailureError
from losh.runtime import ProcessResult
from losh.shell import Drush, Git, Node


@pytest.fixture
def repo(tmp_path: Path) -> Repo:
    repo = Repo.init(tmp_path)
    (tmp_path / "README.md").write_text("hello\n", encoding="utf-8")
    repo.index.add(["README.md"])
    author = Actor("Losh Test", "losh@example.org")
    repo.index.commit("initial", author=author, committer=author)
    return repo


def test_current_hash_matches_head(repo: Repo) -> None:
    git = Git(Path(repo.working_tree_dir))
    assert asyncio.run(git.current_hash()) == repo.head.commit.hexsha


def test_hash_is_found_from_a_subdirectory(repo: Repo) -> None:
    nested = Path(repo.working_tree_dir) / "web"
    nested.mkdir()
    assert asyncio.run(Git(nested).current_hash()) == repo.head.commit.hexsha


def test_checkout_and_current_branch(repo: Repo) -> None:
    repo.create_head("feature")
    git = Git(Path(repo.working_tree_dir))

    asyncio.run(git.checkout("feature"))

    assert asyncio.run(git.current_branch()) == "feature"


def test_failed_git_command_raises(repo: Repo) -> None:
    git = Git(Path(repo.working_tree_dir))

    with pytest.raises(ProcessFailureError) as exc_info:
        asyncio.run(git.checkout("does-not-exist"))
    assert exc_info.value.cmd == ["git", "checkout", "does-not-exist"]
    assert exc_info.value.exit_code != 0


def test_outside_a_repository(tmp_path: Path) -> None:
    with pytest.raises(ProcessFailureError, match="exited with code"):
        asyncio.run(Git(tmp_path).current_hash())


def test_drush_is_run_from_the_project_vendor_dir(tmp_path: Path) -> None:
    assert Drush(tmp_path).get_command() == str(tmp_path / "vendor" / "bin" / "drush")


class _StubNode(Node):
    def __init__(self, output: str) -> None:
        super().__init__(Path("."))
        self.output = output

    async def capture(self, *args: str) -> ProcessResult:
        return ProcessResult(cmd=["node", *args], cwd=".", exit_code=0, stdout=self.output)


def test_node_version_is_parsed() -> None:
    version = asyncio.run(_StubNode("v18.17.1\n").version())
    assert (version.full, version.major, version.minor, version.patch) == ("18.17.1", 18, 17, 1)


def test_unexpected_node_output_raises() -> None:
    with pytest.raises(ProcessFailureError):
        asyncio.run(_StubNode("nope").version())
