"""Shared fixtures for llmdiff tests.

File handling in tests:
- Use tmp_path for any directory or file creation so tests are isolated and cleaned up.
- Use llmdiff.io_utils read_text/write_text for byte-exact UTF-8 I/O.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from llmdiff.io_utils import write_text
from llmdiff.ops.executor import Executor
from llmdiff.tasks.ledger import TaskLedger


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An empty workspace directory (not the tmp_path itself, so escapes land in tmp_path)."""
    root = tmp_path / "ws"
    root.mkdir()
    return root


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a minimal git repo for testing."""
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init"], cwd=repo, capture_output=True, check=True)
    subprocess.run(["git", "config", "user.name", "Test"], cwd=repo, capture_output=True)
    subprocess.run(["git", "config", "user.email", "test@test"], cwd=repo, capture_output=True)
    subprocess.run(["git", "config", "commit.gpgsign", "false"], cwd=repo, capture_output=True)
    write_text(repo / "README.md", "# Test\n")
    write_text(repo / ".gitignore", ".llmdiff/\n")
    subprocess.run(["git", "add", "README.md", ".gitignore"], cwd=repo, capture_output=True)
    subprocess.run(["git", "commit", "-m", "Initial"], cwd=repo, capture_output=True)
    return repo


class FakeVcs:
    """In-memory VcsRunner recording calls; results are configurable."""

    def __init__(self, commit_ok: bool = True, reset_ok: bool = True) -> None:
        self.commit_ok = commit_ok
        self.reset_ok = reset_ok
        self.commits: list[str] = []
        self.resets = 0

    def stage_and_commit(self, message: str) -> bool:
        self.commits.append(message)
        return self.commit_ok

    def hard_reset(self) -> bool:
        self.resets += 1
        return self.reset_ok


@pytest.fixture
def fake_vcs() -> FakeVcs:
    return FakeVcs()


@pytest.fixture
def ledger(tmp_path: Path, fake_vcs: FakeVcs) -> TaskLedger:
    state = tmp_path / "state"
    return TaskLedger(state / "tasks", fake_vcs, current_file=state / "current")


@pytest.fixture
def executor(workspace: Path) -> Executor:
    return Executor(workspace)
