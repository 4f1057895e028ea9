"""Git operations backing task commit and undo."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Protocol

from llmdiff import log


def _git(*args: str, cwd: Path | None = None, check: bool = False) -> subprocess.CompletedProcess[str]:
    """Run a git command, capturing output."""
    return subprocess.run(
        ["git", *args],
        capture_output=True,
        text=True,
        cwd=cwd,
        check=check,
    )


def is_repo(cwd: Path | None = None) -> bool:
    try:
        r = _git("rev-parse", "--is-inside-work-tree", cwd=cwd)
    except FileNotFoundError:
        return False
    return r.returncode == 0 and r.stdout.strip() == "true"


def has_dirty_worktree(cwd: Path | None = None) -> bool:
    r = _git("status", "--porcelain", cwd=cwd)
    return bool(r.stdout.strip())


def add_and_commit(message: str, cwd: Path | None = None) -> bool:
    """Stage everything and commit. ``False`` when either step fails (e.g. nothing to commit)."""
    r = _git("add", "-A", cwd=cwd)
    if r.returncode != 0:
        log.warn(f"git add failed: {r.stderr.strip()}")
        return False
    r = _git("commit", "-m", message, cwd=cwd)
    if r.returncode != 0:
        log.warn(f"git commit failed: {(r.stderr or r.stdout).strip()}")
        return False
    return True


def reset_hard(cwd: Path | None = None) -> bool:
    """Discard all tracked working-tree changes (``git reset --hard HEAD``)."""
    r = _git("reset", "--hard", "HEAD", cwd=cwd)
    if r.returncode != 0:
        log.warn(f"git reset failed: {r.stderr.strip()}")
        return False
    return True


def last_commit_message(cwd: Path | None = None) -> str:
    r = _git("log", "-1", "--pretty=%s", cwd=cwd)
    return r.stdout.strip() if r.returncode == 0 else ""


# ── Runner port used by the task ledger ──────────────────────────────


class VcsRunner(Protocol):
    def stage_and_commit(self, message: str) -> bool: ...

    def hard_reset(self) -> bool: ...


class GitRunner:
    """``VcsRunner`` backed by the git CLI in *cwd*."""

    def __init__(self, cwd: Path) -> None:
        self.cwd = cwd

    def stage_and_commit(self, message: str) -> bool:
        if not is_repo(self.cwd):
            log.warn(f"Not a git repository: {self.cwd}")
            return False
        return add_and_commit(message, cwd=self.cwd)

    def hard_reset(self) -> bool:
        if not is_repo(self.cwd):
            log.warn(f"Not a git repository: {self.cwd}")
            return False
        return reset_hard(cwd=self.cwd)
