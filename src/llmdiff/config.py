"""Configuration defaults, env vars, and workspace resolution for llmdiff."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from llmdiff.errors import WorkspaceUnavailableError

DEFAULT_STATE_DIR = ".llmdiff"
STATE_DIR_ENV = "LLMDIFF_STATE_DIR"


@dataclass
class Config:
    """Runtime configuration, filled from CLI flags and environment."""

    workspace_root: str = ""

    # Where tasks, the current-task pointer and the diagnostic log live.
    # Relative values are resolved against the workspace root.
    state_dir: str = ""

    recent_limit: int = 10
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.state_dir:
            self.state_dir = os.environ.get(STATE_DIR_ENV) or DEFAULT_STATE_DIR

    @property
    def root(self) -> Path:
        return resolve_workspace(self.workspace_root or None)

    @property
    def state_path(self) -> Path:
        p = Path(self.state_dir).expanduser()
        return p if p.is_absolute() else self.root / p

    @property
    def tasks_dir(self) -> Path:
        return self.state_path / "tasks"

    @property
    def log_file(self) -> Path:
        return self.state_path / "output.log"

    @property
    def current_file(self) -> Path:
        return self.state_path / "current"


def resolve_repo_root(cwd: Path | None = None) -> Path:
    """Return the git repository root, falling back to cwd."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
        return Path(result.stdout.strip())
    except (subprocess.CalledProcessError, FileNotFoundError):
        return cwd or Path.cwd()


def resolve_workspace(explicit: str | Path | None = None) -> Path:
    """Return the absolute workspace root, or raise ``WorkspaceUnavailableError``."""
    root = Path(explicit).expanduser() if explicit else resolve_repo_root()
    if not root.is_dir():
        raise WorkspaceUnavailableError(f"Workspace root is not a directory: {root}")
    return root.resolve()
