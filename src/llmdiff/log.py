"""Logging utilities: colored console output via Rich, plus the diagnostic log file."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from llmdiff.io_utils import open_text, read_text

console = Console(highlight=False)
_err_console = Console(highlight=False, stderr=True)

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def info(msg: str) -> None:
    console.print(f"[blue]\\[INFO][/blue] {escape(msg)}")


def success(msg: str) -> None:
    console.print(f"[green]\\[OK][/green] {escape(msg)}")


def warn(msg: str) -> None:
    console.print(f"[yellow]\\[WARN][/yellow] {escape(msg)}")


def error(msg: str) -> None:
    _err_console.print(f"[red]\\[ERROR][/red] {escape(msg)}")


def debug(msg: str) -> None:
    if _verbose:
        console.print(f"[dim]\\[DEBUG] {escape(msg)}[/dim]")


class DiagnosticLog:
    """Append-only, timestamped log of every applied or failed operation.

    This is what the "see log" in a batch summary points at.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def write(self, msg: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().isoformat(timespec="seconds")
        with open_text(self.path, "a") as f:
            f.write(f"[{ts}] {msg}\n")
        debug(msg)

    def tail(self, n: int = 20) -> list[str]:
        if not self.path.is_file():
            return []
        lines = read_text(self.path).splitlines()
        return lines[-n:] if n > 0 else []
