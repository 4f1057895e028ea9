"""llmdiff CLI: manage tasks and apply LLM replies to the workspace.

Installed as the ``llmdiff`` console_script.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import update_wrapper
from pathlib import Path

import click

from llmdiff import __version__, log
from llmdiff.config import Config
from llmdiff.errors import LlmDiffError
from llmdiff.git_ops import GitRunner, has_dirty_worktree, is_repo
from llmdiff.io_utils import read_text
from llmdiff.ops.executor import Executor
from llmdiff.ops.parser import parse
from llmdiff.tasks.ledger import TaskLedger
from llmdiff.workflow import apply_text, include_files

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@dataclass
class AppContext:
    cfg: Config
    root: Path
    ledger: TaskLedger


def _open_context(cfg: Config) -> AppContext:
    root = cfg.root
    ledger = TaskLedger(cfg.tasks_dir, GitRunner(root), current_file=cfg.current_file)
    return AppContext(cfg=cfg, root=root, ledger=ledger)


def pass_app(f):
    """Build the workspace/ledger context lazily and turn llmdiff errors into exit code 1."""

    @click.pass_context
    def wrapper(ctx: click.Context, *args, **kwargs):
        try:
            app = ctx.obj if isinstance(ctx.obj, AppContext) else _open_context(ctx.obj)
            ctx.obj = app
            return ctx.invoke(f, app, *args, **kwargs)
        except LlmDiffError as exc:
            log.error(str(exc))
            ctx.exit(1)

    return update_wrapper(wrapper, f)


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        raise click.BadParameter(f"No such file: {source}", param_hint="SOURCE")
    return read_text(path)


def _confirm(question: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    return click.confirm(question, default=False)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--root",
    "workspace_root",
    default="",
    help="Workspace root (default: git top-level, else cwd)",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="llmdiff")
@click.pass_context
def main(ctx: click.Context, workspace_root: str, verbose: bool) -> None:
    """llmdiff: apply file operations from an LLM reply, one task at a time.

    \b
    EXAMPLES:
      llmdiff task start "Add login" -d "OAuth flow"
      llmdiff add src/auth.py src/app.py
      llmdiff apply reply.md            # or: pbpaste | llmdiff apply -
      llmdiff commit                    # or: llmdiff undo
    """
    log.set_verbose(verbose)
    ctx.obj = Config(workspace_root=workspace_root, verbose=verbose)


# ── task management ──────────────────────────────────────────────────


@main.group()
def task() -> None:
    """Start, list, switch and end tasks."""


@task.command("start")
@click.argument("name")
@click.option("-d", "--description", default=None, help="Task description")
@pass_app
def task_start(app: AppContext, name: str, description: str | None) -> None:
    """Start a task, or resume the existing task called NAME."""
    t = app.ledger.start_task(name, description)
    suffix = f" ({t.description})" if t.description else ""
    log.success(f"Active task: {t.name} [{t.id}]{suffix}")


@task.command("list")
@click.option("-n", "--limit", type=int, default=None, help="How many tasks to show")
@pass_app
def task_list(app: AppContext, limit: int | None) -> None:
    """List recent tasks, newest first."""
    tasks = app.ledger.load_recent_tasks(limit if limit is not None else app.cfg.recent_limit)
    if not tasks:
        log.info("No tasks yet")
        return
    current = app.ledger.get_current_task()
    for t in tasks:
        marker = "*" if current is not None and current.id == t.id else " "
        created = t.created_at.strftime("%Y-%m-%d %H:%M")
        log.console.print(f"{marker} {t.id}  {created}  [{t.status.value}]  {t.name}", markup=False)


@task.command("switch")
@click.argument("task_id")
@pass_app
def task_switch(app: AppContext, task_id: str) -> None:
    """Make TASK_ID the current task."""
    t = app.ledger.set_current_task(task_id)
    log.success(f"Active task: {t.name} [{t.id}]")


@task.command("end")
@pass_app
def task_end(app: AppContext) -> None:
    """End the current task (its record is kept)."""
    app.ledger.clear_current_task()
    log.success("Task ended")


@main.command()
@pass_app
def status(app: AppContext) -> None:
    """Summarize the current task."""
    log.console.print(app.ledger.summary(), markup=False)
    t = app.ledger.get_current_task()
    if t is not None and t.affected_files:
        log.console.print("Affected files:")
        for p in t.affected_files:
            log.console.print(f"  - {p}", markup=False)
    if is_repo(app.root) and has_dirty_worktree(app.root):
        log.info("Working tree has uncommitted changes")


# ── context and apply ────────────────────────────────────────────────


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@pass_app
def add(app: AppContext, paths: tuple[str, ...]) -> None:
    """Add files to the current task's context."""
    added = include_files(app.ledger, paths, app.root)
    if not added:
        log.info("No new files to add (already in context)")
        return
    for p in added:
        log.console.print(f"  + {p}", markup=False)
    log.success(f"Added {len(added)} file(s) to context")


@main.command("parse")
@click.argument("source", default="-")
def parse_cmd(source: str) -> None:
    """Show the operations found in SOURCE (file or - for stdin) without applying them."""
    ops = parse(_read_source(source))
    if not ops:
        log.warn("No operation blocks found")
        return
    for i, op in enumerate(ops, 1):
        log.console.print(f"{i:>3}. {op.kind:<15} {op.label()}", markup=False)


@main.command()
@click.argument("source", default="-")
@click.option("-y", "--yes", is_flag=True, help="Overwrite existing files without asking")
@pass_app
def apply(app: AppContext, source: str, yes: bool) -> None:
    """Apply the operations in SOURCE (file or - for stdin) to the workspace."""
    text = _read_source(source)
    executor = Executor(
        app.root,
        confirm_overwrite=lambda path: _confirm(f"File {path} already exists. Overwrite?", yes),
        diagnostics=log.DiagnosticLog(app.cfg.log_file),
    )

    # No spinner here: overwrite prompts may interrupt the batch.
    log.info("Applying operations…")
    outcome = apply_text(app.ledger, text, executor)

    if not outcome.parsed:
        log.warn("No operation blocks found")
        return

    result = outcome.result
    for failure in result.failures:
        log.warn(f"{failure.operation.kind}: {failure.reason}")
    if result.errors == 0:
        log.success(f"Applied {result.success} operation(s)")
    else:
        log.warn(f"{result.summary()}: {app.cfg.log_file}")


# ── version control ──────────────────────────────────────────────────


@main.command()
@pass_app
def commit(app: AppContext) -> None:
    """Stage and commit all changes under the current task's name."""
    t = app.ledger.commit_task()
    log.success(f"Task '{t.name}' committed")


@main.command()
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@pass_app
def undo(app: AppContext, yes: bool) -> None:
    """Discard ALL working-tree changes (git reset --hard HEAD)."""
    if app.ledger.undo_task(lambda q: _confirm(q, yes)):
        log.success(f"Task '{app.ledger.get_current_task().name}' undone")
    else:
        log.info("Undo cancelled")
