"""CLI entrypoint for codesquad."""

from __future__ import annotations

import asyncio
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.table import Table

from codesquad.app import Squad, build_squad
from codesquad.config.loader import config_path_for, load_config
from codesquad.errors import CodesquadError
from codesquad.logs import get_logger, setup_from_config
from codesquad.status import AgentStatus, AIType
from codesquad.threads import IsolationMode

console = Console()
log = get_logger(__name__)


@click.group()
@click.option(
    "--workspace",
    "workspace",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Workspace (git repository) root",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: <workspace>/.codesquad/config.yaml)",
)
@click.option("--debug", "debug_flag", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, workspace: Path, config_file: Path | None, debug_flag: bool) -> None:
    """Run AI coding-agent threads side by side and route review comments to them."""
    ctx.ensure_object(dict)
    try:
        cfg = load_config(config_file or config_path_for(workspace))
    except CodesquadError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_from_config(cfg.logging, debug=debug_flag)
    ctx.obj["config"] = cfg
    ctx.obj["workspace"] = workspace


def _squad(ctx: click.Context) -> Squad:
    obj: dict[str, Any] = ctx.obj
    if "squad" not in obj:
        obj["squad"] = build_squad(
            obj["workspace"],
            obj["config"],
            notifier=obj.get("notifier"),
            terminal=obj.get("terminal"),
        )
    return obj["squad"]


# ---------------------------------------------------------------------------
# thread
# ---------------------------------------------------------------------------


@main.group("thread")
def thread_group() -> None:
    """Create, inspect and tear down agent threads."""


@thread_group.command("create")
@click.argument("name")
@click.option(
    "--isolation",
    type=click.Choice([m.value for m in IsolationMode]),
    default=None,
    help="Worktree isolation mode (default from config)",
)
@click.option("--branch", "branch_name", default=None, help="Branch name (default: thread name)")
@click.option("--path", "worktree_path", default=None, help="Explicit worktree path")
@click.option(
    "--copy",
    "copy_patterns",
    multiple=True,
    help="Glob of files to copy into the worktree (repeatable, overrides config)",
)
@click.pass_context
def thread_create(
    ctx: click.Context,
    name: str,
    isolation: str | None,
    branch_name: str | None,
    worktree_path: str | None,
    copy_patterns: tuple[str, ...],
) -> None:
    squad = _squad(ctx)
    ws = squad.config.workspace
    try:
        state = asyncio.run(
            squad.threads.create(
                name,
                isolation or ws.default_isolation,
                squad.workspace_root,
                branch_name=branch_name,
                worktree_path=worktree_path,
                worktree_copy_patterns=copy_patterns or ws.worktree_copy_patterns,
            )
        )
    except CodesquadError as exc:
        log.error(
            "thread_create_failed", name=name, category=str(exc.category), details=exc.details
        )
        raise click.ClickException(str(exc)) from exc
    log.debug("thread_created", thread_id=state.thread_id, terminal_id=state.terminal_id)
    click.echo(f"Created thread {state.thread_id} ({state.name}) in {state.working_dir}")
    if state.branch:
        click.echo(f"  branch: {state.branch}")


@thread_group.command("delete")
@click.argument("thread_id")
@click.option("--keep-terminal", is_flag=True, help="Leave the terminal open")
@click.option("--keep-worktree", is_flag=True, help="Leave the worktree and branch in place")
@click.pass_context
def thread_delete(ctx: click.Context, thread_id: str, keep_terminal: bool, keep_worktree: bool) -> None:
    squad = _squad(ctx)
    result = asyncio.run(
        squad.threads.delete(
            thread_id,
            squad.workspace_root,
            close_terminal=not keep_terminal,
            remove_worktree=not keep_worktree,
        )
    )
    if not result.success:
        raise click.ClickException(f"Thread not found: {thread_id}")
    click.echo(
        f"Deleted thread {thread_id}: comments={result.deleted_comments_count} "
        f"terminal_closed={result.terminal_closed} worktree_removed={result.worktree_removed} "
        f"branch_deleted={result.branch_deleted}"
    )


@thread_group.command("rename")
@click.argument("thread_id")
@click.argument("new_name")
@click.pass_context
def thread_rename(ctx: click.Context, thread_id: str, new_name: str) -> None:
    squad = _squad(ctx)
    result = asyncio.run(squad.threads.rename(thread_id, new_name))
    if not result.success:
        raise click.ClickException(result.error or "Rename failed")
    click.echo(f"Renamed {result.previous_name} -> {new_name}")


@thread_group.command("switch-branch")
@click.argument("thread_id")
@click.argument("branch")
@click.option("--stash/--no-stash", default=True, help="Stash uncommitted changes before switching")
@click.pass_context
def thread_switch_branch(ctx: click.Context, thread_id: str, branch: str, stash: bool) -> None:
    squad = _squad(ctx)
    try:
        result = asyncio.run(squad.threads.switch_branch(thread_id, branch, stash_changes=stash))
    except CodesquadError as exc:
        raise click.ClickException(str(exc)) from exc
    if not result.success:
        raise click.ClickException(result.error or "Branch switch failed")
    suffix = " (changes stashed)" if result.changes_stashed else ""
    click.echo(f"Switched {result.previous_branch} -> {branch}{suffix}")


@thread_group.command("open")
@click.argument("thread_id")
@click.pass_context
def thread_open(ctx: click.Context, thread_id: str) -> None:
    """Open the thread's worktree in the configured editor."""
    squad = _squad(ctx)
    result = asyncio.run(squad.threads.open_in_editor(thread_id))
    if not result.success:
        raise click.ClickException(result.error or "Failed to open editor")


@thread_group.command("list")
@click.pass_context
def thread_list(ctx: click.Context) -> None:
    squad = _squad(ctx)
    threads = asyncio.run(squad.threads.list_threads())
    if not threads:
        click.echo("No threads")
        return
    table = Table("id", "name", "terminal", "branch", "working dir", "whitelist")
    for t in threads:
        table.add_row(
            t.thread_id,
            t.name,
            t.terminal_id,
            t.branch or "-",
            t.working_dir,
            ", ".join(t.whitelist_patterns) or "-",
        )
    console.print(table)


@thread_group.command("whitelist-add")
@click.argument("thread_id")
@click.argument("pattern")
@click.pass_context
def thread_whitelist_add(ctx: click.Context, thread_id: str, pattern: str) -> None:
    squad = _squad(ctx)
    state = asyncio.run(squad.threads.add_whitelist_pattern(thread_id, pattern))
    if state is None:
        raise click.ClickException(f"Thread not found: {thread_id}")
    click.echo(f"Whitelist: {', '.join(state.whitelist_patterns)}")


@thread_group.command("whitelist-remove")
@click.argument("thread_id")
@click.argument("pattern")
@click.pass_context
def thread_whitelist_remove(ctx: click.Context, thread_id: str, pattern: str) -> None:
    squad = _squad(ctx)
    state = asyncio.run(squad.threads.remove_whitelist_pattern(thread_id, pattern))
    if state is None:
        raise click.ClickException(f"Thread not found: {thread_id}")
    click.echo(f"Whitelist: {', '.join(state.whitelist_patterns) or '(empty)'}")


# ---------------------------------------------------------------------------
# comment / ownership
# ---------------------------------------------------------------------------


@main.group("comment")
def comment_group() -> None:
    """Collect review comments and send them to their threads."""


@comment_group.command("add")
@click.argument("file")
@click.argument("line", type=int)
@click.argument("text")
@click.option("--end-line", type=int, default=None)
@click.option("--thread", "thread_id", default=None, help="Owning thread id")
@click.pass_context
def comment_add(
    ctx: click.Context,
    file: str,
    line: int,
    text: str,
    end_line: int | None,
    thread_id: str | None,
) -> None:
    squad = _squad(ctx)
    comment = asyncio.run(
        squad.comments.add_comment(file, line, text, end_line=end_line, thread_id=thread_id)
    )
    click.echo(f"Added comment {comment.id} on {file}:{comment.line_range}")


@comment_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include submitted comments")
@click.pass_context
def comment_list(ctx: click.Context, show_all: bool) -> None:
    squad = _squad(ctx)
    comments = asyncio.run(squad.comments.list_comments(include_submitted=show_all))
    for c in comments:
        mark = "x" if c.is_submitted else " "
        click.echo(f"[{mark}] {c.id} {c.file}:{c.line_range} {c.text}")


@comment_group.command("submit")
@click.option("--focused", "focused_id", default=None, help="Fallback thread for unowned files")
@click.pass_context
def comment_submit(ctx: click.Context, focused_id: str | None) -> None:
    """Send pending comments, one batch per owning thread."""
    squad = _squad(ctx)

    async def _submit() -> Any:
        focused = await squad.threads.find_thread(focused_id) if focused_id else None
        if focused_id and focused is None:
            raise click.ClickException(f"Thread not found: {focused_id}")
        return await squad.router.execute_with_routing(focused)

    result = asyncio.run(_submit())
    if result is None:
        click.echo("Nothing submitted")
        return
    click.echo(f"Submitted {result.count} comment(s) to {', '.join(result.thread_names)}")


@main.command("own")
@click.argument("file")
@click.argument("thread_id")
@click.pass_context
def own_command(ctx: click.Context, file: str, thread_id: str) -> None:
    """Record THREAD_ID as the last thread to touch FILE."""
    squad = _squad(ctx)
    asyncio.run(squad.ownership.track(file, thread_id))
    click.echo(f"{file} -> {thread_id}")


# ---------------------------------------------------------------------------
# status / config
# ---------------------------------------------------------------------------


@main.group("status")
def status_group() -> None:
    """Agent status detection."""


@status_group.command("watch")
@click.argument("terminal_id")
@click.option(
    "--ai",
    "ai_type",
    type=click.Choice([t.value for t in AIType]),
    default=None,
    help="Agent flavour hint",
)
@click.pass_context
def status_watch(ctx: click.Context, terminal_id: str, ai_type: str | None) -> None:
    """Classify output piped on stdin, e.g. from ``tmux pipe-pane``."""
    squad = _squad(ctx)
    detector = squad.detector
    watch_log = log.bind(terminal_id=terminal_id, ai_hint=ai_type)

    def _on_status(tid: str, status: AgentStatus) -> None:
        click.echo(f"{tid} status={status}")

    def _on_type(tid: str, detected: AIType) -> None:
        click.echo(f"{tid} ai={detected}")

    detector.on_status_change(_on_status)
    detector.on_ai_type_change(_on_type)

    async def _pump() -> None:
        watch_log.debug("status_watch_started")
        while True:
            chunk = await asyncio.to_thread(sys.stdin.readline)
            if not chunk:
                break
            detector.process_output(terminal_id, ai_type, chunk.rstrip("\n"))
        # Let the final debounce window elapse before exiting.
        await asyncio.sleep(squad.config.status.debounce_ms / 1000 + 0.05)
        watch_log.debug("status_watch_finished", status=str(detector.get_status(terminal_id)))
        detector.clear(terminal_id)

    asyncio.run(_pump())


@main.group("config")
def config_group() -> None:
    """Inspect configuration."""


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    click.echo(yaml.safe_dump(asdict(ctx.obj["config"]), sort_keys=False).rstrip())
