"""CLI: chats list|archived|shared|archive|unarchive|delete|rename|share|unshare"""

import json
from datetime import datetime

import click
from rich.console import Console
from rich.table import Table

from chat_sessions.grouping import format_time_difference
from chat_sessions.models.session import SessionRecord

console = Console()


def _get_client():
    from chat_sessions.cli.main import _get_client
    return _get_client()


def _run(coro):
    from chat_sessions.cli.main import _run
    return _run(coro)


def _dump(sessions: list[SessionRecord]) -> str:
    return json.dumps([s.model_dump(mode="json", by_alias=True, exclude={"owner_token"}) for s in sessions], indent=2)


def _table(title: str, sessions: list[SessionRecord], now: datetime) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("ID", style="bold")
    table.add_column("Title")
    table.add_column("Mode")
    table.add_column("Age")
    for s in sessions:
        title_cell = s.display_title + (" [cyan](shared)[/cyan]" if s.shared else "")
        table.add_row(s.id, title_cell, s.focus_mode, format_time_difference(now, s.created_at))
    return table


@click.command("list")
@click.option("--json-output", "--json", is_flag=True)
def list_cmd(json_output):
    """List active chats grouped by date."""

    async def _list() -> bool:
        async with _get_client() as client:
            await client.history.mount()
            if client.history.error is not None:
                return False
            if json_output:
                click.echo(_dump(client.history.sessions))
                return True
            if not client.history.sessions:
                console.print("[dim]No chats yet.[/dim]")
                return True
            now = datetime.now().astimezone()
            for group, sessions in client.history.current_groups(now).items():
                console.print(_table(group, sessions, now))
        return True

    if not _run(_list()):
        raise SystemExit(1)


@click.command("archived")
@click.option("--json-output", "--json", is_flag=True)
def archived_cmd(json_output):
    """List archived chats."""

    async def _archived() -> bool:
        async with _get_client() as client:
            async with client.archive_dialog().dialog() as archive:
                sessions, error = archive.sessions, archive.error
            if error is not None:
                return False
            if json_output:
                click.echo(_dump(sessions))
            elif not sessions:
                console.print("[dim]No archived chats.[/dim]")
            else:
                console.print(_table("Archived", sessions, datetime.now().astimezone()))
        return True

    if not _run(_archived()):
        raise SystemExit(1)


@click.command("shared")
def shared_cmd():
    """List chats that have a public link."""

    async def _shared() -> bool:
        async with _get_client() as client:
            await client.history.mount()
            if client.history.error is not None:
                return False
            sessions = client.history.shared_sessions()
            if not sessions:
                console.print("[dim]No shared chats.[/dim]")
                return True
            console.print(_table("Shared", sessions, datetime.now().astimezone()))
        return True

    if not _run(_shared()):
        raise SystemExit(1)


@click.command("archive")
@click.argument("session_id")
def archive_cmd(session_id):
    """Archive a chat."""

    async def _archive():
        async with _get_client() as client:
            with console.status("Archiving..."):
                ok = await client.history.archive(session_id)
        if ok:
            console.print(f"[green]Chat {session_id} archived.[/green]")
        return ok

    if not _run(_archive()):
        raise SystemExit(1)


@click.command("unarchive")
@click.argument("session_id")
def unarchive_cmd(session_id):
    """Restore an archived chat."""

    async def _unarchive():
        async with _get_client() as client:
            async with client.archive_dialog().dialog() as archive:
                with console.status("Restoring..."):
                    ok = await archive.unarchive(session_id)
        if ok:
            console.print(f"[green]Chat {session_id} restored.[/green]")
        return ok

    if not _run(_unarchive()):
        raise SystemExit(1)


@click.command("delete")
@click.argument("session_id")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
def delete_cmd(session_id, yes):
    """Permanently delete a chat."""
    if not yes:
        click.confirm(f"Delete chat {session_id}? This cannot be undone", abort=True)

    async def _delete():
        async with _get_client() as client:
            with console.status("Deleting..."):
                ok = await client.history.delete(session_id)
        if ok:
            console.print(f"[green]Chat {session_id} deleted.[/green]")
        return ok

    if not _run(_delete()):
        raise SystemExit(1)


@click.command("rename")
@click.argument("session_id")
@click.argument("title")
def rename_cmd(session_id, title):
    """Rename a chat."""

    async def _rename():
        async with _get_client() as client:
            ok = await client.history.rename(session_id, title)
        if ok:
            console.print(f"[green]Chat {session_id} renamed to {title!r}.[/green]")
        return ok

    if not _run(_rename()):
        raise SystemExit(1)


@click.command("share")
@click.argument("session_id")
def share_cmd(session_id):
    """Create a public link for a chat."""

    async def _share() -> bool:
        async with _get_client() as client:
            url = await client.history.share(session_id)
        if url is None:
            return False
        console.print(f"[green]Shared:[/green] {url}" if url else f"[green]Chat {session_id} shared.[/green]")
        return True

    if not _run(_share()):
        raise SystemExit(1)


@click.command("unshare")
@click.argument("session_id")
def unshare_cmd(session_id):
    """Remove a chat's public link."""

    async def _unshare():
        async with _get_client() as client:
            ok = await client.history.unshare(session_id)
        if ok:
            console.print(f"[green]Chat {session_id} is no longer shared.[/green]")
        return ok

    if not _run(_unshare()):
        raise SystemExit(1)


SESSION_COMMANDS = [
    list_cmd, archived_cmd, shared_cmd, archive_cmd, unarchive_cmd,
    delete_cmd, rename_cmd, share_cmd, unshare_cmd,
]
