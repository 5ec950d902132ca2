"""CLI: chats archive-all|delete-all|export"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from chat_sessions.controllers.bulk import BulkActionController, BulkFlow

console = Console()

PROMPTS = {
    BulkFlow.ARCHIVE_ALL: "Archive every chat?",
    BulkFlow.DELETE_ALL: "Delete every chat? This cannot be undone",
    BulkFlow.EXPORT_ALL: "Export every chat?",
}


def _get_client():
    from chat_sessions.cli.main import _get_client
    return _get_client()


def _run(coro):
    from chat_sessions.cli.main import _run
    return _run(coro)


def _confirmed(bulk: BulkActionController, flow: BulkFlow, yes: bool) -> bool:
    bulk.request(flow)
    if yes or click.confirm(PROMPTS[flow]):
        return True
    bulk.cancel()
    console.print("[dim]Cancelled.[/dim]")
    return False


@click.command("archive-all")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
def archive_all_cmd(yes):
    """Archive every active chat."""

    async def _archive_all() -> bool:
        async with _get_client() as client:
            bulk = client.bulk_actions()
            if not _confirmed(bulk, BulkFlow.ARCHIVE_ALL, yes):
                return True
            with console.status("Archiving..."):
                result = await bulk.confirm()
        console.print(f"[green]Archived {len(result.succeeded)} chat(s).[/green]")
        if result.failed:
            console.print(f"[yellow]{len(result.failed)} chat(s) could not be archived.[/yellow]")
        return result.ok

    if not _run(_archive_all()):
        raise SystemExit(1)


@click.command("delete-all")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
def delete_all_cmd(yes):
    """Permanently delete every chat."""

    async def _delete_all() -> bool:
        async with _get_client() as client:
            bulk = client.bulk_actions(redirect=False)
            if not _confirmed(bulk, BulkFlow.DELETE_ALL, yes):
                return True
            with console.status("Deleting..."):
                result = await bulk.confirm()
        if result.ok:
            console.print("[green]All chats deleted.[/green]")
        return result.ok

    if not _run(_delete_all()):
        raise SystemExit(1)


@click.command("export")
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False), help="Destination file")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
def export_cmd(output: Optional[str], yes):
    """Download every chat."""

    async def _export() -> bool:
        async with _get_client() as client:
            bulk = client.bulk_actions()
            if not _confirmed(bulk, BulkFlow.EXPORT_ALL, yes):
                return True
            with console.status("Exporting..."):
                result = await bulk.confirm()
        if not result.ok or result.data is None:
            return False
        path = Path(output or "chats-export.json")
        path.write_bytes(result.data)
        console.print(f"[green]Exported {len(result.data)} bytes to {path}[/green]")
        return True

    if not _run(_export()):
        raise SystemExit(1)


BULK_COMMANDS = [archive_all_cmd, delete_all_cmd, export_cmd]
