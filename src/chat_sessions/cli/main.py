"""
Chat sessions CLI: `chats` command.

Commands:
  chats config login|status|logout   Owner token and API URL
  chats list | archived | shared     Browse history
  chats archive|unarchive|delete ID  Item actions
  chats rename ID TITLE              Relabel a chat
  chats share|unshare ID             Public link
  chats archive-all|delete-all       Bulk actions (confirmed)
  chats export [-o FILE]             Download every chat
"""

import asyncio
import json
import os
from pathlib import Path

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install chat-sessions[cli]")

from chat_sessions.client import AsyncChatSessions
from chat_sessions.transport.http import DEFAULT_API_URL

console = Console()
CONFIG_FILE = Path.home() / ".chat-sessions" / "config.json"
TOKEN_ENV = "CHAT_SESSIONS_TOKEN"
API_URL_ENV = "CHAT_SESSIONS_API_URL"


def _load_config() -> dict:
    try:
        cfg = json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        cfg = {}
    if os.environ.get(TOKEN_ENV):
        cfg["owner_token"] = os.environ[TOKEN_ENV]
    if os.environ.get(API_URL_ENV):
        cfg["api_url"] = os.environ[API_URL_ENV]
    return cfg


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _toast(message: str) -> None:
    console.print(f"[red]{message}[/red]")


def _get_client() -> AsyncChatSessions:
    cfg = _load_config()
    if not cfg.get("owner_token"):
        console.print("[red]No owner token. Run `chats config login` first.[/red]")
        raise SystemExit(1)
    return AsyncChatSessions(
        owner_token=cfg["owner_token"],
        api_url=cfg.get("api_url", DEFAULT_API_URL),
        notify=_toast,
    )


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
def main():
    """Chat history from the command line."""


# Register subcommands from separate modules
from chat_sessions.cli.config import config
from chat_sessions.cli.sessions import SESSION_COMMANDS
from chat_sessions.cli.bulk import BULK_COMMANDS

main.add_command(config)
for command in SESSION_COMMANDS + BULK_COMMANDS:
    main.add_command(command)


if __name__ == "__main__":
    main()
