"""CLI: chats config login|status|logout"""

from typing import Optional

import click
from rich.console import Console

from chat_sessions.transport.http import DEFAULT_API_URL

console = Console()


def _load_config() -> dict:
    from chat_sessions.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from chat_sessions.cli.main import _save_config
    _save_config(cfg)


@click.group()
def config():
    """Owner token and server settings."""


@config.command("login")
@click.option("--token", prompt="Owner token", hide_input=True, help="Opaque owner token issued by the app")
@click.option("--api-url", default=None, help="Session store API root")
def config_login(token: str, api_url: Optional[str]):
    """Save the owner token."""
    cfg = _load_config()
    _save_config({**cfg, "owner_token": token, "api_url": api_url or cfg.get("api_url", DEFAULT_API_URL)})
    console.print("[green]Token saved to ~/.chat-sessions/config.json[/green]")


@config.command("status")
def config_status():
    """Show the current settings."""
    cfg = _load_config()
    if cfg.get("owner_token"):
        console.print(f"[green]Configured[/green] for {cfg.get('api_url', DEFAULT_API_URL)}")
    else:
        console.print("[yellow]No owner token. Run `chats config login`.[/yellow]")


@config.command("logout")
def config_logout():
    """Forget the saved token."""
    _save_config({})
    console.print("[green]Token cleared.[/green]")
