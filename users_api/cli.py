#!/usr/bin/env python3
"""
Users API CLI - serve the API and manage the user collection file.

This module provides the ``users-api`` command using Click and Rich.
"""

import asyncio
import json
import os
import sys
from typing import Any, Dict, Optional, Tuple

import click
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from users_api.config import Settings
from users_api.core.ids import get_allocator, parse_user_id
from users_api.core.store import JsonFileUserStore, StorageError

# Initialize rich console
console = Console()

CONTEXT_SETTINGS = dict(help_option_names=['--help'])


class Context:
    """Shared context for CLI commands."""

    def __init__(self):
        self.settings: Optional[Settings] = None
        self.verbose: bool = False

    def store(self) -> JsonFileUserStore:
        return JsonFileUserStore(
            self.settings.users_file,
            get_allocator(self.settings.id_strategy)
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


def _fail(ctx: Context, error: Exception):
    console.print(f"[bold red]✗ Error:[/bold red] {error}")
    if ctx.verbose:
        console.print_exception()
    sys.exit(1)


def _parse_assignments(pairs: Tuple[str, ...]) -> Dict[str, Any]:
    """Turn KEY=VALUE arguments into a dict, decoding JSON values when possible."""
    attributes = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair!r}")
        try:
            attributes[key] = json.loads(value)
        except json.JSONDecodeError:
            attributes[key] = value
    return attributes


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--users-file', '-f', default=None, help='Path of the users JSON file')
@pass_context
def cli(ctx: Context, verbose: bool, users_file: Optional[str]):
    """
    Users API: a JSON-file backed users REST service.

    Examples:

        users-api serve --port 4000

        users-api init

        users-api add name=Alice age=30

        users-api show 1
    """
    ctx.verbose = verbose
    ctx.settings = Settings.from_env()
    if users_file:
        ctx.settings.users_file = users_file


# ============================================================================
# SERVE COMMAND
# ============================================================================

@cli.command()
@click.option('--host', '-h', default=None, help='Host to bind to (default: from settings)')
@click.option('--port', '-p', default=None, type=int, help='Port to bind to (default: from settings)')
@click.option('--reload', '-r', is_flag=True, help='Enable auto-reload')
@pass_context
def serve(ctx: Context, host: Optional[str], port: Optional[int], reload: bool):
    """
    Start the API server.

    Examples:

        users-api serve

        users-api serve --port 9000 --reload
    """
    host = host or ctx.settings.host
    port = port or ctx.settings.port

    console.print()
    console.print(Panel.fit(
        "[bold cyan]Starting Users API Server[/bold cyan]",
        border_style="cyan"
    ))
    console.print()
    console.print(f"[bold]Host:[/bold] {host}")
    console.print(f"[bold]Port:[/bold] {port}")
    console.print(f"[bold]Users file:[/bold] {ctx.settings.users_file}")
    console.print(f"[bold]Reload:[/bold] {'Enabled' if reload else 'Disabled'}")
    console.print()
    console.print(f"[dim]Documentation:[/dim] http://{host}:{port}/docs")
    console.print()

    try:
        # The app reads its own settings; pass the file override through the environment.
        os.environ["USERS_API_USERS_FILE"] = ctx.settings.users_file

        uvicorn.run(
            "users_api.api.app:app",
            host=host,
            port=port,
            reload=reload,
            log_level=ctx.settings.log_level.lower()
        )
    except KeyboardInterrupt:
        console.print()
        console.print("[yellow]Server stopped by user[/yellow]")
    except Exception as e:
        _fail(ctx, e)


# ============================================================================
# INIT COMMAND
# ============================================================================

@cli.command()
@click.option('--force', is_flag=True, help='Overwrite an existing file with an empty collection')
@pass_context
def init(ctx: Context, force: bool):
    """Create an empty users file."""
    store = ctx.store()
    try:
        if store.path.exists():
            if not force:
                console.print(f"[yellow]{store.path} already exists (use --force to reset)[/yellow]")
                sys.exit(1)
            store.path.unlink()
        store.ensure_exists()
    except (StorageError, OSError) as e:
        _fail(ctx, e)

    console.print(f"[green]✓ Created {store.path}[/green]")


# ============================================================================
# LIST COMMAND
# ============================================================================

@cli.command(name='list')
@pass_context
def list_users(ctx: Context):
    """Show every stored user."""
    try:
        users = ctx.store().read_users()
    except StorageError as e:
        _fail(ctx, e)

    if not users:
        console.print("[yellow]No users stored[/yellow]")
        return

    columns = []
    for user in users:
        if isinstance(user, dict):
            for key in user:
                if key != "id" and key not in columns:
                    columns.append(key)

    table = Table(title=f"Users ({len(users)})", box=box.ROUNDED)
    table.add_column("id", style="cyan", justify="right")
    for column in columns:
        table.add_column(column)

    for user in users:
        if not isinstance(user, dict):
            cells = [""] * len(columns)
            if cells:
                cells[0] = json.dumps(user)
            table.add_row("?", *cells)
            continue
        table.add_row(
            str(user.get("id", "")),
            *[_cell(user.get(column)) for column in columns]
        )

    console.print(table)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


# ============================================================================
# SHOW COMMAND
# ============================================================================

@cli.command()
@click.argument('user_id')
@pass_context
def show(ctx: Context, user_id: str):
    """Show one user by id."""
    store = ctx.store()
    try:
        user = asyncio.run(store.get_by_id(parse_user_id(user_id)))
    except StorageError as e:
        _fail(ctx, e)

    if user is None:
        console.print(f'[red]Requested user "{user_id}" does not exist.[/red]')
        sys.exit(1)

    console.print_json(data=user)


# ============================================================================
# ADD COMMAND
# ============================================================================

@cli.command()
@click.argument('fields', nargs=-1)
@click.option('--json', 'json_text', default=None, help='User attributes as a JSON object')
@pass_context
def add(ctx: Context, fields: Tuple[str, ...], json_text: Optional[str]):
    """
    Create a user from KEY=VALUE pairs or a JSON object.

    Examples:

        users-api add name=Alice

        users-api add --json '{"name": "Bob", "tags": ["admin"]}'
    """
    if json_text:
        try:
            attributes = json.loads(json_text)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"Invalid JSON: {e}", param_hint="--json")
        if not isinstance(attributes, dict):
            raise click.BadParameter("Expected a JSON object", param_hint="--json")
    else:
        attributes = {}
    attributes.update(_parse_assignments(fields))

    try:
        user = ctx.store().create_user(attributes)
    except StorageError as e:
        _fail(ctx, e)

    console.print(f"[green]✓ Created user {user['id']}[/green]")
    console.print_json(data=user)


# ============================================================================
# Main Entry Point
# ============================================================================

def main():
    """Main entry point for the CLI."""
    cli(obj=Context())


if __name__ == '__main__':
    main()
