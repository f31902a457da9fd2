"""Receipt CLI — run the server, maintain the database, post entries.

Usage:
    receipt serve                      # Run the API + WebSocket server
    receipt migrate                    # Upgrade a legacy integer-id database
    receipt export > receipts.json     # Dump every entry as JSON
    receipt add "milk"                 # Post an entry to a running server
    receipt entries                    # List entries from a running server
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from datetime import datetime
from typing import Optional

import click
import httpx

from receipt import __version__
from receipt.config import settings
from receipt.db.store import EntryStore
from receipt.errors import MigrationError
from receipt.log import configure_logging

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:3123"


def _api_url() -> str:
    return os.environ.get("RECEIPT_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Receipt server."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _fmt_ms(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


async def _with_store(database_url: str, fn, migrate_legacy: bool = False):
    store = EntryStore(database_url)
    try:
        migrated = await store.open(migrate_legacy=migrate_legacy)
        return migrated, await fn(store)
    finally:
        await store.close()


def _error_message(r: httpx.Response) -> str:
    """The server's {"error": ...} text, or the raw body (e.g. a proxy 502 page)."""
    try:
        body = r.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return f"HTTP {r.status_code}: {r.text.strip()[:200]}"


def _fail(message: str):
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="receipt")
@click.option("--verbose", "-v", is_flag=True, help="Show info-level logs")
def main(verbose: bool):
    """Receipt — a running log of short notes with a live feed."""
    # Keep stdout clean for `export`; the server reconfigures in create_app()
    configure_logging("INFO" if verbose else "WARNING", json=settings.log_json)


@main.command()
@click.option("--host", default=None, help="Bind address (default: RECEIPT_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: RECEIPT_PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the HTTP + WebSocket server."""
    import uvicorn

    uvicorn.run(
        "receipt.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@main.command()
@click.option("--database-url", default=None, help="SQLAlchemy URL (default: RECEIPT_DATABASE_URL)")
def migrate(database_url: Optional[str]):
    """Upgrade a database that still uses integer entry ids."""
    url = database_url or settings.database_url

    async def _noop(store: EntryStore):
        return await store.count()

    try:
        migrated, count = asyncio.run(_with_store(url, _noop, migrate_legacy=True))
    except MigrationError as e:
        _fail(str(e))
    if migrated:
        click.secho(f"Migrated {count} entries to string ids.", fg="green")
    else:
        click.echo("No schema update needed.")


@main.command()
@click.option("--database-url", default=None, help="SQLAlchemy URL (default: RECEIPT_DATABASE_URL)")
def export(database_url: Optional[str]):
    """Print every entry as JSON (uuid, text, timestamp), newest first."""
    url = database_url or settings.database_url

    async def _dump(store: EntryStore):
        return await store.list_all()

    _, entries = asyncio.run(_with_store(url, _dump))
    click.echo(_pretty_json([
        {"uuid": e.id, "text": e.text, "timestamp": e.created_at}
        for e in entries
    ]))


@main.command()
@click.argument("text")
def add(text: str):
    """Post TEXT as a new entry to a running server."""
    asyncio.run(_add_impl(text))


async def _add_impl(text: str):
    async with _client() as c:
        try:
            r = await c.post("/api/addEntry", json={"text": text})
        except httpx.ConnectError:
            _fail(f"server not reachable at {_api_url()}")
        if r.status_code != 201:
            _fail(_error_message(r))
        entry = r.json()
        click.secho(f"Added {entry['id']}", fg="green")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def entries(as_json: bool):
    """List entries from a running server, newest first."""
    asyncio.run(_entries_impl(as_json))


async def _entries_impl(as_json: bool):
    async with _client() as c:
        try:
            r = await c.get("/api/entries")
        except httpx.ConnectError:
            _fail(f"server not reachable at {_api_url()}")
        if r.status_code != 200:
            _fail(_error_message(r))
        rows = r.json()

    if as_json:
        click.echo(_pretty_json(rows))
        return
    if not rows:
        click.echo("No entries yet.")
        return
    for row in rows:
        click.echo(f"{_fmt_ms(row['created_at'])}  {row['text']}")


if __name__ == "__main__":
    main()
