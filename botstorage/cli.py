"""
botstorage Command-Line Interface

Inspect and edit bot storage collections from the shell.
"""

import sys
import json
import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import click

from botstorage import __version__
from botstorage.core.config_manager import ConfigManager
from botstorage.core.logging_config import setup_logging
from botstorage.facade import Storage
from botstorage.storage.exceptions import ConfigurationError, StorageError



@click.group()
@click.version_option(version=__version__, prog_name="botstorage")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (YAML or JSON)",
)
@click.option(
    "--connection-string",
    envvar="BOTSTORAGE_CONNECTION_STRING",
    help="Azure Storage connection string",
)
@click.option(
    "--table-prefix",
    envvar="BOTSTORAGE_TABLE_PREFIX",
    help="Prefix for table names",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (overrides the configured level)",
)
@click.pass_context
def cli(ctx, config: Optional[Path], connection_string: Optional[str], table_prefix: Optional[str], log_level: Optional[str]):
    """
    botstorage - team, user and channel storage for bots

    Examples:
        botstorage -c storage.yaml list teams
        botstorage get users U123
        botstorage save channels '{"id": "C1", "topic": "general"}'
    """
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = str(config) if config else None
    ctx.obj["overrides"] = {
        "storage_connection_string": connection_string,
        "table_prefix": table_prefix,
    }
    if log_level:
        ctx.obj["overrides"]["logging"] = {"level": log_level.upper()}


def _fail(error: StorageError) -> None:
    click.echo(f"Error [{error.error_code}]: {error.message}", err=True)
    # Usage problems exit 2, failed operations exit 1
    sys.exit(2 if isinstance(error, ConfigurationError) else 1)


def _run(ctx: click.Context, collection_name: str, operation: Callable[[Any], Awaitable[Any]]) -> Any:
    """Build storage, run one operation against a collection, and close."""
    try:
        config = ConfigManager().load(
            config_file=ctx.obj["config_file"],
            overrides=ctx.obj["overrides"],
        )
        setup_logging(
            config.logging.level,
            format_type=config.logging.format,
            log_file=config.logging.file,
        )
        storage = Storage(config)
    except StorageError as e:
        _fail(e)

    async def run() -> Any:
        async with storage:
            return await operation(storage.collection(collection_name))

    try:
        return asyncio.run(run())
    except KeyError as e:
        click.echo(f"Error: {e.args[0]}", err=True)
        sys.exit(2)
    except StorageError as e:
        _fail(e)


@cli.command()
@click.argument("collection")
@click.argument("record_id")
@click.pass_context
def get(ctx, collection: str, record_id: str):
    """Print the record RECORD_ID from COLLECTION."""
    record = _run(ctx, collection, lambda c: c.get(record_id))
    click.echo(json.dumps(record, indent=2))


@cli.command()
@click.argument("collection")
@click.argument("record_json")
@click.pass_context
def save(ctx, collection: str, record_json: str):
    """Save RECORD_JSON (a JSON object with an "id") into COLLECTION."""
    try:
        record = json.loads(record_json)
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="RECORD_JSON")

    _run(ctx, collection, lambda c: c.save(record))
    click.echo(f"Saved {record.get('id') if isinstance(record, dict) else record!r} to {collection}")


@cli.command()
@click.argument("collection")
@click.argument("record_id")
@click.pass_context
def delete(ctx, collection: str, record_id: str):
    """Delete RECORD_ID from COLLECTION."""
    _run(ctx, collection, lambda c: c.delete(record_id))
    click.echo(f"Deleted {record_id} from {collection}")


@cli.command(name="list")
@click.argument("collection")
@click.pass_context
def list_records(ctx, collection: str):
    """Print every record in COLLECTION as a JSON array."""
    records = _run(ctx, collection, lambda c: c.all())
    click.echo(json.dumps(records, indent=2))


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
