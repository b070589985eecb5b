"""
LocalCosmos Command-Line Interface

Load seed documents into an emulated container and run queries against
them, or print the active configuration.

Author: LocalCosmos Contributors
Date: 2026-10-17
"""

import sys
import json
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
import yaml

from localcosmos import __version__
from localcosmos.core.config_manager import ConfigManager
from localcosmos.core.logging_config import correlation_scope, setup_logging
from localcosmos.emulator import (
    CosmosClient,
    CosmosDBError,
    MISSING,
    EmulatorRegistry,
    FeedResponse,
    SqlQuerySpec,
)


def _load_documents(seed_file: Path) -> List[Dict[str, Any]]:
    """Read a JSON or YAML list of documents."""
    try:
        with open(seed_file, "r") as f:
            if seed_file.suffix in (".yaml", ".yml"):
                documents = yaml.safe_load(f) or []
            else:
                documents = json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise click.BadParameter(f"Cannot parse seed file: {e}", param_hint="SEED_FILE") from e
    if not isinstance(documents, list):
        raise click.BadParameter("Seed file must contain a list of documents", param_hint="SEED_FILE")
    for position, document in enumerate(documents):
        if not isinstance(document, dict):
            raise click.BadParameter(
                f"Seed entry {position} is not an object", param_hint="SEED_FILE"
            )
    return documents


def _parse_param(raw: str) -> Tuple[str, Any]:
    """Parse NAME=VALUE; VALUE is JSON when it parses, a string otherwise."""
    if "=" not in raw:
        raise click.BadParameter(f"Expected NAME=VALUE, got '{raw}'", param_hint="--param")
    name, value = raw.split("=", 1)
    name = name.strip()
    if not name.startswith("@"):
        name = f"@{name}"
    try:
        return name, json.loads(value)
    except json.JSONDecodeError:
        return name, value


async def run_query(
    documents: List[Dict[str, Any]],
    query: SqlQuerySpec,
    partition_key_path: str,
    partition_key: Any = MISSING,
    endpoint: str = "https://localhost:8081",
    key: str = "",
    request_charge: float = 1.0,
) -> FeedResponse:
    """Seed a fresh emulated container and run one query against it.

    The query is scoped to partition_key when one is given; None targets
    the null partition.
    """
    registry = EmulatorRegistry(request_charge=request_charge)
    client = CosmosClient(endpoint=endpoint, key=key, registry=registry)
    db_response = await client.databases.create_if_not_exists({"id": "cli"})
    container_response = await db_response.database.containers.create_if_not_exists(
        {"id": "seed", "partitionKey": {"paths": [partition_key_path]}}
    )
    container = container_response.container
    for document in documents:
        await container.items.upsert(document)

    options = {"partitionKey": partition_key} if partition_key is not MISSING else None
    return await container.items.query(query, options).fetch_all()


@click.group()
@click.version_option(version=__version__, prog_name="localcosmos")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (overrides configuration)",
)
@click.pass_context
def cli(ctx, config_file: Optional[Path], log_level: Optional[str]):
    """
    LocalCosmos - in-memory Azure Cosmos DB emulator

    Run SQL queries against seed documents without a database.
    """
    ctx.ensure_object(dict)
    overrides = {"logging": {"level": log_level.upper()}} if log_level else None
    manager = ConfigManager()
    config = manager.load(
        config_file=str(config_file) if config_file else None,
        cli_overrides=overrides,
    )
    # Logs go to stderr so stdout stays machine-readable
    setup_logging(
        level=config.logging.level,
        format_type=config.logging.format,
        log_file=config.logging.file,
        rotation_size=config.logging.rotation_size,
        rotation_count=config.logging.rotation_count,
        module_levels=config.logging.module_levels,
        stream=sys.stderr,
    )
    ctx.obj["config_manager"] = manager
    ctx.obj["config"] = config


@cli.command()
@click.argument("seed_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("query")
@click.option(
    "--partition-key-path",
    default="/id",
    show_default=True,
    help="Partition key path of the seeded container",
)
@click.option(
    "--partition-key",
    default=None,
    help="Scope the query to one partition key value (JSON or plain string)",
)
@click.option(
    "--param",
    "-p",
    "params",
    multiple=True,
    help="Query parameter as NAME=VALUE, may be repeated",
)
@click.pass_context
def query(ctx, seed_file: Path, query: str, partition_key_path: str,
          partition_key: Optional[str], params: Tuple[str, ...]):
    """
    Run QUERY against the documents in SEED_FILE.

    Examples:
        localcosmos query docs.json "SELECT VALUE COUNT(1) FROM c"
        localcosmos query docs.yaml "SELECT TOP 1 * FROM c WHERE c.score >= @min" \\
            --partition-key-path /tenantId --partition-key x -p min=5
    """
    logger = logging.getLogger("localcosmos.cli")
    config = ctx.obj["config"]

    documents = _load_documents(seed_file)
    parameters = [
        {"name": name, "value": value}
        for name, value in (_parse_param(raw) for raw in params)
    ]
    pk_value = _parse_param(f"pk={partition_key}")[1] if partition_key is not None else MISSING

    # One correlation id per run; asyncio.run copies it into the query task
    with correlation_scope() as run_id:
        logger.info(f"Query run {run_id}: {len(documents)} seed documents")
        try:
            response = asyncio.run(run_query(
                documents,
                SqlQuerySpec(query=query, parameters=parameters),
                partition_key_path,
                pk_value,
                endpoint=config.emulator.endpoint,
                key=config.emulator.key,
                request_charge=config.emulator.request_charge,
            ))
        except CosmosDBError as e:
            logger.error(f"Query failed: {e}")
            click.echo(f"[ERROR] {e.message}", err=True)
            sys.exit(1)
        logger.info(f"Query run {run_id} returned {len(response.resources)} resources")

    click.echo(json.dumps(response.model_dump(by_alias=True), indent=2))


@cli.command()
@click.pass_context
def config(ctx):
    """
    Show the active configuration (account key redacted).
    """
    manager: ConfigManager = ctx.obj["config_manager"]
    click.echo(json.dumps(manager.redacted(), indent=2))


def main():
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
