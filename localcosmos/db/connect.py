"""
Database bootstrap.

Creates the database and every configured container, retrying container
creation, and returns typed container wrappers keyed by name.

Author: LocalCosmos Team
Date: 2026-10-17
"""

import asyncio
import logging
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from localcosmos.emulator.client import CosmosClient
from localcosmos.emulator.exceptions import ContainerInitializationError

from .container import Container

logger = logging.getLogger(__name__)

MAX_CREATE_ATTEMPTS = 3

IndexExclusions = Union[Literal["none", "all"], List[str]]


class ContainerOptions(BaseModel):
    """Container to create on connect.

    Attributes:
        name: Container id
        partition_key: Partition key field (without leading slash)
        index_exclusions: "none", "all", or a list of excluded paths
    """

    name: str
    partition_key: str = Field(alias="partitionKey")
    index_exclusions: IndexExclusions = Field(default="none", alias="indexExclusions")

    model_config = ConfigDict(populate_by_name=True)


class DBOptions(BaseModel):
    """Connection options."""

    endpoint: str = "https://localhost:8081"
    key: str = ""
    name: str
    containers: List[ContainerOptions] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


def get_indexing_policy(exclusions: IndexExclusions) -> Dict[str, Any]:
    """Build an indexing policy from exclusions.

    Args:
        exclusions: "all" or a list of paths to exclude

    Returns:
        Indexing policy mapping
    """
    all_paths = [{"path": "/*"}]

    if exclusions == "all":
        return {"excludedPaths": all_paths}

    return {
        "includedPaths": all_paths,
        "excludedPaths": [{"path": path} for path in ['/"_etag"/?', *exclusions]],
    }


async def create_container(database: Any, options: ContainerOptions) -> Optional[Container]:
    """Create one container, retrying up to MAX_CREATE_ATTEMPTS times.

    Returns:
        Container wrapper, or None when every attempt failed
    """
    details: Dict[str, Any] = {
        "id": options.name,
        "partitionKey": {"paths": [f"/{options.partition_key}"]},
    }
    if options.index_exclusions != "none":
        details["indexingPolicy"] = get_indexing_policy(options.index_exclusions)

    for attempt in range(1, MAX_CREATE_ATTEMPTS + 1):
        try:
            response = await database.containers.create_if_not_exists(details)
            return Container(options.name, response.container)
        except Exception as e:
            if attempt < MAX_CREATE_ATTEMPTS:
                logger.error(f"Failed to create container: {options.name} (attempt {attempt})")
            else:
                logger.error(f"CreateContainer: {e}")
    return None


async def connect_db(
    options: Union[DBOptions, Dict[str, Any]],
    client: Optional[Any] = None
) -> Dict[str, Container]:
    """Connect to the database and initialize containers.

    Args:
        options: Connection options
        client: Client to use; an emulated CosmosClient when omitted

    Returns:
        Container wrappers keyed by container name

    Raises:
        ContainerInitializationError: If any container could not be created
    """
    if not isinstance(options, DBOptions):
        options = DBOptions.model_validate(options)

    if client is None:
        client = CosmosClient(endpoint=options.endpoint, key=options.key)

    response = await client.databases.create_if_not_exists({"id": options.name})
    database = response.database

    results = await asyncio.gather(
        *(create_container(database, container) for container in options.containers)
    )

    container_map: Dict[str, Container] = {}
    failures: List[str] = []
    for container_options, result in zip(options.containers, results):
        if result is None:
            failures.append(container_options.name)
        else:
            container_map[container_options.name] = result

    if failures:
        raise ContainerInitializationError(failures)

    logger.info(f"Connected to database '{options.name}' with {len(container_map)} containers")
    return container_map
