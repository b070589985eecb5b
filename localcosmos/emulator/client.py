"""
Emulated Cosmos DB client.

Address layer mirroring the azure-cosmos SDK object model
(client -> databases -> containers -> items). Handles only resolve
addresses; the work happens in the DocumentStore and the query modules.

Every coroutine yields to the event loop once before running, so call
sites behave like they do against the network-backed client.

Author: LocalCosmos Team
Date: 2026-10-17
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from .evaluator import execute_query
from .exceptions import BadRequestError
from .models import (
    ContainerRequest,
    DatabaseRequest,
    FeedOptions,
    FeedResponse,
    ItemResponse,
    PartitionKeyDefinition,
)
from .paths import MISSING, partition_key_field
from .query import QueryInput, parse_query
from .response import DEFAULT_REQUEST_CHARGE, ResponseTimer, feed_response, item_response
from .store import DocumentStore

logger = logging.getLogger(__name__)

FeedOptionsInput = Union[FeedOptions, Mapping[str, Any], None]


def normalize_feed_options(options: FeedOptionsInput) -> FeedOptions:
    """Coerce None, a mapping or FeedOptions to FeedOptions.

    Raises:
        BadRequestError: If a mapping does not describe valid options
    """
    if options is None:
        return FeedOptions()
    if isinstance(options, FeedOptions):
        return options
    try:
        return FeedOptions.model_validate(dict(options))
    except (TypeError, ValueError, ValidationError) as e:
        raise BadRequestError(f"Invalid feed options: {e}") from e


class QueryIterator:
    """Deferred feed; nothing runs until fetch_all() is awaited."""

    def __init__(self, container: "Container", fetch, description: str) -> None:
        self._container = container
        self._fetch = fetch
        self._description = description

    async def fetch_all(self) -> FeedResponse:
        """Run the feed and return every result in one envelope."""
        await asyncio.sleep(0)
        timer = ResponseTimer()
        resources = self._fetch()
        logger.debug(
            f"{self._description} on container '{self._container.id}' "
            f"returned {len(resources)} resources"
        )
        return feed_response(resources, timer, self._container.request_charge)


class ItemHandle:
    """Handle addressing one document by id and optional partition key."""

    def __init__(self, container: "Container", item_id: str, partition_key: Any = MISSING) -> None:
        self._container = container
        self.id = item_id
        self.partition_key = partition_key

    async def read(self) -> ItemResponse:
        """Read the document; resource is None when it does not exist."""
        await asyncio.sleep(0)
        timer = ResponseTimer()
        resource = self._container.store.read(self.id, self.partition_key)
        logger.debug(
            f"Read item '{self.id}' from container '{self._container.id}' "
            f"({'hit' if resource is not None else 'miss'})"
        )
        return item_response(resource, timer, self._container.request_charge)

    async def delete(self) -> ItemResponse:
        """Delete the document and return its last value.

        Raises:
            DocumentNotFoundError: If the document does not exist (code 404)
        """
        await asyncio.sleep(0)
        timer = ResponseTimer()
        removed = self._container.store.delete(self.id, self.partition_key)
        logger.debug(f"Deleted item '{self.id}' from container '{self._container.id}'")
        return item_response(removed, timer, self._container.request_charge)


class ItemsHandle:
    """Collection-level operations of a container."""

    def __init__(self, container: "Container") -> None:
        self._container = container

    async def upsert(self, item: Dict[str, Any]) -> ItemResponse:
        """Create or replace a document.

        Raises:
            BadRequestError: If the id is missing or empty
            InvalidPartitionKeyError: If the partition key value is invalid
        """
        await asyncio.sleep(0)
        timer = ResponseTimer()
        stored = self._container.store.upsert(item)
        return item_response(stored, timer, self._container.request_charge)

    def read_all(self, options: FeedOptionsInput = None) -> QueryIterator:
        """Iterate all documents, optionally scoped to a partition key."""
        feed = normalize_feed_options(options)
        store = self._container.store
        return QueryIterator(
            self._container,
            lambda: store.list_by_partition(feed.partition_key_or_missing()),
            "ReadAll"
        )

    def query(self, query: QueryInput, options: FeedOptionsInput = None) -> QueryIterator:
        """Iterate query results, optionally scoped to a partition key.

        Parsing errors surface when the iterator is fetched.
        """
        feed = normalize_feed_options(options)
        store = self._container.store

        def run() -> List[Any]:
            parsed = parse_query(query)
            documents = store.list_by_partition(feed.partition_key_or_missing())
            return execute_query(parsed, documents)

        return QueryIterator(self._container, run, "Query")


class Container:
    """Emulated container.

    Attributes:
        id: Container identifier
        partition_key: Partition key definition as requested
        partition_key_field: Dotted field path derived from the first path
        store: Document storage
        items: Collection operations
    """

    def __init__(
        self,
        request: ContainerRequest,
        request_charge: float = DEFAULT_REQUEST_CHARGE
    ) -> None:
        self.id = request.id
        self.partition_key: PartitionKeyDefinition = request.partition_key
        self.indexing_policy = request.indexing_policy
        self.partition_key_field = partition_key_field(request.partition_key.paths[0])
        self.request_charge = request_charge
        self.store = DocumentStore(self.partition_key_field)
        self.items = ItemsHandle(self)

    def item(self, item_id: str, partition_key: Any = MISSING) -> ItemHandle:
        """Address a single document."""
        return ItemHandle(self, item_id, partition_key)


@dataclass
class ContainerResponse:
    """Result of create_if_not_exists on containers."""
    container: Container


class Containers:
    """Containers of one database."""

    def __init__(self, database: "Database") -> None:
        self._database = database
        self._containers: Dict[str, Container] = {}
        self._lock = threading.Lock()

    async def create_if_not_exists(
        self,
        details: Union[ContainerRequest, Mapping[str, Any]]
    ) -> ContainerResponse:
        """Return the existing container or create it.

        A repeat call with a different partition key returns the container
        created first; the definition is not compared.

        Raises:
            BadRequestError: If the request is malformed
        """
        await asyncio.sleep(0)
        request = _validate(ContainerRequest, details)
        with self._lock:
            existing = self._containers.get(request.id)
            if existing is not None:
                return ContainerResponse(container=existing)

            container = Container(request, request_charge=self._database.request_charge)
            self._containers[request.id] = container
        logger.info(
            f"Created container '{request.id}' in database '{self._database.id}' "
            f"(partition key: {container.partition_key_field})"
        )
        return ContainerResponse(container=container)

    def get(self, container_id: str) -> Optional[Container]:
        """Look up a container without creating it."""
        return self._containers.get(container_id)

    def list_ids(self) -> List[str]:
        """Identifiers of all containers."""
        return list(self._containers)


class Database:
    """Emulated database.

    Attributes:
        id: Database identifier
        containers: Container collection
    """

    def __init__(self, database_id: str, request_charge: float = DEFAULT_REQUEST_CHARGE) -> None:
        self.id = database_id
        self.request_charge = request_charge
        self.containers = Containers(self)


@dataclass
class DatabaseResponse:
    """Result of create_if_not_exists on databases."""
    database: Database


class EmulatorRegistry:
    """Holds every database an emulated client can address.

    Pass the same registry to several clients to let them share state.
    """

    def __init__(self, request_charge: float = DEFAULT_REQUEST_CHARGE) -> None:
        self.request_charge = request_charge
        self._databases: Dict[str, Database] = {}
        self._lock = threading.Lock()

    def get_or_create(self, database_id: str) -> Database:
        with self._lock:
            database = self._databases.get(database_id)
            if database is None:
                database = Database(database_id, request_charge=self.request_charge)
                self._databases[database_id] = database
                logger.info(f"Created database '{database_id}'")
            return database

    def get(self, database_id: str) -> Optional[Database]:
        return self._databases.get(database_id)

    def list_ids(self) -> List[str]:
        return list(self._databases)


class Databases:
    """Database collection of a client."""

    def __init__(self, registry: EmulatorRegistry) -> None:
        self._registry = registry

    async def create_if_not_exists(
        self,
        details: Union[DatabaseRequest, Mapping[str, Any]]
    ) -> DatabaseResponse:
        """Return the existing database or create it.

        Raises:
            BadRequestError: If the request is malformed
        """
        await asyncio.sleep(0)
        request = _validate(DatabaseRequest, details)
        return DatabaseResponse(database=self._registry.get_or_create(request.id))


class CosmosClient:
    """In-memory stand-in for azure.cosmos.aio.CosmosClient.

    Attributes:
        endpoint: Endpoint the caller configured (not contacted)
        registry: Database registry backing this client
        databases: Database collection
    """

    def __init__(
        self,
        endpoint: str = "https://localhost:8081",
        key: str = "",
        registry: Optional[EmulatorRegistry] = None,
        **options: Any
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: Account endpoint
            key: Account key (ignored)
            registry: Registry to share; a new one is created when omitted
            **options: Extra SDK options, accepted and ignored
        """
        self.endpoint = endpoint
        self.registry = registry if registry is not None else EmulatorRegistry()
        self.databases = Databases(self.registry)
        if options:
            logger.debug(f"Ignoring client options: {sorted(options)}")

    async def __aenter__(self) -> "CosmosClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None


def _validate(model, details):
    if isinstance(details, model):
        return details
    try:
        return model.model_validate(dict(details))
    except (TypeError, ValueError, ValidationError) as e:
        raise BadRequestError(f"Invalid {model.__name__}: {e}") from e
