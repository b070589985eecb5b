"""
Azure Cosmos DB Emulator.

In-memory emulation of the Azure Cosmos DB SQL API client surface:
partitioned document storage plus a small SQL-subset query evaluator.

Author: LocalCosmos Team
Date: 2026-10-17
"""

from .client import (
    CosmosClient,
    EmulatorRegistry,
    Database,
    Databases,
    Container,
    Containers,
    ItemHandle,
    ItemsHandle,
    QueryIterator,
    DatabaseResponse,
    ContainerResponse,
)
from .models import (
    ContainerRequest,
    DatabaseRequest,
    PartitionKeyDefinition,
    IndexingPolicy,
    SqlParameter,
    SqlQuerySpec,
    FeedOptions,
    ItemResponse,
    FeedResponse,
    ResponseDiagnostics,
    ClientSideRequestStatistics,
)
from .exceptions import (
    CosmosDBError,
    BadRequestError,
    InvalidPartitionKeyError,
    DocumentNotFoundError,
    QueryError,
    UnsupportedQueryError,
    UnsupportedConditionError,
    MissingParameterError,
    ContainerInitializationError,
)
from .paths import MISSING
from .query_builder import Query
from .store import DocumentStore

__all__ = [
    # Client
    "CosmosClient",
    "EmulatorRegistry",
    "Database",
    "Databases",
    "Container",
    "Containers",
    "ItemHandle",
    "ItemsHandle",
    "QueryIterator",
    "DatabaseResponse",
    "ContainerResponse",
    "DocumentStore",
    "Query",
    "MISSING",
    # Models
    "ContainerRequest",
    "DatabaseRequest",
    "PartitionKeyDefinition",
    "IndexingPolicy",
    "SqlParameter",
    "SqlQuerySpec",
    "FeedOptions",
    "ItemResponse",
    "FeedResponse",
    "ResponseDiagnostics",
    "ClientSideRequestStatistics",
    # Exceptions
    "CosmosDBError",
    "BadRequestError",
    "InvalidPartitionKeyError",
    "DocumentNotFoundError",
    "QueryError",
    "UnsupportedQueryError",
    "UnsupportedConditionError",
    "MissingParameterError",
    "ContainerInitializationError",
]
