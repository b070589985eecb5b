"""
Typed container wrapper.

Convenience operations over an emulated (or SDK-compatible) container.
Every action runs under a correlation id and logs one structured record
built from the response envelope: request charge, duration and payload
size.

Author: LocalCosmos Team
Date: 2026-10-17
"""

import logging
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Union

from localcosmos.core.logging_config import correlation_scope, log_with_context
from localcosmos.emulator.client import FeedOptionsInput, normalize_feed_options
from localcosmos.emulator.models import FeedResponse, ItemResponse, SqlQuerySpec
from localcosmos.emulator.paths import MISSING
from localcosmos.emulator.query import QueryInput

logger = logging.getLogger(__name__)


def db_action(tag: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Run a wrapper method under a correlation id and log its failures.

    Args:
        tag: Prefix of the error record, e.g. "GetItem"

    Usage:
        @db_action("GetItem")
        async def get_item(self, ...):
            ...
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            with correlation_scope() as corr_id:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    logger.error(f"{tag}: {e}", extra={"correlation_id": corr_id})
                    raise

        return wrapper
    return decorator


class Container:
    """Generic container wrapper for database operations.

    Attributes:
        name: Logical container name used in log records
        container: Underlying container exposing item()/items
    """

    def __init__(self, name: str, container: Any) -> None:
        self.name = name
        self.container = container

    @db_action("GetItem")
    async def get_item(self, item_id: str, partition_key: Any) -> Optional[Dict[str, Any]]:
        """Retrieve a single item.

        Returns:
            The item, or None if not found
        """
        response = await self.container.item(item_id, partition_key).read()
        log_db_action("READ", self.name, response, partition_key)
        return response.resource

    @db_action("GetItemsByPartitionKey")
    async def get_items_by_partition_key(self, partition_key: Any) -> List[Dict[str, Any]]:
        """Retrieve all items of a partition."""
        response = await self.container.items.read_all(
            {"partitionKey": partition_key}
        ).fetch_all()
        log_db_action("READ_ALL", self.name, response, partition_key)
        return response.resources

    async def get_ids_by_partition_key(self, partition_key: Any) -> List[str]:
        """Retrieve the ids of all items of a partition."""
        result = await self.query("SELECT c.id FROM c", {"partitionKey": partition_key})
        return [entry["id"] for entry in result]

    async def get_count(self) -> Optional[int]:
        """Total number of items in the container."""
        result = await self.query("SELECT VALUE COUNT(1) FROM c")
        return result[0] if result else None

    @db_action("Query")
    async def query(self, query: QueryInput, options: FeedOptionsInput = None) -> List[Any]:
        """Execute a query against the container.

        Args:
            query: SQL string or query spec
            options: FeedOptions or a mapping, e.g. {"partitionKey": "tenant"}

        Returns:
            Query results
        """
        feed = normalize_feed_options(options)
        response = await self.container.items.query(query, feed).fetch_all()
        log_db_action("QUERY", self.name, response, feed.partition_key_or_missing(), query)
        return response.resources

    @db_action("UpsertItem")
    async def upsert_item(self, item: Dict[str, Any]) -> None:
        """Create or update an item."""
        response = await self.container.items.upsert(item)
        log_db_action("UPSERT", self.name, response)

    @db_action("DeleteItem")
    async def delete_item(self, item_id: str, partition_key: Any) -> None:
        """Delete an item.

        Raises:
            DocumentNotFoundError: If the item does not exist
        """
        response = await self.container.item(item_id, partition_key).delete()
        log_db_action("DELETE", self.name, response, partition_key)


def _query_text(query: QueryInput) -> Optional[str]:
    if isinstance(query, str):
        return query
    if isinstance(query, SqlQuerySpec):
        return query.query
    return query.get("query")


def log_db_action(
    action: str,
    container: str,
    response: Union[ItemResponse, FeedResponse],
    partition_key: Any = MISSING,
    query: Optional[QueryInput] = None
) -> None:
    """Log one database action.

    Item payloads and query parameters are never logged, only sizes,
    the partition key and the query text. A failure to build the record
    is logged and never fails the action it describes.
    """
    try:
        stats = response.diagnostics.client_side_request_statistics
        context: Dict[str, Any] = {
            "action": action,
            "container": container,
            "ru": response.request_charge,
            "ms": stats.request_duration_in_ms,
            "bytes": stats.total_response_payload_length_in_bytes,
        }

        if partition_key is not MISSING and partition_key is not None:
            context["pkey"] = partition_key

        if query is not None:
            context["query"] = _query_text(query)

        if isinstance(response, FeedResponse):
            context["count"] = len(response.resources)

        log_with_context(logger, logging.INFO, f"{action} {container}", **context)
    except Exception as e:
        logger.error(f"LogDBAction: {e}")
