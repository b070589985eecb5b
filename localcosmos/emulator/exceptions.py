"""
Cosmos DB Emulator Exceptions.

Custom exception classes for emulator operations, mirroring the error
codes the Azure Cosmos DB service reports to its SDK clients.

Author: LocalCosmos Team
Date: 2026-10-17
"""

from typing import Optional


class CosmosDBError(Exception):
    """Base exception for emulator errors.

    Attributes:
        message: Error message
        error_code: Azure Cosmos DB error code
        code: Numeric status code, only set where the service reports one
    """

    def __init__(
        self,
        message: str,
        error_code: str = "InternalServerError",
        code: Optional[int] = None
    ):
        """Initialize emulator error.

        Args:
            message: Error message
            error_code: Azure error code
            code: Numeric status code
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.code = code


class BadRequestError(CosmosDBError):
    """Bad request error."""

    def __init__(self, message: str):
        """Initialize bad request error.

        Args:
            message: Error message
        """
        super().__init__(message, "BadRequest")


class InvalidPartitionKeyError(BadRequestError):
    """Invalid partition key error."""

    def __init__(self, message: str, partition_key_path: str = ""):
        """Initialize invalid partition key error.

        Args:
            message: Error message
            partition_key_path: Partition key path that failed to resolve
        """
        super().__init__(message)
        self.partition_key_path = partition_key_path


class DocumentNotFoundError(CosmosDBError):
    """Document not found error.

    Raised only by delete; reading an absent document is an empty result.
    """

    def __init__(self, message: str, document_id: str = "", partition_key: str = ""):
        """Initialize document not found error.

        Args:
            message: Error message
            document_id: Document identifier
            partition_key: Serialized partition key value
        """
        super().__init__(message, "NotFound", code=404)
        self.document_id = document_id
        self.partition_key = partition_key


class QueryError(BadRequestError):
    """Base class for query grammar failures."""


class UnsupportedQueryError(QueryError):
    """Query statement shape is outside the supported grammar."""

    def __init__(self, query: str):
        super().__init__(f"Unsupported query: {query}")
        self.query = query


class UnsupportedConditionError(QueryError):
    """WHERE fragment matches no supported condition shape."""

    def __init__(self, condition: str):
        super().__init__(f"Unsupported WHERE condition: {condition}")
        self.condition = condition


class MissingParameterError(QueryError):
    """Query references a parameter that was not supplied."""

    def __init__(self, name: str):
        super().__init__(f"Missing query parameter: {name}")
        self.parameter_name = name


class ContainerInitializationError(CosmosDBError):
    """One or more containers could not be created during connect.

    Attributes:
        container_names: Names of the containers that failed
    """

    def __init__(self, container_names: list):
        """Initialize container initialization error.

        Args:
            container_names: Names of the containers that failed
        """
        super().__init__(
            f"Failed to initialize containers: {', '.join(container_names)}",
            "ServiceUnavailable"
        )
        self.container_names = list(container_names)
