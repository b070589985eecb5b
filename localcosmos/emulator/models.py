"""
Cosmos DB Emulator Models.

Pydantic models for the request and response shapes of the emulated
Azure Cosmos DB SDK surface.

Author: LocalCosmos Team
Date: 2026-10-17
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .paths import MISSING, is_json_value


class PartitionKeyDefinition(BaseModel):
    """Partition key definition for a container.

    Attributes:
        paths: List of partition key paths (e.g., ["/tenantId"]); only the
            first path is used
        kind: Partition key kind
    """

    paths: List[str]
    kind: str = "Hash"

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("paths")
    @classmethod
    def validate_paths(cls, v: List[str]) -> List[str]:
        """Validate partition key paths.

        Args:
            v: Partition key paths

        Returns:
            Validated paths

        Raises:
            ValueError: If no path is given
        """
        if not v:
            raise ValueError("ContainerRequest.partitionKey.paths[0] is required")
        return v


class IndexPath(BaseModel):
    """Single indexing policy path."""

    path: str


class IndexingPolicy(BaseModel):
    """Simplified indexing policy.

    Accepted and kept on the container; the emulator does not index.
    """

    included_paths: Optional[List[IndexPath]] = Field(default=None, alias="includedPaths")
    excluded_paths: Optional[List[IndexPath]] = Field(default=None, alias="excludedPaths")

    model_config = ConfigDict(populate_by_name=True)


class DatabaseRequest(BaseModel):
    """Request to create a database.

    Attributes:
        id: Database identifier
    """

    id: str

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v:
            raise ValueError("Database ID cannot be empty")
        return v


class ContainerRequest(BaseModel):
    """Request to create a container.

    Attributes:
        id: Container identifier
        partition_key: Partition key definition
        indexing_policy: Indexing policy (optional)
    """

    id: str
    partition_key: PartitionKeyDefinition = Field(alias="partitionKey")
    indexing_policy: Optional[IndexingPolicy] = Field(default=None, alias="indexingPolicy")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Validate container ID.

        Args:
            v: Container ID

        Returns:
            Validated ID

        Raises:
            ValueError: If ID is empty
        """
        if not v:
            raise ValueError("Container ID cannot be empty")
        return v


class SqlParameter(BaseModel):
    """Named query parameter.

    Attributes:
        name: Parameter name including the leading "@"
        value: JSON value bound to the name
    """

    name: str
    value: Any = None

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: Any) -> Any:
        if not is_json_value(v):
            raise ValueError("Parameter value must be JSON-compatible")
        return v


class SqlQuerySpec(BaseModel):
    """Parameterized SQL query.

    Attributes:
        query: SQL query string
        parameters: Query parameters
    """

    query: str
    parameters: List[SqlParameter] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class FeedOptions(BaseModel):
    """Options for feed (list/query) operations.

    Attributes:
        partition_key: Restrict the feed to one partition key value. Only
            applied when explicitly set; an explicit None targets the
            null partition.
    """

    partition_key: Any = Field(default=None, alias="partitionKey")

    model_config = ConfigDict(populate_by_name=True)

    def partition_key_or_missing(self) -> Any:
        """Partition key value, or MISSING when the option was not given."""
        if "partition_key" not in self.model_fields_set:
            return MISSING
        return self.partition_key


class ClientSideRequestStatistics(BaseModel):
    """Synthetic client-side request statistics."""

    request_duration_in_ms: float = Field(default=0, alias="requestDurationInMs")
    total_response_payload_length_in_bytes: int = Field(
        default=0, alias="totalResponsePayloadLengthInBytes"
    )

    model_config = ConfigDict(populate_by_name=True)


class ResponseDiagnostics(BaseModel):
    """Diagnostics block attached to every response."""

    client_side_request_statistics: ClientSideRequestStatistics = Field(
        default_factory=ClientSideRequestStatistics, alias="clientSideRequestStatistics"
    )

    model_config = ConfigDict(populate_by_name=True)


class ItemResponse(BaseModel):
    """Single-resource response envelope.

    Attributes:
        resource: Document, or None when absent
        request_charge: Emulated request units
        diagnostics: Timing and payload diagnostics
    """

    resource: Optional[Any] = None
    request_charge: float = Field(default=1.0, alias="requestCharge")
    diagnostics: ResponseDiagnostics = Field(default_factory=ResponseDiagnostics)

    model_config = ConfigDict(populate_by_name=True)


class FeedResponse(BaseModel):
    """List response envelope.

    Attributes:
        resources: Documents, projections or scalar results
        request_charge: Emulated request units
        diagnostics: Timing and payload diagnostics
    """

    resources: List[Any] = Field(default_factory=list)
    request_charge: float = Field(default=1.0, alias="requestCharge")
    diagnostics: ResponseDiagnostics = Field(default_factory=ResponseDiagnostics)

    model_config = ConfigDict(populate_by_name=True)
