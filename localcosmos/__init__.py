"""
LocalCosmos: in-memory Azure Cosmos DB emulator

Partitioned document storage and a small SQL-subset query evaluator behind
an azure-cosmos style client, for offline development and testing.
"""

__version__ = "0.1.0"

from .emulator import CosmosClient, EmulatorRegistry

__all__ = ["CosmosClient", "EmulatorRegistry", "__version__"]
