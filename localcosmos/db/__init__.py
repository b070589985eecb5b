"""
Database access helpers built on the emulated client.

Author: LocalCosmos Team
Date: 2026-10-17
"""

from .connect import ContainerOptions, DBOptions, MAX_CREATE_ATTEMPTS, connect_db
from .container import Container, log_db_action

__all__ = [
    "Container",
    "ContainerOptions",
    "DBOptions",
    "MAX_CREATE_ATTEMPTS",
    "connect_db",
    "log_db_action",
]
