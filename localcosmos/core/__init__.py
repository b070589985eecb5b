"""Core module initialization."""

from .config_manager import ConfigManager, LocalCosmosConfig
from .logging_config import (
    correlation_scope,
    current_correlation_id,
    log_with_context,
    setup_logging,
)

__all__ = [
    "ConfigManager",
    "LocalCosmosConfig",
    "setup_logging",
    "correlation_scope",
    "current_correlation_id",
    "log_with_context",
]
