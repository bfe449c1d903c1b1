"""
Core module initialization.
Exports configuration and logging utilities.
"""

from app.core.config import (
    get_settings,
    get_logger,
    setup_logging,
    Settings,
    EnvironmentMode,
    OrderStoreBackend,
)

__all__ = [
    "get_settings",
    "get_logger",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "OrderStoreBackend",
]
