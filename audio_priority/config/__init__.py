"""
Конфигурация AudioPriority
"""

from .unified_config_loader import (
    UnifiedConfigLoader, AppConfig, PriorityConfig, StorageConfig, BackendConfig, LoggingConfig
)

__all__ = [
    "UnifiedConfigLoader",
    "AppConfig",
    "PriorityConfig",
    "StorageConfig",
    "BackendConfig",
    "LoggingConfig",
]
