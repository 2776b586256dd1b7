# Configuration package
"""
Configuration handling utilities.

Modules:
- system_config: SystemConfig dataclass and JSON loading
"""

from .system_config import SystemConfig, load_system_config, DEFAULT_SYSTEM_CONFIG

__all__ = [
    'SystemConfig',
    'load_system_config',
    'DEFAULT_SYSTEM_CONFIG',
]
