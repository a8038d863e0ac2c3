"""
Configuration for the Feedbin Importer.
"""

from .configuration import Configuration
from .pydantic_config import ConfigurationManager, ImportConfig, ImporterConfig, NetworkConfig

__all__ = [
    "Configuration",
    "ConfigurationManager",
    "ImportConfig",
    "ImporterConfig",
    "NetworkConfig",
]
