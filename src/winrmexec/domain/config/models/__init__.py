"""
Configuration domain models package.

This package contains all domain models for the configuration system.
"""

from .client_settings import ClientSettings
from .execution_settings import ExecutionSettings
from .transport_options import TransportOptions

__all__ = [
    "ClientSettings",
    "ExecutionSettings",
    "TransportOptions",
]
