"""
Configuration domain package.

This package contains the domain layer for configuration management.
"""

from .models import (
    ClientSettings,
    ExecutionSettings,
    TransportOptions,
)

__all__ = [
    "ClientSettings",
    "ExecutionSettings",
    "TransportOptions",
]
