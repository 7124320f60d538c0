"""
Client settings domain model.

Top-level configuration file shape: where to connect and how to execute.
"""

from pydantic import BaseModel, ConfigDict, Field

from .execution_settings import ExecutionSettings
from .transport_options import TransportOptions


class ClientSettings(BaseModel):
    """Complete WinRM client configuration."""

    model_config = ConfigDict(extra="ignore")

    transport: TransportOptions = Field(..., description="Endpoint and credentials")
    execution: ExecutionSettings = Field(
        default_factory=ExecutionSettings,
        description="Command wrapping and polling behaviour"
    )
