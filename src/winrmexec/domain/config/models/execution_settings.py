"""
Execution settings domain model.

Controls how commands are wrapped and how output polling behaves.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class ExecutionSettings(BaseModel):
    """
    Per-client defaults for command execution.

    Polling is a tight loop unless ``poll_interval_seconds`` is raised, and is
    unbounded unless ``max_polls`` is set.
    """

    fail_on_errors: bool = Field(
        default=True,
        description="Fail the execution when the remote exit code is not 0"
    )

    powershell: bool = Field(
        default=True,
        description="Wrap commands as powershell.exe \"...\" instead of running them in cmd"
    )

    poll_interval_seconds: float = Field(
        default=0.0,
        description="Delay between two Receive requests while the command is running",
        ge=0,
        le=60
    )

    max_polls: Optional[int] = Field(
        default=None,
        description="Give up after this many Receive requests (None = until exit)",
        ge=1
    )

    max_workers: int = Field(
        default=4,
        description="Concurrent command executions per client",
        ge=1,
        le=64
    )

    @field_validator("poll_interval_seconds")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        """Warn about intervals that make interactive commands sluggish."""
        if v > 10:
            logger.warning("Poll interval of %ss is very high - output will lag", v)
        return v
