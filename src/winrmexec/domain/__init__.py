"""
Domain layer package.

Contains pure data models and the error taxonomy, with no I/O dependencies.
"""

from winrmexec.domain.errors import (
    AuthenticationNotSupportedError,
    MalformedResponseError,
    PathNotFoundError,
    PollLimitExceededError,
    RemoteCommandError,
    SoapFaultError,
    WinRMError,
    WinRMTransportError,
)
from winrmexec.domain.models import (
    CommandHandle,
    CommandOutput,
    RequestDescriptor,
    SessionState,
)

__all__ = [
    # Errors
    "WinRMError",
    "WinRMTransportError",
    "AuthenticationNotSupportedError",
    "MalformedResponseError",
    "PathNotFoundError",
    "SoapFaultError",
    "RemoteCommandError",
    "PollLimitExceededError",
    # Models
    "CommandHandle",
    "CommandOutput",
    "RequestDescriptor",
    "SessionState",
]
