"""
Transport options domain model.

This module defines the TransportOptions entity describing how to reach
a WinRM endpoint over Basic-auth HTTP.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class TransportOptions(BaseModel):
    """
    Domain model for a WinRM HTTP endpoint.

    The envelope never carries the real target; host, port and path here
    decide where requests go.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_encoders={
            SecretStr: lambda v: "***"  # Mask password in JSON output
        },
    )

    host: str = Field(..., description="Remote host name or IP address")
    port: int = Field(5985, description="WinRM listener port (default 5985)")
    path: str = Field("/wsman", description="WS-Management endpoint path")
    username: str = Field(..., description="Local account used for Basic auth")
    password: SecretStr = Field(..., description="Account password")
    use_https: bool = Field(False, description="Use https:// instead of http://")
    verify_ssl: bool = Field(True, description="Validate server certificate when using https")
    timeout_seconds: Optional[float] = Field(
        60.0,
        description="Read timeout for a single HTTP exchange (None waits forever)",
        gt=0,
    )
    user_agent: str = Field("winrmexec WinRM Client", description="User-Agent header value")

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Validate host is not empty."""
        if not v or not v.strip():
            raise ValueError("Host cannot be empty")
        return v.strip()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Endpoint path must be absolute."""
        return v if v.startswith("/") else f"/{v}"

    @property
    def scheme(self) -> str:
        """URL scheme for the endpoint."""
        return "https" if self.use_https else "http"

    @property
    def url(self) -> str:
        """Full endpoint URL."""
        return f"{self.scheme}://{self.host}:{self.port}{self.path}"

    def is_domain_account(self) -> bool:
        """DOMAIN\\user accounts require NTLM."""
        return self.username.find("\\") > 0

    def get_password(self) -> str:
        """Get the plain text password."""
        return self.password.get_secret_value()  # pylint: disable=no-member
