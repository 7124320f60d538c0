"""
Basic-auth HTTP transport for WS-Management.

Posts a rendered envelope and hands back the buffered status and body.
Status interpretation, XML parsing and fault handling belong to the
transport invoker; this layer only moves bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import requests
from requests.auth import HTTPBasicAuth

from winrmexec.domain.config import TransportOptions
from winrmexec.domain.errors import AuthenticationNotSupportedError, WinRMTransportError
from winrmexec.infrastructure.wsman.constants import CONTENT_TYPE

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@dataclass(frozen=True)
class HttpResponse:
    """Fully buffered HTTP response."""

    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        """2xx status."""
        return 200 <= self.status_code <= 299


class HttpPoster(Protocol):
    """Anything able to POST an envelope to the WinRM endpoint."""

    @property
    def target(self) -> str:
        """host:port/path, for log lines."""
        ...

    def post(self, payload: bytes) -> HttpResponse:
        """Send ``payload`` and return the buffered response."""
        ...


class HttpTransport:
    """
    requests-based poster with Basic authentication.

    One requests.Session is kept per transport so keep-alive connections are
    reused across the open/run/receive/close sequence.
    """

    def __init__(
        self,
        options: TransportOptions,
        session: requests.Session | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.options = options
        self.log = log or logger
        self._session = session or requests.Session()

    @property
    def target(self) -> str:
        return f"{self.options.host}:{self.options.port}{self.options.path}"

    def _headers(self, content_length: int) -> dict[str, str]:
        return {
            "Content-Type": CONTENT_TYPE,
            "User-Agent": self.options.user_agent,
            "Content-Length": str(content_length),
        }

    def post(self, payload: bytes) -> HttpResponse:
        """
        POST ``payload`` and buffer the whole response.

        Raises:
            AuthenticationNotSupportedError: for DOMAIN\\user accounts
            WinRMTransportError: when no HTTP response could be obtained
        """
        if self.options.is_domain_account():
            self.log.warning(
                "Domain account authentication is not supported on this platform (%s)",
                self.options.username,
            )
            raise AuthenticationNotSupportedError(self.options.username)

        try:
            response = self._session.post(
                self.options.url,
                data=payload,
                headers=self._headers(len(payload)),
                auth=HTTPBasicAuth(self.options.username, self.options.get_password()),
                timeout=self.options.timeout_seconds,
                verify=self.options.verify_ssl,
                stream=True,
            )
        except requests.RequestException as e:
            self.log.debug("POST to %s failed: %s - %s", self.target, type(e).__name__, e)
            raise WinRMTransportError(None, str(e)) from e

        try:
            raw = b"".join(response.iter_content(chunk_size=CHUNK_SIZE))
        except requests.RequestException as e:
            raise WinRMTransportError(response.status_code, str(e)) from e
        finally:
            response.close()

        # WinRM always answers application/soap+xml;charset=UTF-8
        return HttpResponse(
            status_code=response.status_code,
            text=raw.decode("utf-8", errors="replace"),
        )

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()
