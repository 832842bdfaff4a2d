"""HTTP transport boundary.

The ApiClient only needs something that can execute one request and hand
back a status code and body. RequestsTransport is the default; tests and
embedding applications can supply any object matching the Transport
protocol.
"""

from typing import Protocol, runtime_checkable

import requests
from pydantic import BaseModel

from dovetail.log import get_logger

DEFAULT_TIMEOUT = 30.0

logger = get_logger("dovetail.transport")


class TransportResponse(BaseModel):
    status_code: int
    body: bytes = b""
    headers: dict[str, str] = {}


class TransportError(Exception):
    """A request could not be completed.

    ``status_code`` is set for HTTP-level failures and None when the server
    was never reached (DNS, refused connection, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@runtime_checkable
class Transport(Protocol):
    def execute(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None = None,
    ) -> TransportResponse:
        """Execute one HTTP request and return its status, body and headers.

        Raises:
            TransportError: If the request could not be completed.
        """
        ...


class RequestsTransport:
    """Transport backed by a requests.Session. One attempt per call, no retries."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: requests.Session | None = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def execute(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None = None,
    ) -> TransportResponse:
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                data=body.encode("utf-8") if body is not None else None,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.warning("teamwork_transport_timeout", method=method, timeout=self.timeout)
            raise TransportError(f"Request timed out after {self.timeout}s: {e}") from e
        except requests.RequestException as e:
            logger.warning("teamwork_transport_connection_error", method=method, error=str(e))
            raise TransportError(f"Failed to connect to Teamwork: {e}") from e

        return TransportResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        self.session.close()
