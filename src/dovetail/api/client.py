"""API client holding the credentials and HTTP transport for all requests.

Example:
    >>> client = ApiClient("my-api-key", "https://mycompany.teamwork.com")
    >>> client.get("projects.json", {"page": 2, "pageSize": 50})

Several clients with different credentials can be used side by side; each
keeps its own last request/response slots.
"""

import threading
from typing import Any

from dovetail.api.builder import RequestBuilder
from dovetail.api.models import Credentials, PreparedRequest, RequestSpec, ResponseEnvelope
from dovetail.api.transport import RequestsTransport, Transport, TransportError, TransportResponse
from dovetail.api.unwrap import decode_body
from dovetail.errors import NotAuthorized, RequestFailed, mask_api_key
from dovetail.log import get_logger

# Cap on how much of an error body ends up in exception messages.
ERROR_BODY_MAX_LENGTH = 200

logger = get_logger("dovetail.client")


class ApiClient:
    """Executes GET/POST/PUT/DELETE calls against the Teamwork API.

    Verb calls are serialized per instance so ``last_request`` and
    ``last_response`` always describe the same call. Read them right after
    the call you care about; the next call overwrites both.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        transport: Transport | None = None,
        builder: RequestBuilder | None = None,
    ):
        self.credentials = Credentials(api_key=api_key, base_url=base_url)
        self.transport = transport or RequestsTransport()
        self.builder = builder or RequestBuilder()
        self.last_request: PreparedRequest | None = None
        self.last_response: ResponseEnvelope | None = None
        self._lock = threading.Lock()

    def set_api_key(self, api_key: str) -> "ApiClient":
        self.credentials.api_key = api_key
        return self

    def set_api_url(self, base_url: str) -> "ApiClient":
        self.credentials.base_url = base_url
        return self

    def get(self, path: str, query: dict[str, Any] | None = None) -> Any:
        return self.send(RequestSpec(method="GET", path=path, query=query))

    def post(self, path: str, body: Any = None) -> Any:
        return self.send(RequestSpec(method="POST", path=path, body=body))

    def put(self, path: str, body: Any = None) -> Any:
        return self.send(RequestSpec(method="PUT", path=path, body=body))

    def delete(self, path: str) -> Any:
        return self.send(RequestSpec(method="DELETE", path=path))

    def send(self, spec: RequestSpec) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            NotAuthorized: Teamwork answered 401.
            RequestFailed: Any other non-2xx status or a transport failure.
            ResponseDecodeError: A 2xx body that is not valid JSON.
        """
        with self._lock:
            request = self.builder.build(spec, self.credentials)
            self.last_request = request
            self.last_response = None

            logger.debug("teamwork_request_sent", method=spec.method, path=spec.path)
            try:
                response = self.transport.execute(
                    request.method, request.url, request.headers, request.body
                )
            except TransportError as e:
                if e.status_code is not None:
                    self.last_response = ResponseEnvelope(status_code=e.status_code)
                raise self._classify(e.status_code, e.message, spec.path) from e

            self.last_response = ResponseEnvelope(
                status_code=response.status_code,
                raw_body=response.body,
                headers=response.headers,
            )
            if not 200 <= response.status_code < 300:
                raise self._classify(response.status_code, _error_message(response), spec.path)

            decoded = decode_body(response.body, response.status_code, endpoint=spec.path)
            self.last_response.decoded = decoded
            logger.debug(
                "teamwork_request_succeeded",
                method=spec.method,
                path=spec.path,
                status_code=response.status_code,
            )
            return decoded

    def _classify(self, status_code: int | None, message: str, endpoint: str) -> Exception:
        if status_code == 401:
            logger.warning(
                "teamwork_not_authorized",
                endpoint=endpoint,
                api_key=mask_api_key(self.credentials.api_key),
            )
            return NotAuthorized(self.credentials.api_key, endpoint)

        logger.warning(
            "teamwork_request_failed",
            endpoint=endpoint,
            status_code=status_code,
            error=message,
        )
        return RequestFailed(message, status_code=status_code, endpoint=endpoint)


def _error_message(response: TransportResponse) -> str:
    detail = response.body.decode("utf-8", errors="replace").strip()[:ERROR_BODY_MAX_LENGTH]
    message = f"Teamwork API returned HTTP {response.status_code}"
    return f"{message}: {detail}" if detail else message
