import json
from typing import Any

import pytest

from dovetail.api.client import ApiClient
from dovetail.api.transport import TransportError, TransportResponse
from dovetail.dispatcher import Dovetail
from dovetail.log import reset_logging

API_KEY = "twp_test_key_123456"
BASE_URL = "https://acme.teamwork.com"


class FakeTransport:
    """Records every request and answers from a queue of scripted responses.

    With nothing queued it answers 200 with ``default`` as the JSON body.
    """

    def __init__(self, default: Any = None):
        self.default = {"STATUS": "OK"} if default is None else default
        self.calls: list[dict[str, Any]] = []
        self.responses: list[TransportResponse | Exception] = []

    def respond(self, status_code: int = 200, body: Any = None, headers: dict[str, str] | None = None):
        if isinstance(body, (bytes, str)):
            raw = body.encode("utf-8") if isinstance(body, str) else body
        else:
            raw = json.dumps(body).encode("utf-8") if body is not None else b""
        self.responses.append(
            TransportResponse(status_code=status_code, body=raw, headers=headers or {})
        )
        return self

    def fail(self, message: str = "connection refused", status_code: int | None = None):
        self.responses.append(TransportError(message, status_code=status_code))
        return self

    def execute(self, method, url, headers, body=None):
        self.calls.append({"method": method, "url": url, "headers": headers, "body": body})
        if self.responses:
            response = self.responses.pop(0)
        else:
            response = TransportResponse(
                status_code=200, body=json.dumps(self.default).encode("utf-8")
            )
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def last(self) -> dict[str, Any]:
        return self.calls[-1]

    def last_json(self) -> Any:
        body = self.last["body"]
        return json.loads(body) if body is not None else None


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    return ApiClient(API_KEY, BASE_URL, transport=transport)


@pytest.fixture
def tw(client):
    return Dovetail(client)


@pytest.fixture(autouse=True)
def restore_logging():
    # the CLI installs a handler on the runner's stderr; undo that after each test
    yield
    reset_logging()
