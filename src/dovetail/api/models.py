"""Data models for the request pipeline.

A call moves through these shapes in order: RequestSpec (what the handler
wants) -> PreparedRequest (what goes on the wire) -> ResponseEnvelope (what
came back).
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]


class Credentials(BaseModel):
    """Teamwork API key and account URL (e.g. https://mycompany.teamwork.com)."""

    api_key: str
    base_url: str


class RequestSpec(BaseModel):
    """A single API call as requested by a handler."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    path: str  # relative, e.g. projects/42.json
    query: dict[str, Any] | None = None
    body: Any = None


class PreparedRequest(BaseModel):
    """The fully built request handed to the transport."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    url: str
    headers: dict[str, str]
    body: str | None = None


class Pagination(BaseModel):
    """Paging metadata Teamwork returns in X-Page / X-Pages / X-Records headers."""

    page: int | None = None
    pages: int | None = None
    records: int | None = None


class ResponseEnvelope(BaseModel):
    """The last response received by an ApiClient."""

    status_code: int
    raw_body: bytes = b""
    decoded: Any = None
    headers: dict[str, str] = {}

    @property
    def pagination(self) -> Pagination:
        headers = {k.lower(): v for k, v in self.headers.items()}
        return Pagination(
            page=_int_header(headers, "x-page"),
            pages=_int_header(headers, "x-pages"),
            records=_int_header(headers, "x-records"),
        )


def _int_header(headers: dict[str, str], name: str) -> int | None:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
