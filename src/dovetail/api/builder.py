"""Request builder: turns a RequestSpec plus credentials into a PreparedRequest."""

import base64
import json
from typing import Any
from urllib.parse import quote

from dovetail.api.models import Credentials, PreparedRequest, RequestSpec

# Teamwork authenticates with the API key as username and any password.
PLACEHOLDER_PASSWORD = "X"

METHODS_WITHOUT_BODY = ("GET", "DELETE")


class RequestBuilder:
    """Assembles the request URL, auth headers and JSON body.

    By default query values are concatenated as given, which is what the
    Teamwork API has always received from this client. Pass
    ``encode_query=True`` to percent-encode keys and values instead.
    """

    def __init__(self, encode_query: bool = False):
        self.encode_query = encode_query

    def build(self, spec: RequestSpec, credentials: Credentials) -> PreparedRequest:
        url = self.build_url(credentials.base_url, spec.path, spec.query)
        headers = {
            "Authorization": basic_auth_header(credentials.api_key),
            "Accept": "application/json",
        }

        body = None
        if spec.body is not None and spec.method not in METHODS_WITHOUT_BODY:
            body = json.dumps(spec.body)
            headers["Content-Type"] = "application/json"

        return PreparedRequest(method=spec.method, url=url, headers=headers, body=body)

    def build_url(self, base_url: str, path: str, query: dict[str, Any] | None = None) -> str:
        url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
        if query:
            url += "?" + self.build_query_string(query)
        return url

    def build_query_string(self, query: dict[str, Any]) -> str:
        """Join query parameters as k=v pairs in insertion order."""
        pairs = []
        for key, value in query.items():
            key, value = str(key), query_value(value)
            if self.encode_query:
                key, value = quote(key, safe=""), quote(value, safe="")
            pairs.append(f"{key}={value}")
        return "&".join(pairs)


def query_value(value: Any) -> str:
    """Render one query value: booleans as true/false, None as empty."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def basic_auth_header(api_key: str) -> str:
    token = base64.b64encode(f"{api_key}:{PLACEHOLDER_PASSWORD}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"
