"""Response decoding and envelope-key extraction."""

import json
from typing import Any

from dovetail.errors import ResponseDecodeError, UnexpectedResponse


def decode_body(raw_body: bytes | str, status_code: int = 200, endpoint: str | None = None) -> Any:
    """Decode a JSON response body. An empty body decodes to None."""
    if isinstance(raw_body, bytes):
        raw_body = raw_body.decode("utf-8", errors="replace")
    if not raw_body.strip():
        return None
    try:
        return json.loads(raw_body)
    except json.JSONDecodeError as e:
        raise ResponseDecodeError(
            f"Invalid JSON response from Teamwork: {e.msg} (line {e.lineno})",
            status_code=status_code,
            endpoint=endpoint,
        ) from e


def extract_key(decoded: Any, key: str | None, endpoint: str | None = None) -> Any:
    """Return ``decoded[key]``, or the decoded value itself when key is None."""
    if key is None:
        return decoded
    if not isinstance(decoded, dict) or key not in decoded:
        raise UnexpectedResponse(key, endpoint=endpoint)
    return decoded[key]
