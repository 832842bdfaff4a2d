"""Error taxonomy for the Teamwork API client.

Every failure the client raises derives from DovetailError, so callers can
catch the whole family or branch on a specific kind:

- ValidationError: input failed a declared rule before any network call
- InvalidRequest: a resource ID or a closed-choice argument is not acceptable
- UnknownResourceError: dispatch asked for a resource that is not registered
- NotAuthorized: Teamwork answered 401 for the configured API key
- RequestFailed: any other non-2xx status or transport failure
- UnexpectedResponse: the decoded body lacks the declared envelope key
- RegistryError / ConfigError: startup problems
"""


def mask_api_key(api_key: str | None) -> str:
    """Mask an API key for messages and logs, keeping two characters at each end."""
    if not api_key:
        return "<none>"
    if len(api_key) <= 6:
        return "*" * len(api_key)
    return f"{api_key[:2]}…{api_key[-2:]}"


class DovetailError(Exception):
    """Base class for every error raised by dovetail."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DovetailError):
    """Input failed a declared validation rule. No request was sent."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class InvalidRequest(ValidationError):
    """A resource ID or choice argument was rejected before building a request."""


class UnknownResourceError(DovetailError):
    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = sorted(available or [])
        hint = f" Available: {', '.join(self.available)}" if self.available else ""
        super().__init__(f"Unknown resource '{name}'.{hint}")


class NotAuthorized(DovetailError):
    """Teamwork rejected the API key (HTTP 401).

    The message masks the key; the full key is kept on ``api_key`` for
    diagnostics by the caller.
    """

    def __init__(self, api_key: str, endpoint: str):
        self.api_key = api_key
        self.endpoint = endpoint
        self.status_code = 401
        super().__init__(
            f"Teamwork API key `{mask_api_key(api_key)}` does not have permission for this request."
        )


class RequestFailed(DovetailError):
    """A request failed with a non-2xx status or never reached the server.

    ``status_code`` is None for connection-level failures.
    """

    def __init__(self, message: str, status_code: int | None = None, endpoint: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class ResponseDecodeError(RequestFailed):
    """The server answered 2xx but the body is not valid JSON."""


class UnexpectedResponse(DovetailError):
    """The decoded response does not carry the expected envelope key."""

    def __init__(self, key: str, endpoint: str | None = None):
        self.key = key
        self.endpoint = endpoint
        super().__init__(f"Response from '{endpoint}' has no '{key}' key.")


class RegistryError(DovetailError):
    """The declarative resource registry is malformed."""


class ConfigError(DovetailError):
    """Credentials or settings could not be assembled."""
