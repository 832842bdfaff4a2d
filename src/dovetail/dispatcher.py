"""Resolves a resource name to a handler bound to one ApiClient.

Example with explicit credentials:

    >>> dovetail = Dovetail(ApiClient("my-api-key", "https://mycompany.teamwork.com"))
    >>> dovetail.projects.get(42)
    >>> dovetail.dispatch("taskLists").all_for_project(42)

Two instances with different clients talk to different accounts.
"""

import threading

from dovetail.api.client import ApiClient
from dovetail.api.models import PreparedRequest, ResponseEnvelope
from dovetail.errors import UnknownResourceError
from dovetail.log import get_logger
from dovetail.resources.handler import ResourceHandler
from dovetail.resources.loader import default_registry
from dovetail.resources.registry import ResourceRegistry, normalize_name

logger = get_logger("dovetail.dispatcher")


class Dovetail:
    """Entry point for the Teamwork API.

    Resources are resolved from a closed registry; unknown names raise
    UnknownResourceError instead of constructing anything.
    """

    def __init__(self, client: ApiClient, *, registry: ResourceRegistry | None = None):
        self.api_client = client
        self.registry = registry or default_registry()
        self._handlers: dict[str, ResourceHandler] = {}
        self._handlers_lock = threading.Lock()

    def dispatch(self, name: str) -> ResourceHandler:
        """Return the handler for ``name`` (case-insensitive).

        Raises:
            UnknownResourceError: If no resource is registered under ``name``.
        """
        spec = self.registry.get(name)
        key = normalize_name(spec.name)
        with self._handlers_lock:
            handler = self._handlers.get(key)
            if handler is None:
                handler = ResourceHandler(self.api_client, spec)
                self._handlers[key] = handler
                logger.debug("resource_dispatched", requested=name, resource=spec.name)
        return handler

    resolve = dispatch

    def __getattr__(self, name: str) -> ResourceHandler:
        if name.startswith("_") or "registry" not in self.__dict__:
            raise AttributeError(name)
        try:
            return self.dispatch(name)
        except UnknownResourceError as e:
            raise AttributeError(e.message) from e

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self.registry.names()))

    @property
    def resources(self) -> list[str]:
        return self.registry.names()

    @property
    def last_request(self) -> PreparedRequest | None:
        return self.api_client.last_request

    @property
    def last_response(self) -> ResponseEnvelope | None:
        return self.api_client.last_response
