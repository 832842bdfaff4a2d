"""Closed registry of resource specs, keyed by normalized resource name."""

import re
from types import MappingProxyType
from typing import Iterable, Iterator

from dovetail.errors import RegistryError, UnknownResourceError
from dovetail.resources.spec import ResourceSpec


def normalize_name(name: str) -> str:
    """Case-insensitive key that also ignores '_' and '-' separators.

    ``taskLists``, ``TaskLists``, ``task_lists`` and ``task-lists`` all map
    to ``tasklists``.
    """
    return re.sub(r"[_\-\s]", "", name).lower()


class ResourceRegistry:
    """Read-only mapping from resource name to ResourceSpec."""

    def __init__(self, resources: Iterable[ResourceSpec]):
        entries: dict[str, ResourceSpec] = {}
        for resource in resources:
            key = normalize_name(resource.name)
            if key in entries:
                raise RegistryError(
                    f"Resources '{entries[key].name}' and '{resource.name}' collide as '{key}'"
                )
            entries[key] = resource
        self._entries = MappingProxyType(entries)

    def get(self, name: str) -> ResourceSpec:
        if not isinstance(name, str):
            raise UnknownResourceError(repr(name), self.names())
        try:
            return self._entries[normalize_name(name)]
        except KeyError:
            raise UnknownResourceError(name, self.names()) from None

    def names(self) -> list[str]:
        return sorted(spec.name for spec in self._entries.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._entries

    def __iter__(self) -> Iterator[ResourceSpec]:
        return iter(sorted(self._entries.values(), key=lambda spec: spec.name))

    def __len__(self) -> int:
        return len(self._entries)
