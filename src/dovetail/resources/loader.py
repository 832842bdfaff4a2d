"""Reads the declarative resource definitions from YAML."""

from functools import lru_cache
from pathlib import Path

import pydantic
import yaml

from dovetail.errors import RegistryError
from dovetail.resources.registry import ResourceRegistry
from dovetail.resources.spec import ResourceSpec

RESOURCES_DIR = Path(__file__).parent

DEFAULT_REGISTRY_PATH = RESOURCES_DIR / "teamwork.yaml"


def load_registry(file_path: Path | None = None) -> ResourceRegistry:
    """Parse a registry YAML file into a ResourceRegistry.

    Raises:
        RegistryError: If the file is missing, not valid YAML, or an entry
            does not describe a valid resource.
    """
    file_path = file_path or DEFAULT_REGISTRY_PATH
    try:
        doc = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RegistryError(f"Cannot read registry {file_path}: {e}") from e
    except yaml.YAMLError as e:
        raise RegistryError(f"Registry {file_path} is not valid YAML: {e}") from e

    if not isinstance(doc, dict) or not isinstance(doc.get("resources"), dict):
        raise RegistryError(f"Registry {file_path} must define a 'resources' mapping")

    resources = []
    for name, body in doc["resources"].items():
        try:
            resources.append(ResourceSpec(name=name, **(body or {})))
        except (pydantic.ValidationError, TypeError) as e:
            raise RegistryError(f"Invalid resource '{name}' in {file_path}: {e}") from e

    return ResourceRegistry(resources)


@lru_cache(maxsize=1)
def default_registry() -> ResourceRegistry:
    """The bundled Teamwork registry, loaded once per process."""
    return load_registry(DEFAULT_REGISTRY_PATH)
