"""Credentials and client settings for the CLI and other bootstrap code.

The library core never reads the environment; ApiClient takes explicit
values. This module collects them from, in order of precedence:

1. explicit arguments (CLI options)
2. environment: DOVETAIL_API_KEY, DOVETAIL_API_URL or DOVETAIL_DOMAIN, DOVETAIL_TIMEOUT
3. a YAML file: ``config_path``, else $DOVETAIL_CONFIG, else ~/.dovetail.yaml

The file mirrors the classic package config::

    teamwork_api:
      key: abc123
      domain: mycompany.teamwork.com
    timeout: 30
"""

import os
from pathlib import Path
from typing import Any

import pydantic
import yaml
from pydantic import BaseModel, field_validator

from dovetail.api.client import ApiClient
from dovetail.api.transport import DEFAULT_TIMEOUT, RequestsTransport
from dovetail.errors import ConfigError

DEFAULT_CONFIG_PATH = Path("~/.dovetail.yaml")


class Settings(BaseModel):
    api_key: str
    base_url: str
    timeout: float = DEFAULT_TIMEOUT

    @field_validator("api_key", "base_url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("timeout")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value


def domain_to_url(domain: str) -> str:
    """``mycompany.teamwork.com`` -> ``https://mycompany.teamwork.com``."""
    domain = domain.strip().rstrip("/")
    if "://" in domain:
        return domain
    return f"https://{domain}"


def read_config_file(config_path: Path | None = None) -> dict[str, Any]:
    """Return the flattened settings found in the YAML config file, if any.

    An explicitly given path must exist; the default locations are optional.
    """
    explicit = config_path is not None or bool(os.environ.get("DOVETAIL_CONFIG"))
    path = config_path or Path(os.environ.get("DOVETAIL_CONFIG") or DEFAULT_CONFIG_PATH)
    path = path.expanduser()

    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return {}

    try:
        doc = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if not isinstance(doc, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    section = doc.get("teamwork_api") or {}
    if not isinstance(section, dict):
        raise ConfigError(f"`teamwork_api` in {path} must be a mapping")

    found: dict[str, Any] = {}
    if section.get("key"):
        found["api_key"] = str(section["key"])
    if section.get("url"):
        found["base_url"] = str(section["url"])
    elif section.get("domain"):
        found["base_url"] = domain_to_url(str(section["domain"]))
    if doc.get("timeout") is not None:
        found["timeout"] = doc["timeout"]
    return found


def _from_env() -> dict[str, Any]:
    found: dict[str, Any] = {}
    if os.environ.get("DOVETAIL_API_KEY"):
        found["api_key"] = os.environ["DOVETAIL_API_KEY"]
    if os.environ.get("DOVETAIL_API_URL"):
        found["base_url"] = os.environ["DOVETAIL_API_URL"]
    elif os.environ.get("DOVETAIL_DOMAIN"):
        found["base_url"] = domain_to_url(os.environ["DOVETAIL_DOMAIN"])
    if os.environ.get("DOVETAIL_TIMEOUT"):
        found["timeout"] = os.environ["DOVETAIL_TIMEOUT"]
    return found


def load_settings(
    config_path: Path | None = None,
    api_key: str | None = None,
    base_url: str | None = None,
    timeout: float | None = None,
) -> Settings:
    """Merge explicit values, environment and config file into Settings.

    Raises:
        ConfigError: If the API key or URL is missing, or a value is invalid.
    """
    values = read_config_file(config_path)
    values.update(_from_env())
    explicit = {"api_key": api_key, "base_url": base_url, "timeout": timeout}
    values.update({k: v for k, v in explicit.items() if v is not None})

    missing = [name for name in ("api_key", "base_url") if not values.get(name)]
    if missing:
        raise ConfigError(
            f"Missing Teamwork settings: {', '.join(missing)}. "
            "Pass --api-key/--base-url, set DOVETAIL_API_KEY/DOVETAIL_API_URL, "
            "or add a teamwork_api section to the config file."
        )

    try:
        return Settings(**values)
    except pydantic.ValidationError as e:
        raise ConfigError(f"Invalid Teamwork settings: {e}") from e


def build_client(settings: Settings) -> ApiClient:
    """ApiClient with a requests transport configured from ``settings``."""
    return ApiClient(
        settings.api_key,
        settings.base_url,
        transport=RequestsTransport(timeout=settings.timeout),
    )
