"""Declarative models for resources and their operations.

These are loaded from teamwork.yaml; see loader.py.
"""

import string
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator

from dovetail.api.models import HttpMethod
from dovetail.resources.transforms import FINALIZE_TRANSFORMS, PREPARE_TRANSFORMS
from dovetail.validation.rules import ValidationRule


class ArgSpec(BaseModel):
    """A positional argument of an operation, usually interpolated into the path."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: Literal["id", "choice", "value"] = "id"
    message: str | None = None  # shown when an id is rejected
    label: str | None = None  # "resource type", "tag type"
    choices: tuple[str, ...] | None = None
    optional: bool = False

    @model_validator(mode="after")
    def _check_kind(self) -> "ArgSpec":
        if self.kind == "id" and not self.message:
            raise ValueError(f"id argument '{self.name}' needs a message")
        if self.kind == "choice" and not self.choices:
            raise ValueError(f"choice argument '{self.name}' needs choices")
        return self


class OperationSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    method: HttpMethod
    path: str
    summary: str = ""
    args: tuple[ArgSpec, ...] = ()
    payload: bool = False
    query: bool = False
    rules: tuple[ValidationRule, ...] = ()
    result_key: str | None = None
    body_key: str | None = None
    body_fields: tuple[str, ...] | None = None
    body_args: dict[str, str] = {}
    static_body: dict[str, Any] = {}
    prepare: tuple[str, ...] = ()
    finalize: tuple[str, ...] = ()

    @property
    def has_body(self) -> bool:
        return bool(self.payload or self.body_args or self.static_body or self.body_key)

    @property
    def slots(self) -> list[str]:
        """Positional parameter names in call order."""
        names = [arg.name for arg in self.args]
        if self.payload:
            names.append("params")
        if self.query:
            names.append("query")
        return names

    @model_validator(mode="after")
    def _check_consistency(self) -> "OperationSpec":
        arg_names = {arg.name for arg in self.args}
        placeholders = {
            field for _, field, _, _ in string.Formatter().parse(self.path) if field
        }
        unbound = placeholders - arg_names
        if unbound:
            raise ValueError(f"path '{self.path}' uses unbound placeholders: {sorted(unbound)}")

        unknown_args = set(self.body_args.values()) - arg_names
        if unknown_args:
            raise ValueError(f"body_args refer to unknown arguments: {sorted(unknown_args)}")

        if self.has_body and self.method in ("GET", "DELETE"):
            raise ValueError(f"{self.method} operations cannot carry a body")

        for name in self.prepare:
            if name not in PREPARE_TRANSFORMS:
                raise ValueError(f"unknown prepare transform '{name}'")
        for name in self.finalize:
            if name not in FINALIZE_TRANSFORMS:
                raise ValueError(f"unknown finalize transform '{name}'")
        return self


class ResourceSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    summary: str = ""
    operations: dict[str, OperationSpec]

    @model_validator(mode="before")
    @classmethod
    def _name_operations(cls, data: Any) -> Any:
        # The YAML keys operations by name; copy the key into each entry.
        if isinstance(data, dict) and isinstance(data.get("operations"), dict):
            data = dict(data)
            data["operations"] = {
                name: {"name": name, **op} if isinstance(op, dict) else op
                for name, op in data["operations"].items()
            }
        return data
