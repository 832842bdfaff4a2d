"""Generic resource handler.

One ResourceHandler serves every Teamwork resource: it reads the resource's
OperationSpec table and runs each call through the same steps:

    bind arguments -> check IDs/choices -> prepare payload -> validate
    -> build path and body -> ApiClient verb -> unwrap envelope key -> finalize

Operations are exposed as attributes, so ``handler.get(42)`` runs the
``get`` operation with 42 as its first argument.
"""

from collections.abc import Mapping
from typing import Any

from dovetail.api.client import ApiClient
from dovetail.api.unwrap import extract_key
from dovetail.errors import InvalidRequest, ValidationError
from dovetail.log import get_logger
from dovetail.resources.spec import OperationSpec, ResourceSpec
from dovetail.resources.transforms import FINALIZE_TRANSFORMS, PREPARE_TRANSFORMS
from dovetail.validation.rules import assert_choice, assert_valid_resource_id, require_valid

logger = get_logger("dovetail.handler")


class BindingError(TypeError):
    """Arguments that do not fit an operation's signature."""


class Operation:
    """A handler operation bound to its handler, callable like a method."""

    def __init__(self, handler: "ResourceHandler", spec: OperationSpec):
        self.handler = handler
        self.spec = spec
        self.__name__ = spec.name
        self.__doc__ = spec.summary or None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.handler.call(self.spec.name, *args, **kwargs)

    def __repr__(self) -> str:
        signature = ", ".join(self.spec.slots)
        return f"<operation {self.handler.name}.{self.spec.name}({signature})>"


class ResourceHandler:
    """Runs the declared operations of one resource against a shared ApiClient."""

    def __init__(self, api_client: ApiClient, spec: ResourceSpec):
        self.api_client = api_client
        self.spec = spec

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def operations(self) -> list[str]:
        return list(self.spec.operations)

    def __getattr__(self, name: str) -> Operation:
        # Only reached for names that are not regular attributes.
        spec = self.__dict__.get("spec")
        if spec is not None and name in spec.operations:
            return Operation(self, spec.operations[name])
        raise AttributeError(f"Resource '{spec.name if spec else '?'}' has no operation '{name}'")

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self.spec.operations))

    def __repr__(self) -> str:
        return f"<ResourceHandler {self.spec.name}>"

    def call(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        """Run ``operation`` with the given arguments and return the unwrapped result."""
        try:
            op = self.spec.operations[operation]
        except KeyError:
            raise AttributeError(
                f"Resource '{self.spec.name}' has no operation '{operation}'"
            ) from None

        bound = self._bind(op, args, kwargs)
        arg_values = {arg.name: bound.get(arg.name) for arg in op.args}

        self._check_args(op, arg_values)
        params = self._mapping(op, bound.get("params"), "params")
        query = self._mapping(op, bound.get("query"), "query")

        payload = None
        if op.has_body:
            payload = dict(params or {})
            for field, arg_name in op.body_args.items():
                payload[field] = arg_values[arg_name]
            payload.update(op.static_body)
            for name in op.prepare:
                payload = PREPARE_TRANSFORMS[name](payload)

        try:
            require_valid(payload if op.has_body else query, op.rules)
        except ValidationError as e:
            logger.debug(
                "teamwork_validation_failed",
                resource=self.spec.name,
                operation=op.name,
                field=e.field,
            )
            raise

        path = op.path.format(**{k: "" if v is None else v for k, v in arg_values.items()})
        result = self._send(op, path, query, self._body(op, payload))

        result = extract_key(result, op.result_key, endpoint=path)
        for name in op.finalize:
            result = FINALIZE_TRANSFORMS[name](result)
        return result

    def _send(self, op: OperationSpec, path: str, query: dict | None, body: Any) -> Any:
        if op.method == "GET":
            return self.api_client.get(path, query)
        if op.method == "DELETE":
            return self.api_client.delete(path)
        if op.method == "POST":
            return self.api_client.post(path, body)
        return self.api_client.put(path, body)

    def _bind(self, op: OperationSpec, args: tuple, kwargs: dict) -> dict[str, Any]:
        slots = op.slots
        qualified = f"{self.spec.name}.{op.name}()"
        if len(args) > len(slots):
            raise BindingError(
                f"{qualified} takes at most {len(slots)} arguments ({len(args)} given)"
            )

        bound = dict(zip(slots, args))
        for key, value in kwargs.items():
            if key not in slots:
                raise BindingError(f"{qualified} got an unexpected keyword argument '{key}'")
            if key in bound:
                raise BindingError(f"{qualified} got multiple values for argument '{key}'")
            bound[key] = value

        missing = [arg.name for arg in op.args if arg.name not in bound and not arg.optional]
        if missing:
            raise BindingError(f"{qualified} missing required argument(s): {', '.join(missing)}")
        return bound

    def _check_args(self, op: OperationSpec, arg_values: dict[str, Any]) -> None:
        for arg in op.args:
            value = arg_values[arg.name]
            if arg.kind == "id":
                assert_valid_resource_id(value, arg.message)
            elif arg.kind == "choice":
                assert_choice(value, arg.choices, arg.label or arg.name)

    def _mapping(self, op: OperationSpec, value: Any, slot: str) -> dict[str, Any] | None:
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise InvalidRequest(
                f"`{slot}` for {self.spec.name}.{op.name} must be a mapping of fields."
            )
        return dict(value)

    def _body(self, op: OperationSpec, payload: dict[str, Any] | None) -> Any:
        if payload is None:
            return None
        if op.body_fields is not None:
            payload = {field: payload[field] for field in op.body_fields if field in payload}
        if op.body_key:
            return {op.body_key: payload}
        return payload or None
