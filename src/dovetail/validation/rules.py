"""Client-side validation of request fields.

Rules are declared per operation in the resource registry and evaluated in
declaration order. The first violated check wins and its handler-declared
message is what the caller sees, e.g.:

    `name` is a required field when creating new project.

Within one rule the checks run as required -> max_length -> allowed_values.
Length and allowed-value checks only apply to fields that are present.
"""

from typing import Any, Iterable, Literal, Mapping

from pydantic import BaseModel, ConfigDict

from dovetail.errors import InvalidRequest, ValidationError

Check = Literal["required", "max_length", "allowed_values"]


class ValidationRule(BaseModel):
    """Constraints on a single field plus the message for each violated check."""

    model_config = ConfigDict(frozen=True)

    field: str
    required: bool = False
    max_length: int | None = None
    allowed_values: frozenset[str] | None = None
    messages: dict[str, str] = {}

    def message_for(self, check: Check) -> str:
        if check in self.messages:
            return self.messages[check]
        if check == "required":
            return f"`{self.field}` is a required field."
        if check == "max_length":
            return f"`{self.field}` cannot be longer than {self.max_length} characters."
        return f"`{self.field}` must be one of: {', '.join(sorted(self.allowed_values or ()))}."


class ValidationResult(BaseModel):
    ok: bool
    message: str | None = None
    field: str | None = None

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, rule: ValidationRule, check: Check) -> "ValidationResult":
        return cls(ok=False, message=rule.message_for(check), field=rule.field)


def validate(fields: Mapping[str, Any] | None, rules: Iterable[ValidationRule]) -> ValidationResult:
    """Check ``fields`` against ``rules`` and report the first violation."""
    fields = fields or {}
    for rule in rules:
        present = rule.field in fields and fields[rule.field] is not None
        value = fields.get(rule.field)

        if rule.required and is_blank(value):
            return ValidationResult.failure(rule, "required")
        if not present:
            continue
        if rule.max_length is not None and value_size(value) > rule.max_length:
            return ValidationResult.failure(rule, "max_length")
        if rule.allowed_values is not None and not _is_allowed(value, rule.allowed_values):
            return ValidationResult.failure(rule, "allowed_values")

    return ValidationResult.success()


def require_valid(fields: Mapping[str, Any] | None, rules: Iterable[ValidationRule]) -> None:
    """Raise ValidationError with the first violated rule's message."""
    result = validate(fields, rules)
    if not result.ok:
        raise ValidationError(result.message, field=result.field)


def assert_valid_resource_id(resource_id: Any, message: str) -> None:
    """Resource IDs must be a string or an integer (bool does not count)."""
    if isinstance(resource_id, bool) or not isinstance(resource_id, (str, int)):
        raise InvalidRequest(message)


def assert_choice(value: Any, choices: Iterable[str], label: str) -> None:
    if value not in set(choices):
        raise InvalidRequest(f"The {label} specified is invalid: {value}")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def value_size(value: Any) -> int:
    if isinstance(value, (list, tuple, dict, set)):
        return len(value)
    return len(str(value))


def _is_allowed(value: Any, allowed: frozenset[str]) -> bool:
    if isinstance(value, (list, tuple, set)):
        return all(str(v) in allowed for v in value)
    return str(value) in allowed
