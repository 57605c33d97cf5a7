# blueprints/validation/engine.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, create_model, field_validator
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError
from .rules import REQUIRED, SCHEMAS, CrossFieldCheck, FieldRule, Schema

_MODEL_CONFIG = ConfigDict(str_strip_whitespace=True, extra="ignore")

# pydantic error type -> key in FieldRule.messages
_ERROR_KEYS = {
    "missing": "required",
    "string_too_short": "min_length",
    "too_short": "min_length",
    "string_too_long": "max_length",
    "too_long": "max_length",
    "string_pattern_mismatch": "pattern",
    "enum": "choices",
    "greater_than_equal": "range",
    "less_than_equal": "range",
}


@dataclass(frozen=True)
class Accepted:
    value: Dict[str, Any]
    ok: bool = True


@dataclass(frozen=True)
class Rejected:
    errors: Dict[str, str]
    ok: bool = False


ValidationResult = Union[Accepted, Rejected]


def get_schema(name: str) -> Schema:
    try:
        return SCHEMAS[name]
    except KeyError:
        raise KeyError(f"unknown schema: {name}") from None


def _default_of(rule: FieldRule) -> Any:
    if rule.default is REQUIRED:
        return ... if rule.required else None
    return rule.default


def _field_definition(rule: FieldRule):
    default = _default_of(rule)
    annotation = Optional[rule.kind] if default is None else rule.kind
    constraints = {
        name: value
        for name, value in (
            ("min_length", rule.min_length),
            ("max_length", rule.max_length),
            ("ge", rule.ge),
            ("le", rule.le),
            ("pattern", rule.pattern),
        )
        if value is not None
    }
    return annotation, Field(default, **constraints)


def _cross_field_validator(check: CrossFieldCheck):
    def _check(cls, value, info):
        other = info.data.get(check.other)
        # the other field failed on its own; nothing to compare against
        if value is None or other is None:
            return value
        if not check.predicate(value, other):
            raise ValueError(check.message)
        return value

    _check.__name__ = f"check_{check.field}_against_{check.other}"
    return field_validator(check.field)(_check)


@lru_cache(maxsize=None)
def _model_for(name: str) -> Type[BaseModel]:
    schema = get_schema(name)
    fields = {rule.field: _field_definition(rule) for rule in schema.rules}
    validators = {}
    for check in schema.checks:
        v = _cross_field_validator(check)
        validators[f"check_{check.field}_against_{check.other}"] = v
    model_name = "".join(part.capitalize() for part in name.split("_")) + "Form"
    return create_model(model_name, __config__=_MODEL_CONFIG, __validators__=validators, **fields)


def _prepare(schema: Schema, data: Any) -> Dict[str, Any]:
    payload = dict(data) if isinstance(data, Mapping) else {}
    # blank optional inputs fall back to the rule default
    for rule in schema.rules:
        if not rule.required and payload.get(rule.field, None) in (None, ""):
            payload.pop(rule.field, None)
    return payload


def _choices(rule: FieldRule) -> str:
    if isinstance(rule.kind, type) and issubclass(rule.kind, Enum):
        return ", ".join(str(m.value) for m in rule.kind)
    return ""


def _default_message(rule: FieldRule, key: str) -> str:
    d = rule.display
    if key == "required":
        return f"{d} is required"
    if key == "min_length":
        return f"{d} must be at least {rule.min_length} characters"
    if key == "max_length":
        return f"{d} must be at most {rule.max_length} characters"
    if key == "choices":
        return f"{d} must be one of: {_choices(rule)}"
    if key == "range":
        return f"{d} must be between {rule.ge} and {rule.le}"
    return f"{d} is invalid"


def _message(rule: Optional[FieldRule], error: Mapping[str, Any]) -> str:
    if error["type"] == "value_error":
        return str(error.get("ctx", {}).get("error", error["msg"]))
    if rule is None:
        return error["msg"]
    key = _ERROR_KEYS.get(error["type"], "type")
    if rule.required and error.get("input") in (None, ""):
        key = "required"
    if key == "min_length" and (rule.min_length or 0) <= 1:
        key = "required"
    if key in rule.messages:
        return rule.messages[key]
    return _default_message(rule, key)


def _collect_errors(schema: Schema, exc: PydanticValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        name = str(loc[0]) if loc else "__all__"
        if name in errors:
            continue
        rule = schema.rule(name)
        if rule is not None and len(loc) > 1:
            # nested item (e.g. one of the files) is reported on the list field
            errors[name] = rule.messages.get("type") or _default_message(rule, "type")
            continue
        errors[name] = _message(rule, err)
    return errors


def _normalize(value: Any, tz: tzinfo) -> Any:
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=tz)
    if isinstance(value, list):
        return tuple(value)
    return value


def validate(schema_name: str, data: Any, *, tz: tzinfo = timezone.utc) -> ValidationResult:
    """Evaluate ``data`` against a named rule table.

    Malformed input never raises: the result is either ``Accepted`` with the
    normalized values or ``Rejected`` with one message per failing field.
    An unknown ``schema_name`` is a programming error and raises ``KeyError``.
    """
    schema = get_schema(schema_name)
    model = _model_for(schema.name)
    try:
        instance = model.model_validate(_prepare(schema, data))
    except PydanticValidationError as exc:
        return Rejected(_collect_errors(schema, exc))
    return Accepted({name: _normalize(value, tz) for name, value in instance})


def validate_or_raise(schema_name: str, data: Any, *, tz: tzinfo = timezone.utc,
                      assignment_id: Optional[int] = None) -> Dict[str, Any]:
    result = validate(schema_name, data, tz=tz)
    if not result.ok:
        raise ValidationError(result.errors, assignment_id=assignment_id)
    return result.value
