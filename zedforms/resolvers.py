"""Resolver contract and the JSON Schema resolver.

A resolver is the engine's only validation authority: a pure callable that
takes the complete field map and returns a :class:`ResolverResult` holding a
per-field error report and the accepted values. The engine treats it as a
black box, but checks every result against the contract before applying it.

This module also provides :func:`json_schema_resolver`, which validates each
field against its subschema under ``properties`` using the jsonschema
library and translates failures into short, human-readable messages.

Usage:
    >>> schema = {
    ...     "type": "object",
    ...     "properties": {
    ...         "name": {"type": "string", "minLength": 3, "maxLength": 32},
    ...         "age": {"type": "number", "minimum": 18, "maximum": 100},
    ...     },
    ... }
    >>> resolver = json_schema_resolver(schema)
    >>> result = resolver({"name": "Al", "age": 30})
    >>> result.errors
    {'name': ['String must contain at least 3 character(s)']}
    >>> result.values
    {'age': 30}
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

import jsonschema
from jsonschema import Draft7Validator, FormatChecker
from typing_extensions import Protocol

from zedforms.coercion import is_nan
from zedforms.errors import ResolverContractViolation
from zedforms.types import ErrorReport, FieldMap

logger = logging.getLogger(__name__)

FORBIDDEN_VALUE = "Forbidden value"
"""Generic message reported when a field cannot be validated at all."""


@dataclass(frozen=True)
class ResolverResult:
    """Outcome of one resolver pass over the full field map.

    Attributes:
        errors: Field key -> ordered error messages, only for failing fields
        values: Field key -> value, for fields that passed validation
    """
    errors: ErrorReport = field(default_factory=dict)
    values: FieldMap = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        """Whether the pass reported no errors."""
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "errors": {key: list(messages) for key, messages in self.errors.items()},
            "values": dict(self.values),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResolverResult":
        """Create ResolverResult from dict.

        Error entries may be a list of messages or an ``{"errors": [...]}``
        mapping; both normalize to a list of messages.
        """
        errors = {
            key: _coerce_messages(entry)
            for key, entry in (data.get("errors") or {}).items()
        }
        return cls(errors=errors, values=dict(data.get("values") or {}))


class Resolver(Protocol):
    """Validation strategy consulted by a FormEngine.

    Implementations must not mutate ``fields``, must not raise, and may only
    report errors for keys present in ``fields``. Plain functions with this
    signature satisfy the protocol.
    """

    def __call__(self, fields: FieldMap) -> ResolverResult:
        ...


def _coerce_messages(entry: Any) -> Any:
    if isinstance(entry, Mapping):
        entry = entry.get("errors")
    if isinstance(entry, (list, tuple)):
        return list(entry)
    # Left as-is so normalize_result can report it
    return entry


def _check_section(name: str, section: Any) -> None:
    if section is not None and not isinstance(section, Mapping):
        raise ResolverContractViolation(
            f"{name} must be a mapping, got {type(section).__name__}"
        )


def normalize_result(raw: Any, field_keys: Iterable[str]) -> ResolverResult:
    """Validate a resolver's return value against the resolver contract.

    Args:
        raw: What the resolver returned (ResolverResult or mapping)
        field_keys: The form's fixed key set

    Returns:
        A ResolverResult whose error lists are private copies

    Raises:
        ResolverContractViolation: If the result has the wrong shape, reports
            unknown keys, or carries an empty or non-string message list
    """
    if isinstance(raw, ResolverResult):
        _check_section("errors", raw.errors)
        _check_section("values", raw.values)
        result = raw
    elif isinstance(raw, Mapping):
        _check_section("errors", raw.get("errors"))
        _check_section("values", raw.get("values"))
        result = ResolverResult.from_dict(raw)
    else:
        raise ResolverContractViolation(
            f"expected a ResolverResult or mapping, got {type(raw).__name__}"
        )

    errors = result.errors or {}
    known = set(field_keys)
    unknown = [key for key in errors if key not in known]
    if unknown:
        raise ResolverContractViolation(
            "error report names fields outside the form", offending_keys=unknown
        )

    malformed = [
        key
        for key, messages in errors.items()
        if not isinstance(messages, (list, tuple))
        or not messages
        or not all(isinstance(message, str) for message in messages)
    ]
    if malformed:
        raise ResolverContractViolation(
            "error entries must be non-empty lists of messages", offending_keys=malformed
        )

    return ResolverResult(
        errors={key: list(messages) for key, messages in errors.items()},
        values=dict(result.values or {}),
    )


# JSON type names keyed by Python type, for "received" wording
_JSON_TYPE_NAMES: Dict[type, str] = {
    str: "string",
    bool: "boolean",
    int: "number",
    float: "number",
    type(None): "null",
    list: "array",
    tuple: "array",
    dict: "object",
}


def _json_type_name(value: Any) -> str:
    if is_nan(value):
        return "nan"
    return _JSON_TYPE_NAMES.get(type(value), type(value).__name__)


def _expects_number(subschema: Mapping[str, Any]) -> bool:
    declared = subschema.get("type")
    if isinstance(declared, str):
        declared = [declared]
    return bool(declared) and any(t in ("number", "integer") for t in declared)


def _translate_error(error: jsonschema.ValidationError) -> str:
    """Translate a jsonschema ValidationError into a user-facing message.

    Error mapping:
        - 'type' -> Expected <type>, received <type>
        - 'minLength'/'maxLength' -> String must contain at least/most N character(s)
        - 'minimum'/'maximum' (and exclusive forms) -> Number must be ... N
        - 'enum'/'const' -> Invalid value, expected one of ...
        - 'pattern' -> String must match pattern ...
        - 'format' -> Invalid <format>
        - anything else -> jsonschema's own message
    """
    validator = error.validator
    bound = error.validator_value

    if validator == "type":
        expected = bound if isinstance(bound, str) else " | ".join(bound)
        return f"Expected {expected}, received {_json_type_name(error.instance)}"
    if validator == "minLength":
        return f"String must contain at least {bound} character(s)"
    if validator == "maxLength":
        return f"String must contain at most {bound} character(s)"
    if validator == "minimum":
        return f"Number must be greater than or equal to {bound}"
    if validator == "maximum":
        return f"Number must be less than or equal to {bound}"
    if validator == "exclusiveMinimum":
        return f"Number must be greater than {bound}"
    if validator == "exclusiveMaximum":
        return f"Number must be less than {bound}"
    if validator == "enum":
        return f"Invalid value. Expected one of: {', '.join(repr(v) for v in bound)}"
    if validator == "const":
        return f"Invalid value. Expected {bound!r}"
    if validator == "pattern":
        return f"String must match pattern {bound}"
    if validator == "format":
        return f"Invalid {bound}"
    return error.message


class JsonSchemaResolver:
    """Resolver that validates each field against a JSON Schema property.

    Each field is validated independently against
    ``schema["properties"][key]``. A field with no subschema is reported
    as forbidden. Unexpected failures while validating a field are logged
    and reported as a forbidden value, so the resolver never raises.

    Attributes:
        schema: The object schema fields are validated against
    """

    def __init__(self, schema: Dict[str, Any]) -> None:
        """Initialize the resolver with an object schema.

        Args:
            schema: A JSON Schema (Draft 7) with a ``properties`` mapping

        Raises:
            jsonschema.SchemaError: If the provided schema is invalid
        """
        Draft7Validator.check_schema(schema)
        self.schema = schema
        self._properties: Dict[str, Any] = dict(schema.get("properties") or {})
        format_checker = FormatChecker()
        self._validators: Dict[str, Draft7Validator] = {
            key: Draft7Validator(subschema, format_checker=format_checker)
            for key, subschema in self._properties.items()
        }

    def __call__(self, fields: FieldMap) -> ResolverResult:
        errors: ErrorReport = {}
        values: FieldMap = {}

        for key, value in fields.items():
            messages = self._validate_field(key, value)
            if messages:
                errors[key] = messages
            else:
                values[key] = value

        return ResolverResult(errors=errors, values=values)

    def _validate_field(self, key: str, value: Any) -> List[str]:
        validator = self._validators.get(key)
        if validator is None:
            return [FORBIDDEN_VALUE]

        try:
            if is_nan(value) and _expects_number(self._properties[key]):
                return [f"Expected number, received {_json_type_name(value)}"]
            return [_translate_error(error) for error in validator.iter_errors(value)]
        except Exception:
            logger.exception("Validation of field '%s' failed unexpectedly", key)
            return [FORBIDDEN_VALUE]


def json_schema_resolver(schema: Dict[str, Any]) -> Resolver:
    """Build a resolver from a JSON Schema object definition.

    Args:
        schema: A JSON Schema (Draft 7) with a ``properties`` mapping

    Returns:
        A resolver usable with FormEngine

    Raises:
        jsonschema.SchemaError: If the provided schema is invalid
    """
    return JsonSchemaResolver(schema)


__all__ = [
    "FORBIDDEN_VALUE",
    "Resolver",
    "ResolverResult",
    "JsonSchemaResolver",
    "json_schema_resolver",
    "normalize_result",
]
