"""FormEngine: the form state machine.

The engine owns a form's field values and its derived state (dirtiness,
validity, per-field errors, submission flag) and exposes the operations
that move it between states:

- ``set_field_value``: store an edit and recompute dirtiness; never validates
- ``validate_field``: resolve the whole form, merge only one field's errors
- ``submit``: resolve the whole form, replace all errors, gate a callback
- ``reset``: return to the construction-time state

Every operation runs to completion before returning and publishes a single
FormEvent afterwards, so no observer ever sees a half-applied update. State
is read through ``get_state()``, which returns a detached snapshot.

Usage:
    >>> from zedforms.resolvers import json_schema_resolver
    >>> schema = {
    ...     "type": "object",
    ...     "properties": {"name": {"type": "string", "minLength": 3}},
    ... }
    >>> form = FormEngine({"name": ""}, json_schema_resolver(schema))
    >>> form.set_field_value("name", "Al")
    >>> form.validate_field("name")
    >>> form.get_state().errors
    {'name': ['String must contain at least 3 character(s)']}
"""

import copy
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Union

from zedforms.coercion import deep_equal, to_number
from zedforms.errors import InvalidKeyError, ResolverContractViolation
from zedforms.events import EventEmitter, EventListener, FormEvent
from zedforms.resolvers import Resolver, ResolverResult, normalize_result
from zedforms.types import ErrorReport, EventType, FieldMap, FormState, RegisterOptions

logger = logging.getLogger(__name__)

OptionsLike = Union[RegisterOptions, Mapping[str, Any], None]
SubmitCallback = Callable[[FieldMap], None]


@dataclass(frozen=True)
class FieldRegistration:
    """Framework-neutral handlers for one registered field.

    A binding adapter wires ``on_change`` to its widget's change event (passing
    the raw widget value) and ``on_blur`` to its blur event.

    Attributes:
        key: The registered field key
        value: The field's value at registration time
        on_change: Stores a new raw value using the registration's options
        on_blur: Validates this field
    """
    key: str
    value: Any
    on_change: Callable[[Any], None]
    on_blur: Callable[[], None]


class FormEngine:
    """State machine for a single form instance.

    Attributes:
        field_keys: The fixed set of field keys
        default_values: A copy of the default values snapshot

    Examples:
        >>> form = FormEngine({"age": 0}, lambda fields: ResolverResult(values=dict(fields)))
        >>> form.get_state().is_valid
        False
        >>> form.submit(lambda fields: None)
        True
        >>> form.get_state().is_valid
        True
    """

    def __init__(self, default_values: Mapping[str, Any], resolver: Resolver):
        """Initialize the engine.

        No validation runs here: ``is_valid`` starts False with an empty
        error report, meaning "not yet evaluated".

        Args:
            default_values: Initial field values; their keys fix the key set
            resolver: Validation strategy consulted on blur and submit

        Raises:
            TypeError: If default_values is not a mapping with string keys,
                or resolver is not callable
        """
        if not isinstance(default_values, Mapping):
            raise TypeError(
                f"default_values must be a mapping, got {type(default_values).__name__}"
            )
        non_string = [key for key in default_values if not isinstance(key, str)]
        if non_string:
            raise TypeError(f"Field keys must be strings, got: {non_string!r}")
        if not callable(resolver):
            raise TypeError("resolver must be callable")

        self._resolver = resolver
        self._defaults: FieldMap = copy.deepcopy(dict(default_values))
        self._keys: FrozenSet[str] = frozenset(self._defaults)
        self._emitter = EventEmitter()
        self._restore_defaults()

        logger.debug("Form created with fields: %s", ", ".join(sorted(self._keys)))

    @property
    def field_keys(self) -> FrozenSet[str]:
        return self._keys

    @property
    def default_values(self) -> FieldMap:
        return copy.deepcopy(self._defaults)

    @property
    def state(self) -> FormState:
        """Alias for get_state()."""
        return self.get_state()

    def get_state(self) -> FormState:
        """Return a detached snapshot of the current form state."""
        return FormState(
            fields=copy.deepcopy(self._fields),
            errors={key: list(messages) for key, messages in self._errors.items()},
            is_dirty=self._is_dirty,
            is_valid=self._is_valid,
            is_submitting=self._is_submitting,
        )

    def set_field_value(self, key: str, raw_input: Any, options: OptionsLike = None) -> None:
        """Store a new value for a field and recompute dirtiness.

        Does not validate and does not touch errors or validity.

        Args:
            key: Field key
            raw_input: The new value, as produced by the input surface
            options: RegisterOptions or a dict such as ``{"asNumber": True}``

        Raises:
            InvalidKeyError: If key is not one of the form's fields
        """
        self._check_key(key)
        opts = self._coerce_options(options)

        value = to_number(raw_input) if opts.as_number else copy.deepcopy(raw_input)
        self._fields[key] = value
        self._is_dirty = not deep_equal(self._fields, self._defaults)

        logger.debug("Field '%s' updated (dirty=%s)", key, self._is_dirty)
        self._publish(EventType.FIELD_UPDATED, field=key)

    def validate_field(self, key: str) -> None:
        """Validate the whole form and merge the result for one field.

        The resolver sees every field, so cross-field rules apply, but only
        ``errors[key]`` is set or cleared. Validity is then recomputed over
        the full merged report, so other fields' earlier errors still count.

        Raises:
            InvalidKeyError: If key is not one of the form's fields
            ResolverContractViolation: If the resolver raises or returns a
                malformed result; state is left unchanged
        """
        self._check_key(key)
        result = self._resolve()

        if key in result.errors:
            self._errors[key] = result.errors[key]
        else:
            self._errors.pop(key, None)
        self._is_valid = not self._errors

        logger.debug("Field '%s' validated (valid=%s)", key, key not in self._errors)
        self._publish(
            EventType.FIELD_VALIDATED,
            field=key,
            payload={"valid": key not in self._errors},
        )

    def submit(self, on_valid: SubmitCallback) -> bool:
        """Validate the whole form and call on_valid if it passes.

        Errors are replaced wholesale by the resolver's report. The callback
        receives a copy of the field values and runs only after errors,
        validity and the submitting flag are final.

        Args:
            on_valid: Called with the field values when there are no errors

        Returns:
            True if on_valid was called

        Raises:
            ResolverContractViolation: If the resolver raises or returns a
                malformed result; errors and validity are left unchanged
        """
        self._is_submitting = True
        try:
            result = self._resolve()
            self._errors = {key: messages for key, messages in result.errors.items()}
            self._is_valid = not self._errors
        finally:
            self._is_submitting = False

        logger.debug(
            "Form submitted (valid=%s, errors=%s)",
            self._is_valid,
            ", ".join(sorted(self._errors)) or "none",
        )
        self._publish(EventType.FORM_SUBMITTED, payload={"valid": self._is_valid})

        if not self._is_valid:
            return False
        on_valid(copy.deepcopy(self._fields))
        return True

    def reset(self) -> None:
        """Restore default values and the construction-time derived state.

        Validity returns to False ("unvalidated"); the resolver is not run.
        """
        self._restore_defaults()
        logger.debug("Form reset")
        self._publish(EventType.FORM_RESET)

    def register_field(self, key: str, options: OptionsLike = None) -> FieldRegistration:
        """Build change/blur handlers for one field.

        Raises:
            InvalidKeyError: If key is not one of the form's fields
        """
        self._check_key(key)
        opts = self._coerce_options(options)

        def on_change(raw_input: Any) -> None:
            self.set_field_value(key, raw_input, opts)

        def on_blur() -> None:
            self.validate_field(key)

        return FieldRegistration(
            key=key,
            value=copy.deepcopy(self._fields[key]),
            on_change=on_change,
            on_blur=on_blur,
        )

    def handle_submit(self, on_valid: SubmitCallback) -> Callable[..., bool]:
        """Build a submit handler that ignores its event arguments."""

        def handler(*_event: Any) -> bool:
            return self.submit(on_valid)

        return handler

    def subscribe(self, listener: EventListener, event_type: Optional[EventType] = None) -> None:
        """Register a listener for events of one type, or of all types."""
        if event_type is None:
            self._emitter.on_any(listener)
        else:
            self._emitter.on(event_type, listener)

    def unsubscribe(self, listener: EventListener, event_type: Optional[EventType] = None) -> None:
        """Remove a listener previously passed to subscribe()."""
        if event_type is None:
            self._emitter.off_any(listener)
        else:
            self._emitter.off(event_type, listener)

    def _restore_defaults(self) -> None:
        self._fields: FieldMap = copy.deepcopy(self._defaults)
        self._errors: ErrorReport = {}
        self._is_dirty = False
        self._is_valid = False
        self._is_submitting = False

    def _check_key(self, key: str) -> None:
        if key not in self._keys:
            raise InvalidKeyError(key, self._keys)

    @staticmethod
    def _coerce_options(options: OptionsLike) -> RegisterOptions:
        if options is None:
            return RegisterOptions()
        if isinstance(options, RegisterOptions):
            return options
        if isinstance(options, Mapping):
            return RegisterOptions.from_dict(options)
        raise TypeError(
            f"options must be RegisterOptions or a mapping, got {type(options).__name__}"
        )

    def _resolve(self) -> ResolverResult:
        """Run the resolver on a copy of the fields and check its result."""
        try:
            raw = self._resolver(copy.deepcopy(self._fields))
        except Exception as exc:
            logger.warning("Resolver raised %s: %s", type(exc).__name__, exc)
            raise ResolverContractViolation(
                f"resolver raised {type(exc).__name__}: {exc}"
            ) from exc

        try:
            return normalize_result(raw, self._keys)
        except ResolverContractViolation as exc:
            logger.warning("%s", exc)
            raise

    def _publish(
        self,
        event_type: EventType,
        field: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not self._emitter.listener_count():
            return
        event = FormEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=event_type,
            ts=datetime.now(timezone.utc),
            state=self.get_state(),
            field=field,
            payload=payload,
        )
        self._emitter.emit(event)


__all__ = [
    "FormEngine",
    "FieldRegistration",
]
