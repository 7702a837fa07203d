"""Core type definitions for the zedforms form state engine.

This module defines the fundamental types shared by the engine, the resolver
contract, and the event channel:
- FieldMap: flat mapping of field key to an opaque field value
- ErrorReport: mapping of field key to its ordered list of error messages
- FormState: immutable snapshot of a form's derived state
- RegisterOptions: per-field options recognized by value updates
- EventType: notification types published after each engine operation
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

FieldMap = Dict[str, Any]
"""Field key -> current value. Keys are fixed for an engine's lifetime."""

ErrorReport = Dict[str, List[str]]
"""Field key -> non-empty, resolver-ordered list of error messages."""


class EventType(str, Enum):
    """Notification types emitted by a FormEngine.

    One event is emitted per completed operation, after all of its
    state changes have been applied.
    """
    FIELD_UPDATED = "field.updated"
    FIELD_VALIDATED = "field.validated"
    FORM_SUBMITTED = "form.submitted"
    FORM_RESET = "form.reset"


@dataclass(frozen=True)
class RegisterOptions:
    """Options recognized when a field value is set.

    Attributes:
        as_number: Coerce the raw input to a number before storing it.
            Unparseable input is stored as the not-a-number sentinel.

    Examples:
        >>> RegisterOptions.from_dict({"asNumber": True})
        RegisterOptions(as_number=True)
    """
    as_number: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"asNumber": self.as_number}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "RegisterOptions":
        """Create RegisterOptions from a dict using camelCase or snake_case keys."""
        if not data:
            return cls()
        as_number = data.get("asNumber", data.get("as_number", False))
        return cls(as_number=bool(as_number))


@dataclass(frozen=True)
class FormState:
    """Read-only snapshot of a form's state.

    Snapshots are detached from the engine that produced them: the dicts
    they hold are private copies, so mutating them never changes the form.

    Attributes:
        fields: Current field values
        errors: Current error report (empty when no errors are known)
        is_dirty: Whether fields differ from the defaults
        is_valid: Whether the last validation pass found no errors
        is_submitting: Whether a submit pass is in progress

    Examples:
        >>> state = FormState(fields={"name": ""}, errors={})
        >>> state.is_valid
        False
        >>> state.to_dict()["isDirty"]
        False
    """
    fields: FieldMap
    errors: ErrorReport = field(default_factory=dict)
    is_dirty: bool = False
    is_valid: bool = False
    is_submitting: bool = False

    def error_for(self, key: str) -> Optional[str]:
        """Return the primary (first) error message for a field, if any."""
        messages = self.errors.get(key)
        return messages[0] if messages else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "isSubmitting": self.is_submitting,
            "isDirty": self.is_dirty,
            "isValid": self.is_valid,
            "errors": copy.deepcopy(self.errors),
            "fields": copy.deepcopy(self.fields),
        }


__all__ = [
    "FieldMap",
    "ErrorReport",
    "EventType",
    "RegisterOptions",
    "FormState",
]
