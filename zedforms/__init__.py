"""zedforms: a framework-agnostic form state engine.

zedforms tracks the state of a form independently of any UI toolkit:
- Field values with dirtiness computed against immutable defaults
- Per-field error lists produced by a pluggable resolver
- Blur-style validation that resolves the whole form but updates one field
- Submission gated on a full validation pass
- Reset back to the unvalidated default state

A binding adapter drives the engine from widget events and re-renders from
the FormState snapshots it publishes.

Basic usage:
    >>> from zedforms import FormEngine, json_schema_resolver
    >>> schema = {
    ...     "type": "object",
    ...     "properties": {
    ...         "name": {"type": "string", "minLength": 3, "maxLength": 32},
    ...         "age": {"type": "number", "minimum": 18, "maximum": 100},
    ...     },
    ... }
    >>> form = FormEngine({"name": "", "age": float("nan")}, json_schema_resolver(schema))
    >>> form.set_field_value("name", "Alice")
    >>> form.set_field_value("age", "30", {"asNumber": True})
    >>> form.submit(print)
    {'name': 'Alice', 'age': 30}
    True
"""

__version__ = "0.1.0"
__author__ = "zedforms contributors"

# Version info
VERSION = (0, 1, 0)

# Core exports
from zedforms.coercion import NAN
from zedforms.engine import FieldRegistration, FormEngine
from zedforms.errors import FormEngineError, InvalidKeyError, ResolverContractViolation
from zedforms.resolvers import Resolver, ResolverResult, json_schema_resolver
from zedforms.types import EventType, FormState, RegisterOptions

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "NAN",
    "FormEngine",
    "FieldRegistration",
    "FormState",
    "RegisterOptions",
    "EventType",
    "Resolver",
    "ResolverResult",
    "json_schema_resolver",
    "FormEngineError",
    "InvalidKeyError",
    "ResolverContractViolation",
]
