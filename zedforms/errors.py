"""Exception types for the zedforms engine.

Field validation failures are not exceptions: they are data, carried in
``FormState.errors``. The exceptions here signal integration bugs, such as a
caller naming a field the form does not have or a resolver breaking its
contract, and are meant to fail loudly during development.
"""

from typing import Iterable, List, Optional


class FormEngineError(Exception):
    """Base class for all zedforms errors."""


class InvalidKeyError(FormEngineError):
    """Raised when an operation names a field outside the form's key set.

    Attributes:
        key: The unknown field key
        valid_keys: The sorted key set of the form

    Examples:
        >>> err = InvalidKeyError("email", ["age", "name"])
        >>> str(err)
        "Unknown field 'email'. Valid fields are: age, name"
    """

    def __init__(self, key: str, valid_keys: Iterable[str]):
        self.key = key
        self.valid_keys: List[str] = sorted(valid_keys)
        if self.valid_keys:
            message = f"Unknown field '{key}'. Valid fields are: {', '.join(self.valid_keys)}"
        else:
            message = f"Unknown field '{key}'. The form has no fields."
        super().__init__(message)


class ResolverContractViolation(FormEngineError):
    """Raised when a resolver raises or returns a malformed result.

    The engine never applies a result that violates the resolver contract,
    so the form state is left as it was before the failed call.

    Attributes:
        reason: Human-readable description of the violation
        offending_keys: Field keys involved in the violation, if any
    """

    def __init__(self, reason: str, offending_keys: Optional[Iterable[str]] = None):
        self.reason = reason
        self.offending_keys: List[str] = sorted(offending_keys or [])
        message = f"Resolver contract violated: {reason}"
        if self.offending_keys:
            message += f" (keys: {', '.join(self.offending_keys)})"
        super().__init__(message)


__all__ = [
    "FormEngineError",
    "InvalidKeyError",
    "ResolverContractViolation",
]
