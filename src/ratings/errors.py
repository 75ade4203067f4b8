"""Error kinds raised by the Ratings engine.

NotFound and InvalidInput reuse Protean's own exceptions (``ObjectNotFoundError``
from repository lookups, ``ValidationError`` from field and invariant checks).
The remaining kinds are defined here so the API layer can map each one to a
distinct HTTP status.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError

NotFound = ObjectNotFoundError
InvalidInput = ValidationError


class PreconditionFailed(ValidationError):
    """A business precondition does not hold (state, verification, duplicates)."""

    kind = "PreconditionFailed"


class Unauthenticated(Exception):
    """An operation that needs a known reviewer was invoked anonymously."""

    kind = "Unauthenticated"

    def __init__(self, reason="Authentication is required"):
        super().__init__(reason)
        self.reason = reason


class Forbidden(Exception):
    """The actor may not perform this mutation."""

    kind = "Forbidden"

    def __init__(self, reason="Access is denied"):
        super().__init__(reason)
        self.reason = reason


def error_kind(exc: Exception) -> str:
    """Return the error-kind name for an engine exception."""
    if isinstance(exc, (PreconditionFailed, Unauthenticated, Forbidden)):
        return exc.kind
    if isinstance(exc, ObjectNotFoundError):
        return "NotFound"
    if isinstance(exc, ValidationError):
        return "InvalidInput"
    return "Internal"
