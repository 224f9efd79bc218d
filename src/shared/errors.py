"""Error taxonomy for the store.

Domain code raises Protean's exceptions (``ValidationError``,
``ObjectNotFoundError``, ``ExpectedVersionError``) or the subclasses below.
Every error carries a ``messages`` mapping of field -> list of strings; the
HTTP edge translates the exception class into a stable ``error`` code and a
status with ``describe()``, so storage details never cross the boundary.
"""

from protean.exceptions import (
    ExpectedVersionError,
    InvalidOperationError,
    ObjectNotFoundError,
    ValidationError,
)


def _as_messages(messages) -> dict[str, list[str]]:
    if isinstance(messages, dict):
        return {
            field: list(value) if isinstance(value, (list, tuple)) else [str(value)]
            for field, value in messages.items()
        }
    if messages:
        return {"_entity": [str(messages)]}
    return {}


class _Messages:
    """Accept a field mapping or a bare string and keep both forms addressable."""

    def __init__(self, messages=None):
        messages = _as_messages(messages) or {"_entity": [type(self).__name__]}
        super().__init__(messages)
        self.messages = messages


class EmptyCart(_Messages, ValidationError):
    """Placement attempted with nothing in the cart."""


class InvalidCoupon(_Messages, ValidationError):
    """Unknown, inactive, expired, exhausted or otherwise unusable coupon."""


class InvalidQuantity(_Messages, ValidationError):
    pass


class Conflict(_Messages, ExpectedVersionError):
    """Concurrent modification detected; the operation may be retried."""


class Internal(_Messages, Exception):
    pass


class ReconciliationRequired(Internal):
    """A failed placement could not be confirmed as rolled back."""


class Unauthenticated(_Messages, Exception):
    pass


class Forbidden(_Messages, Exception):
    pass


def not_found(field: str, message: str) -> ObjectNotFoundError:
    exc = ObjectNotFoundError({field: [message]})
    exc.messages = {field: [message]}
    return exc


# Most specific first: the first matching class decides code and status
_ERROR_CODES = (
    (ReconciliationRequired, "reconciliation_required", 500),
    (Internal, "internal", 500),
    (Unauthenticated, "unauthenticated", 401),
    (Forbidden, "forbidden", 403),
    (EmptyCart, "empty_cart", 400),
    (InvalidCoupon, "invalid_coupon", 400),
    (InvalidQuantity, "invalid_quantity", 400),
    (ValidationError, "validation_error", 422),
    (ObjectNotFoundError, "not_found", 404),
    (ExpectedVersionError, "conflict", 409),
    (InvalidOperationError, "conflict", 409),
)

HANDLED_ERRORS = tuple(exc_class for exc_class, _, _ in _ERROR_CODES)


def error_messages(exc: Exception) -> dict[str, list[str]]:
    messages = _as_messages(getattr(exc, "messages", None))
    if not messages and exc.args:
        messages = _as_messages(exc.args[0])
    return messages or {"_entity": [type(exc).__name__]}


def describe(exc: Exception) -> tuple[int, dict]:
    """HTTP status and JSON body for an exception raised by the store."""
    for exc_class, code, status in _ERROR_CODES:
        if isinstance(exc, exc_class):
            return status, {"error": code, "messages": error_messages(exc)}
    return 500, {"error": "internal", "messages": {"_entity": ["An unexpected error occurred"]}}
