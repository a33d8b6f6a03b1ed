"""Exception normalization into shared ``ErrorDetail`` values."""

from __future__ import annotations

from . import codes
from .factories import (
    dependency_error,
    internal_error,
    not_found_error,
    policy_error,
    validation_error,
)
from .types import ErrorDetail


def exception_to_error(exc: Exception) -> ErrorDetail:
    """Normalize a Python exception into a shared ``ErrorDetail``.

    Exceptions exposing an ``error`` attribute that is already an
    ``ErrorDetail`` are returned unchanged. Otherwise the mapping is generic;
    services layer their own normalization before falling back here.
    """
    carried = getattr(exc, "error", None)
    if isinstance(carried, ErrorDetail):
        return carried

    metadata = {"exception_type": type(exc).__name__}

    if isinstance(exc, KeyError):
        message = str(exc.args[0]) if exc.args else "resource not found"
        return not_found_error(message, code=codes.RESOURCE_NOT_FOUND, metadata=metadata)

    if isinstance(exc, ValueError):
        return validation_error(str(exc), code=codes.INVALID_ARGUMENT, metadata=metadata)

    if isinstance(exc, PermissionError):
        return policy_error(str(exc), code=codes.PERMISSION_DENIED, metadata=metadata)

    if isinstance(exc, TimeoutError):
        return dependency_error(
            str(exc) or "dependency timeout",
            code=codes.DEPENDENCY_TIMEOUT,
            metadata=metadata,
        )

    if isinstance(exc, ConnectionError):
        return dependency_error(
            str(exc) or "dependency unavailable",
            code=codes.DEPENDENCY_UNAVAILABLE,
            metadata=metadata,
        )

    return internal_error(
        str(exc) or "unexpected exception",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )
