"""Category-bound constructors for ``ErrorDetail``."""

from __future__ import annotations

from typing import Mapping, Protocol

from . import codes
from .types import ErrorCategory, ErrorDetail


class ErrorFactory(Protocol):
    def __call__(
        self,
        message: str,
        *,
        code: str = ...,
        retryable: bool = ...,
        metadata: Mapping[str, str] | None = None,
    ) -> ErrorDetail: ...


def _bound(category: ErrorCategory, default_code: str, *, retryable: bool = False) -> ErrorFactory:
    default_retryable = retryable

    def build(
        message: str,
        *,
        code: str = default_code,
        retryable: bool = default_retryable,
        metadata: Mapping[str, str] | None = None,
    ) -> ErrorDetail:
        return ErrorDetail(
            code=code,
            message=message,
            category=category,
            retryable=retryable,
            metadata=dict(metadata or {}),
        )

    build.__name__ = f"{category.value}_error"
    build.__doc__ = f"Build a {category.value} error (default code {default_code})."
    return build


validation_error = _bound(ErrorCategory.VALIDATION, codes.VALIDATION_ERROR)
not_found_error = _bound(ErrorCategory.NOT_FOUND, codes.NOT_FOUND)
conflict_error = _bound(ErrorCategory.CONFLICT, codes.CONFLICT)
policy_error = _bound(ErrorCategory.POLICY, codes.POLICY_VIOLATION)
# Dependency failures are retryable unless the caller knows better.
dependency_error = _bound(ErrorCategory.DEPENDENCY, codes.DEPENDENCY_FAILURE, retryable=True)
internal_error = _bound(ErrorCategory.INTERNAL, codes.INTERNAL_ERROR)
